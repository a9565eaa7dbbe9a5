from __future__ import annotations

import glob
import logging
import re
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def _install_dir_version(exe: str) -> tuple:
    """Numeric version of a Package_<version>_<arch>__<publisher> install dir."""
    parts = Path(exe).parent.name.split("_")
    version = parts[1] if len(parts) > 1 else ""
    return tuple(int(n) for n in re.findall(r"\d+", version))


@dataclass(frozen=True)
class RuntimeLocations:
    """Where to look for the runtime, in priority order."""

    alias_dir: Optional[Path]
    system_pattern: Optional[str]
    command: str = "winget"
    executable: str = "winget.exe"


def locate(locations: RuntimeLocations, *, path_env: Optional[str] = None) -> Optional[Path]:
    """Return the runtime executable path, or None if it is not installed.

    Only reads the filesystem and the search path; calling it twice against
    the same host state gives the same answer.
    """

    if locations.alias_dir is not None:
        alias = locations.alias_dir / locations.executable
        if alias.is_file():
            logger.debug("Runtime found via app alias: %s", alias)
            return alias

    if locations.system_pattern:
        # Highest version wins; the path breaks ties so the choice is stable.
        matches = sorted(
            (m for m in glob.glob(locations.system_pattern) if Path(m).is_file()),
            key=lambda m: (_install_dir_version(m), m),
        )
        if matches:
            logger.debug("Runtime found in system install dir: %s", matches[-1])
            return Path(matches[-1])

    found = shutil.which(locations.command, path=path_env)
    if found:
        logger.debug("Runtime found on search path: %s", found)
        return Path(found)

    return None
