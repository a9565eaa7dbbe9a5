from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import BootstrapCtx
from ..errors import RuntimeNotFoundError
from ..lib.locator import locate

logger = logging.getLogger(__name__)


class VerifyRuntimeStep:
    step_id = "40_verify_runtime"

    def run(self, ctx: BootstrapCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        path_env = ctx.host.persisted_path()
        exe = state.setdefault("execution", {})
        exe["path_env"] = path_env

        winget = locate(ctx.runtime_locations, path_env=path_env or None)
        if winget is None:
            raise RuntimeNotFoundError("winget was not found after installation")

        runtime = exe.setdefault("runtime", {})
        runtime["path"] = str(winget)

        # Advisory only: a failing version query does not fail the run.
        r = ctx.store.run_command([str(winget), "--version"], env={"PATH": path_env} if path_env else None)
        version = r.stdout.strip()
        if r.returncode != 0:
            logger.warning("winget --version exited with %s: %s", r.returncode, r.stderr.strip())
        if version:
            print(version)
        runtime["version"] = version or None

        logger.info("winget verified at %s (%s)", winget, version or "unknown version")
        return state
