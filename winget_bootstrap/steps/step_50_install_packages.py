from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..context import BootstrapCtx
from ..lib.locator import locate
from ..lib.package_list import read_package_list
from ..state_store import add_warning

logger = logging.getLogger(__name__)

WINGET_INSTALL_FLAGS = [
    "--exact",
    "--silent",
    "--accept-source-agreements",
    "--accept-package-agreements",
]


class InstallPackagesStep:
    step_id = "50_install_packages"

    def run(self, ctx: BootstrapCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        exe = state.setdefault("execution", {})
        packages_file = ctx.packages_file
        if not packages_file.is_file():
            logger.info("No package list at %s; skipping package installs", packages_file)
            return state

        path_env = exe.get("path_env") or None
        winget = locate(ctx.runtime_locations, path_env=path_env)
        if winget is None:
            logger.warning("winget not found; skipping package installs from %s", packages_file)
            return state

        try:
            package_ids = read_package_list(packages_file)
        except (OSError, UnicodeError) as e:
            logger.warning("Could not read package list %s; skipping package installs: %s", packages_file, e)
            add_warning(state, package_list=str(packages_file), error=str(e))
            return state

        env = {"PATH": path_env} if path_env else None
        results: List[Dict[str, Any]] = exe.setdefault("packages", [])
        for package_id in package_ids:
            logger.info("Installing %s", package_id)
            try:
                r = ctx.store.run_command([str(winget), "install", "--id", package_id, *WINGET_INSTALL_FLAGS], env=env)
                returncode, detail = r.returncode, (r.stderr.strip() or r.stdout.strip())
            except OSError as e:
                returncode, detail = None, str(e)

            ok = returncode == 0
            results.append({"id": package_id, "ok": ok, "returncode": returncode})
            if not ok:
                logger.warning("Failed to install %s (exit %s): %s", package_id, returncode, detail)
                add_warning(state, package=package_id, returncode=returncode)

        failed = sum(1 for r in results if not r["ok"])
        logger.info("Package installs finished: %d ok, %d failed", len(results) - failed, failed)
        return state
