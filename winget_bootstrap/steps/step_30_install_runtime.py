from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import BootstrapCtx
from ..lib.locator import locate
from ..lib.runtime_install import RuntimeInstaller

logger = logging.getLogger(__name__)


class InstallRuntimeStep:
    step_id = "30_install_runtime"

    def run(self, ctx: BootstrapCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        installer = RuntimeInstaller(
            store=ctx.store,
            spec=ctx.runtime,
            session=ctx.session,
            offline_dir=ctx.offline_dir,
            use_offline=ctx.use_offline,
            enable_developer_mode=ctx.host.enable_developer_mode,
            download_timeout=ctx.cfg.download_timeout,
        )
        runtime = state.setdefault("execution", {}).setdefault("runtime", {})
        try:
            final = installer.run(locate(ctx.runtime_locations))
        finally:
            runtime["states"] = [s.value for s in installer.visited]

        runtime["install"] = final.value
        logger.info("winget install finished (%s)", final.value)
        return state
