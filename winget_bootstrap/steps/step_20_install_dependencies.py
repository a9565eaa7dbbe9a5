from __future__ import annotations

import logging
from typing import Any, Dict

import requests

from ..context import BootstrapCtx
from ..errors import DependencyInstallError
from ..lib.sources import AlreadyInstalled, OfflineFile, install_from_source, resolve_source

logger = logging.getLogger(__name__)


class InstallDependenciesStep:
    step_id = "20_install_dependencies"

    def run(self, ctx: BootstrapCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        sources = state.setdefault("execution", {}).setdefault("decisions", {}).setdefault("dependencies", {})

        # Order matters: a failure stops the run before later dependencies.
        for dep in ctx.dependencies:
            source = resolve_source(
                ctx.store,
                name=dep.name,
                filename=dep.filename,
                url=dep.url,
                offline_dir=ctx.offline_dir,
                use_offline=ctx.use_offline,
            )
            if isinstance(source, AlreadyInstalled):
                logger.info("%s is already installed", dep.name)
                sources[dep.name] = "installed"
                continue

            sources[dep.name] = str(source.path) if isinstance(source, OfflineFile) else source.url
            try:
                install_from_source(
                    ctx.store,
                    source,
                    session=ctx.session,
                    suffix=dep.suffix,
                    timeout=ctx.cfg.download_timeout,
                )
            except (requests.RequestException, OSError, RuntimeError) as e:
                raise DependencyInstallError(f"Failed to install {dep.name}: {e}") from e
            logger.info("%s installed", dep.name)

        return state
