from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import BootstrapCtx

logger = logging.getLogger(__name__)


class PreconditionsStep:
    """Record the run's preconditions.

    Elevation is enforced by main.run() before any step is built.
    """

    step_id = "10_preconditions"

    def run(self, ctx: BootstrapCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        decisions = state.setdefault("execution", {}).setdefault("decisions", {})
        decisions["tls_min_version"] = ctx.cfg.tls_min_version
        decisions["arch"] = ctx.arch
        decisions["use_offline"] = ctx.use_offline

        logger.info("Preconditions OK (elevated, TLS >= %s, arch=%s)", ctx.cfg.tls_min_version, ctx.arch)
        return state
