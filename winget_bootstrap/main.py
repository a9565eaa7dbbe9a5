from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from .config import BootstrapConfig, load_config
from .context import BootstrapCtx
from .errors import PreconditionError
from .lib.host import WindowsHost, require_elevation
from .lib.net import make_session
from .lib.package_store import AppxPackageStore, PackageStore
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .pipeline import run_pipeline
from .state_store import ensure_defaults, save_report
from .steps import (
    InstallDependenciesStep,
    InstallPackagesStep,
    InstallRuntimeStep,
    PreconditionsStep,
    VerifyRuntimeStep,
)

logger = logging.getLogger(__name__)

EXIT_NOT_ELEVATED = 1
EXIT_FAILED = 2


def build_steps():
    return [
        PreconditionsStep(),
        InstallDependenciesStep(),
        InstallRuntimeStep(),
        VerifyRuntimeStep(),
        InstallPackagesStep(),
    ]


def _local_app_data() -> Optional[Path]:
    value = os.environ.get("LOCALAPPDATA")
    return Path(value) if value else None


def run(
    *,
    cfg: BootstrapConfig,
    use_offline: bool = False,
    host: Optional[WindowsHost] = None,
    store: Optional[PackageStore] = None,
    session=None,
    report_path: Optional[str] = None,
) -> Dict[str, Any]:
    """Run the bootstrap pipeline and return the run state."""

    host = host or WindowsHost()
    # Checked again for callers that use run() directly instead of main().
    require_elevation(host)

    own_session = session is None
    if own_session:
        session = make_session(min_tls=cfg.tls_min_version)

    ctx = BootstrapCtx(
        cfg=cfg,
        store=store or AppxPackageStore(),
        host=host,
        use_offline=use_offline,
        session=session,
        local_app_data=_local_app_data(),
        arch=cfg.arch or host.arch(),
    )

    state = ensure_defaults({})
    state["config"] = {
        "use_offline": use_offline,
        "offline_dir": str(ctx.offline_dir),
        "packages_file": str(ctx.packages_file),
    }

    try:
        result = run_pipeline(ctx=ctx, state=state, steps=build_steps())
        state = result.state
        state.setdefault("execution", {}).setdefault("summary", {})["ran_steps"] = result.ran_steps
        return state
    except Exception as e:
        logger.exception("Bootstrap failed")
        state.setdefault("execution", {}).setdefault("errors", []).append(
            {
                "step": (state.get("execution") or {}).get("current_step"),
                "error": str(e),
            }
        )
        raise
    finally:
        if own_session:
            session.close()
        if report_path:
            save_report(report_path, state)


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="winget-bootstrap", description="Install winget and its dependencies.")
    p.add_argument("--use-offline", action="store_true", help="Prefer staged files in the offline directory")
    p.add_argument("--quiet", action="store_true", help="Only show warnings and errors on the console")
    p.add_argument("--packages-file", default=None, help="Package list to install with winget after bootstrap")
    p.add_argument("--offline-dir", default=None, help="Directory holding staged offline packages")
    p.add_argument("--config", default=None, help="YAML config overriding endpoints and file names")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to bootstrap log")
    p.add_argument("--report", default=None, help="Write the run state to this path (json|yaml)")

    args = p.parse_args(argv)

    host = WindowsHost()
    try:
        require_elevation(host)
    except PreconditionError as e:
        # Nothing may be written before this check passes, the log file included.
        configure_logging(log_path=None, quiet=args.quiet)
        logger.error("%s", e)
        return EXIT_NOT_ELEVATED

    configure_logging(log_path=args.log, quiet=args.quiet)

    try:
        cfg = load_config(args.config).with_overrides(
            offline_dir=args.offline_dir,
            packages_file=args.packages_file,
        )
        run(cfg=cfg, use_offline=args.use_offline, host=host, report_path=args.report)
    except (RuntimeError, OSError, ValueError) as e:
        logger.error("Bootstrap aborted: %s", e)
        return EXIT_FAILED
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
