from __future__ import annotations

import enum
import functools
import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional

import requests

from ..config import RuntimeSpec
from ..errors import InstallError, RuntimeInstallError
from .net import downloaded
from .package_store import PackageStore
from .sources import offline_candidate

logger = logging.getLogger(__name__)


class RuntimeInstallState(str, enum.Enum):
    NOT_NEEDED = "not_needed"
    OFFLINE_INSTALL = "offline_install"
    PRIMARY_REMOTE_INSTALL = "primary_remote_install"
    FALLBACK_REMOTE_INSTALL = "fallback_remote_install"
    FAILED = "failed"


class RuntimeInstaller:
    """Install the runtime bundle.

    Transitions:

        NOT_NEEDED                      (runtime already located; terminal)
        OFFLINE_INSTALL                 (terminal; failure is fatal)
        PRIMARY_REMOTE_INSTALL  -fail-> FALLBACK_REMOTE_INSTALL -fail-> FAILED

    Each remote endpoint is tried exactly once. run() returns the state in
    which the install succeeded; FAILED raises RuntimeInstallError.
    """

    def __init__(
        self,
        *,
        store: PackageStore,
        spec: RuntimeSpec,
        session: Optional[requests.Session],
        offline_dir: Optional[Path],
        use_offline: bool,
        enable_developer_mode: Callable[[], None],
        download_timeout: float = 300.0,
    ) -> None:
        self.store = store
        self.spec = spec
        self.session = session
        self.offline_dir = offline_dir
        self.use_offline = use_offline
        self.enable_developer_mode = enable_developer_mode
        self.download_timeout = download_timeout
        self.visited: List[RuntimeInstallState] = []
        self._handlers: Dict[RuntimeInstallState, Callable[[], Optional[RuntimeInstallState]]] = {
            RuntimeInstallState.PRIMARY_REMOTE_INSTALL: self._primary_remote_install,
            RuntimeInstallState.FALLBACK_REMOTE_INSTALL: self._fallback_remote_install,
            RuntimeInstallState.FAILED: self._failed,
        }

    def run(self, existing: Optional[Path]) -> RuntimeInstallState:
        if existing is not None:
            logger.info("winget already installed at %s", existing)
            self.visited.append(RuntimeInstallState.NOT_NEEDED)
            return RuntimeInstallState.NOT_NEEDED

        self._try_enable_developer_mode()

        handlers = dict(self._handlers)
        staged = offline_candidate(self.offline_dir, self.spec.filename, use_offline=self.use_offline)
        if staged is not None:
            handlers[RuntimeInstallState.OFFLINE_INSTALL] = functools.partial(self._offline_install, staged)
            state = RuntimeInstallState.OFFLINE_INSTALL
        else:
            state = RuntimeInstallState.PRIMARY_REMOTE_INSTALL
        while True:
            self.visited.append(state)
            logger.debug("Runtime install state: %s", state.value)
            nxt = handlers[state]()
            if nxt is None:
                return state
            state = nxt

    def _try_enable_developer_mode(self) -> None:
        try:
            self.enable_developer_mode()
        except OSError as e:
            logger.warning("Could not enable developer mode (continuing): %s", e)

    def _offline_install(self, staged: Path) -> Optional[RuntimeInstallState]:
        logger.info("Installing winget from offline bundle %s", staged)
        try:
            self.store.install(staged)
        except InstallError as e:
            raise RuntimeInstallError(f"Offline install of {staged} failed: {e}") from e
        return None

    def _remote_install(self, url: str) -> None:
        if self.session is None:
            raise RuntimeError(f"No HTTP session available to fetch {url}")
        with downloaded(self.session, url, suffix=self.spec.suffix, timeout=self.download_timeout) as tmp:
            self.store.install(tmp)

    def _primary_remote_install(self) -> Optional[RuntimeInstallState]:
        try:
            self._remote_install(self.spec.primary_url)
        except (requests.RequestException, OSError, RuntimeError) as e:
            logger.warning("Primary winget download/install failed, trying fallback: %s", e)
            return RuntimeInstallState.FALLBACK_REMOTE_INSTALL
        return None

    def _fallback_remote_install(self) -> Optional[RuntimeInstallState]:
        try:
            self._remote_install(self.spec.fallback_url)
        except (requests.RequestException, OSError, RuntimeError) as e:
            logger.error("Fallback winget download/install failed: %s", e)
            return RuntimeInstallState.FAILED
        return None

    def _failed(self) -> Optional[RuntimeInstallState]:
        raise RuntimeInstallError(
            "Failed to install winget from both the primary and fallback endpoints. "
            "Stage the bundle in the offline directory and re-run with --use-offline."
        )
