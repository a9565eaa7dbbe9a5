from __future__ import annotations

import logging
import os
import platform
from typing import Optional

from ..errors import PreconditionError

logger = logging.getLogger(__name__)

_MACHINE_ENV_KEY = r"SYSTEM\CurrentControlSet\Control\Session Manager\Environment"
_USER_ENV_KEY = "Environment"
_APP_MODEL_UNLOCK_KEY = r"SOFTWARE\Microsoft\Windows\CurrentVersion\AppModelUnlock"


def normalize_arch(machine: str) -> str:
    m = machine.lower()
    return {
        "amd64": "x64",
        "x86_64": "x64",
        "x64": "x64",
        "arm64": "arm64",
        "aarch64": "arm64",
        "x86": "x86",
        "i386": "x86",
        "i686": "x86",
    }.get(m, m)


def _read_reg_value(root, subkey: str, name: str) -> Optional[str]:
    import winreg

    try:
        with winreg.OpenKey(root, subkey) as key:
            value, _ = winreg.QueryValueEx(key, name)
    except FileNotFoundError:
        return None
    return str(value) if value else None


class WindowsHost:
    """Facts about, and the few mutations of, the local Windows host."""

    def is_elevated(self) -> bool:
        if os.name != "nt":
            return False
        import ctypes

        try:
            return bool(ctypes.windll.shell32.IsUserAnAdmin())
        except (AttributeError, OSError):
            logger.debug("IsUserAnAdmin unavailable", exc_info=True)
            return False

    def arch(self) -> str:
        return normalize_arch(platform.machine())

    def enable_developer_mode(self) -> None:
        """Set AllowDevelopmentWithoutDevLicense=1. Raises OSError on failure."""
        import winreg

        with winreg.CreateKeyEx(winreg.HKEY_LOCAL_MACHINE, _APP_MODEL_UNLOCK_KEY, 0, winreg.KEY_SET_VALUE) as key:
            winreg.SetValueEx(key, "AllowDevelopmentWithoutDevLicense", 0, winreg.REG_DWORD, 1)
        logger.info("Developer mode flag enabled")

    def persisted_path(self) -> str:
        """Return the search path as persisted for the machine and the user.

        The current process environment may predate an install that changed
        PATH; this re-reads both registry scopes instead of trusting it.
        """
        import winreg

        machine = _read_reg_value(winreg.HKEY_LOCAL_MACHINE, _MACHINE_ENV_KEY, "Path")
        user = _read_reg_value(winreg.HKEY_CURRENT_USER, _USER_ENV_KEY, "Path")
        parts = [os.path.expandvars(p) for p in (machine, user) if p]
        return ";".join(parts)


def require_elevation(host: WindowsHost) -> None:
    if not host.is_elevated():
        raise PreconditionError("This bootstrapper must be run from an elevated (Administrator) prompt")
