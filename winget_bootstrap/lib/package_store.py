from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping, Protocol, Sequence

from ..errors import InstallError
from .command import CmdResult, powershell_argv, ps_quote, run_cmd

logger = logging.getLogger(__name__)


class PackageStore(Protocol):
    """The OS package store, reduced to what the bootstrapper needs."""

    def query_installed(self, name: str) -> bool:
        ...

    def install(self, path: Path) -> None:
        ...

    def run_command(self, argv: Sequence[str], *, env: Mapping[str, str] | None = None) -> CmdResult:
        ...


class AppxPackageStore:
    """PackageStore backed by the Appx PowerShell cmdlets."""

    def __init__(self, *, timeout: float | None = None) -> None:
        self.timeout = timeout

    def query_installed(self, name: str) -> bool:
        script = (
            f"Get-AppxPackage -AllUsers -Name {ps_quote(name)} "
            "| Select-Object -First 1 -ExpandProperty PackageFullName"
        )
        r = run_cmd(powershell_argv(script), check=False, timeout=self.timeout)
        if not r.ok:
            logger.warning("Get-AppxPackage failed for %s (%s): %s", name, r.returncode, r.stderr.strip())
            return False
        full_name = r.stdout.strip()
        if full_name:
            logger.debug("Found %s as %s", name, full_name)
        return bool(full_name)

    def install(self, path: Path) -> None:
        # Force flags make the install succeed over older or partial versions
        # and close running instances of the package being replaced.
        script = (
            f"Add-AppxPackage -Path {ps_quote(str(path))} "
            "-ForceApplicationShutdown -ForceUpdateFromAnyVersion -ErrorAction Stop"
        )
        r = run_cmd(powershell_argv(script), check=False, timeout=self.timeout)
        if not r.ok:
            raise InstallError(f"Add-AppxPackage failed for {path} ({r.returncode}): {r.stderr.strip()}")
        logger.info("Installed package file %s", path)

    def run_command(self, argv: Sequence[str], *, env: Mapping[str, str] | None = None) -> CmdResult:
        return run_cmd(argv, check=False, env=env)
