from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import requests

from .config import BootstrapConfig, PackageSpec, RuntimeSpec
from .lib.host import WindowsHost
from .lib.locator import RuntimeLocations
from .lib.package_store import PackageStore


@dataclass
class BootstrapCtx:
    cfg: BootstrapConfig
    store: PackageStore
    host: WindowsHost
    use_offline: bool = False
    session: Optional[requests.Session] = None
    local_app_data: Optional[Path] = None
    arch: str = field(default="x64")

    @property
    def offline_dir(self) -> Path:
        return self.cfg.offline_dir

    @property
    def packages_file(self) -> Path:
        return self.cfg.packages_file

    @property
    def dependencies(self) -> list[PackageSpec]:
        return self.cfg.dependencies(self.arch)

    @property
    def runtime(self) -> RuntimeSpec:
        return self.cfg.runtime(self.arch)

    @property
    def runtime_locations(self) -> RuntimeLocations:
        alias_dir = self.local_app_data / "Microsoft" / "WindowsApps" if self.local_app_data else None
        rt = self.runtime
        return RuntimeLocations(
            alias_dir=alias_dir,
            system_pattern=rt.system_pattern,
            command=rt.command,
            executable=f"{rt.command}.exe",
        )
