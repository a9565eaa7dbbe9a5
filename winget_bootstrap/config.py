from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

PACKAGE_ROOT = Path(__file__).resolve().parent

DEFAULT_DEPENDENCIES: List[Dict[str, str]] = [
    {
        "name": "Microsoft.VCLibs.140.00.UWPDesktop",
        "filename": "Microsoft.VCLibs.{arch}.14.00.Desktop.appx",
        "url": "https://aka.ms/Microsoft.VCLibs.{arch}.14.00.Desktop.appx",
    },
    {
        "name": "Microsoft.UI.Xaml.2.8",
        "filename": "Microsoft.UI.Xaml.2.8.{arch}.appx",
        "url": "https://github.com/microsoft/microsoft-ui-xaml/releases/download/v2.8.6/Microsoft.UI.Xaml.2.8.{arch}.appx",
    },
]

DEFAULT_RUNTIME: Dict[str, str] = {
    "filename": "Microsoft.DesktopAppInstaller_8wekyb3d8bbwe.msixbundle",
    "primary_url": "https://aka.ms/getwinget",
    "fallback_url": (
        "https://github.com/microsoft/winget-cli/releases/latest/download/"
        "Microsoft.DesktopAppInstaller_8wekyb3d8bbwe.msixbundle"
    ),
    "command": "winget",
    "system_pattern": r"C:\Program Files\WindowsApps\Microsoft.DesktopAppInstaller_*_{arch}__8wekyb3d8bbwe\winget.exe",
}


@dataclass(frozen=True)
class PackageSpec:
    name: str
    filename: str
    url: str

    @property
    def suffix(self) -> str:
        return Path(self.filename).suffix


@dataclass(frozen=True)
class RuntimeSpec:
    filename: str
    primary_url: str
    fallback_url: str
    command: str
    system_pattern: str

    @property
    def suffix(self) -> str:
        return Path(self.filename).suffix


@dataclass(frozen=True)
class BootstrapConfig:
    raw: Dict[str, Any]

    @property
    def arch(self) -> Optional[str]:
        arch = self.raw.get("arch")
        return str(arch) if arch else None

    @property
    def tls_min_version(self) -> str:
        return str(self.raw.get("tls_min_version") or "1.2")

    @property
    def download_timeout(self) -> float:
        return float(self.raw.get("download_timeout") or 300.0)

    @property
    def offline_dir(self) -> Path:
        return Path(self.raw.get("offline_dir") or (PACKAGE_ROOT / "offline"))

    @property
    def packages_file(self) -> Path:
        return Path(self.raw.get("packages_file") or (PACKAGE_ROOT / "packages.txt"))

    def dependencies(self, arch: str) -> List[PackageSpec]:
        deps = self.raw.get("dependencies") or DEFAULT_DEPENDENCIES
        if not isinstance(deps, list):
            raise ValueError("config: dependencies must be a list")
        out: List[PackageSpec] = []
        for d in deps:
            if not isinstance(d, dict) or not all(d.get(k) for k in ("name", "filename", "url")):
                raise ValueError(f"config: dependency entries need name, filename and url: {d!r}")
            out.append(
                PackageSpec(
                    name=str(d["name"]),
                    filename=str(d["filename"]).format(arch=arch),
                    url=str(d["url"]).format(arch=arch),
                )
            )
        return out

    def runtime(self, arch: str) -> RuntimeSpec:
        rt = dict(DEFAULT_RUNTIME)
        rt.update(self.raw.get("runtime") or {})
        return RuntimeSpec(**{k: str(v).format(arch=arch) for k, v in rt.items() if k in DEFAULT_RUNTIME})

    def with_overrides(self, **overrides: Any) -> "BootstrapConfig":
        raw = dict(self.raw)
        raw.update({k: v for k, v in overrides.items() if v is not None})
        return BootstrapConfig(raw=raw)


def load_config(path: Optional[str]) -> BootstrapConfig:
    if not path:
        return BootstrapConfig(raw={})

    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(path)

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("bootstrap config must be YAML")

    try:
        import yaml  # type: ignore
    except Exception as e:
        raise RuntimeError("PyYAML is required to read the bootstrap config") from e

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"bootstrap config {p} is not valid YAML: {e}") from e
    if not isinstance(raw, dict):
        raise ValueError("bootstrap config must contain a mapping/object")

    return BootstrapConfig(raw=raw)
