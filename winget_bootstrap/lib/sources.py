from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import requests

from .net import downloaded
from .package_store import PackageStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlreadyInstalled:
    name: str


@dataclass(frozen=True)
class OfflineFile:
    path: Path


@dataclass(frozen=True)
class RemoteURL:
    url: str


PackageSource = Union[AlreadyInstalled, OfflineFile, RemoteURL]


def offline_candidate(offline_dir: Optional[Path], filename: str, *, use_offline: bool) -> Optional[Path]:
    """Return the staged file for filename if offline mode applies and it exists."""
    if not use_offline or offline_dir is None:
        return None
    p = offline_dir / filename
    if p.is_file():
        return p
    logger.info("Offline file not staged: %s", p)
    return None


def resolve_source(
    store: PackageStore,
    *,
    name: str,
    filename: str,
    url: str,
    offline_dir: Optional[Path],
    use_offline: bool,
) -> PackageSource:
    """Pick where a package comes from: installed, offline file, then remote."""

    if store.query_installed(name):
        return AlreadyInstalled(name)
    staged = offline_candidate(offline_dir, filename, use_offline=use_offline)
    if staged is not None:
        return OfflineFile(staged)
    return RemoteURL(url)


def install_from_source(
    store: PackageStore,
    source: PackageSource,
    *,
    session: Optional[requests.Session],
    suffix: str = "",
    timeout: float = 300.0,
) -> None:
    if isinstance(source, AlreadyInstalled):
        return
    if isinstance(source, OfflineFile):
        logger.info("Installing from offline file %s", source.path)
        store.install(source.path)
        return
    if session is None:
        raise RuntimeError(f"No HTTP session available to fetch {source.url}")
    with downloaded(session, source.url, suffix=suffix, timeout=timeout) as tmp:
        store.install(tmp)
