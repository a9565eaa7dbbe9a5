from __future__ import annotations

import contextlib
import logging
import os
import ssl
import tempfile
from pathlib import Path
from typing import Iterator

import requests
from requests.adapters import HTTPAdapter

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024

_TLS_VERSIONS = {
    "1.2": ssl.TLSVersion.TLSv1_2,
    "1.3": ssl.TLSVersion.TLSv1_3,
}


def parse_tls_version(value: str) -> ssl.TLSVersion:
    try:
        return _TLS_VERSIONS[str(value).strip()]
    except KeyError:
        raise ValueError(f"Unsupported tls_min_version {value!r} (expected one of {sorted(_TLS_VERSIONS)})") from None


class TLSAdapter(HTTPAdapter):
    """HTTPAdapter whose connections refuse anything below a minimum TLS version."""

    def __init__(self, min_version: ssl.TLSVersion, **kwargs) -> None:
        self.ssl_context = ssl.create_default_context()
        self.ssl_context.minimum_version = min_version
        super().__init__(**kwargs)

    def init_poolmanager(self, *args, **kwargs):
        kwargs["ssl_context"] = self.ssl_context
        return super().init_poolmanager(*args, **kwargs)

    def proxy_manager_for(self, *args, **kwargs):
        kwargs["ssl_context"] = self.ssl_context
        return super().proxy_manager_for(*args, **kwargs)


def make_session(*, min_tls: str = "1.2") -> requests.Session:
    session = requests.Session()
    adapter = TLSAdapter(parse_tls_version(min_tls))
    session.mount("https://", adapter)
    logger.debug("HTTP session created (min TLS %s)", min_tls)
    return session


@contextlib.contextmanager
def downloaded(
    session: requests.Session,
    url: str,
    *,
    suffix: str = "",
    timeout: float = 300.0,
) -> Iterator[Path]:
    """Download url completely into a temporary file and yield its path.

    The file is removed when the block exits, whether it completes or raises.
    """

    fd, name = tempfile.mkstemp(prefix="winget-bootstrap-", suffix=suffix)
    path = Path(name)
    try:
        logger.info("Downloading %s", url)
        with os.fdopen(fd, "wb") as f:
            with session.get(url, stream=True, timeout=(10, timeout)) as r:
                r.raise_for_status()
                for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
        logger.info("Downloaded %s (%d bytes)", url, path.stat().st_size)
        yield path
    finally:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
