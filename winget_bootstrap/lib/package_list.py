from __future__ import annotations

import codecs
from pathlib import Path
from typing import Iterable, Iterator

# Longest BOMs first: the UTF-32 LE mark starts with the UTF-16 LE one.
_BOMS = [
    (codecs.BOM_UTF32_LE, "utf-32-le"),
    (codecs.BOM_UTF32_BE, "utf-32-be"),
    (codecs.BOM_UTF8, "utf-8"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
]


def iter_package_ids(lines: Iterable[str]) -> Iterator[str]:
    """Yield package identifiers, skipping blank lines and # comments."""
    for line in lines:
        ident = line.strip()
        if not ident or ident.startswith("#"):
            continue
        yield ident


def parse_package_list(text: str) -> list[str]:
    return list(iter_package_ids(text.splitlines()))


def decode_package_list(data: bytes) -> str:
    """Decode a package list as written by common Windows editors and shells.

    Windows PowerShell 5.1 redirection writes UTF-16 LE with a BOM; files
    without a BOM are read as UTF-8 with undecodable bytes replaced.
    """
    for bom, encoding in _BOMS:
        if data.startswith(bom):
            return data[len(bom):].decode(encoding, errors="replace")
    return data.decode("utf-8", errors="replace")


def read_package_list(path: Path) -> list[str]:
    return parse_package_list(decode_package_list(path.read_bytes()))
