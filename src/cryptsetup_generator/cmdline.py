"""Reading the kernel command line as ``(key, value)`` pairs."""

from __future__ import annotations

import os
import shlex
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

CMDLINE_ENV = "SYSTEMD_PROC_CMDLINE"
RD_PREFIX = "rd."

_TRUE = ("1", "yes", "y", "true", "t", "on")
_FALSE = ("0", "no", "n", "false", "f", "off")


def parse_boolean(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"invalid boolean: {value!r}")


def in_initrd(initrd_release_path: str = "/etc/initrd-release") -> bool:
    return Path(initrd_release_path).exists()


def read_cmdline(path: str = "/proc/cmdline") -> str:
    override = os.environ.get(CMDLINE_ENV)
    if override is not None:
        return override
    return Path(path).read_text(encoding="utf-8", errors="surrogateescape")


def split_words(line: str) -> List[str]:
    try:
        return shlex.split(line)
    except ValueError:
        # unbalanced quotes: fall back to plain whitespace splitting
        return line.split()


def iter_parameters(line: str, strip_rd_prefix: bool = True, initrd: bool = False) -> Iterator[Tuple[str, Optional[str]]]:
    """Yield ``(key, value)`` for every word; ``value`` is None without ``=``.

    With ``strip_rd_prefix``, ``rd.`` parameters are reported without the
    prefix when running in the initrd and skipped otherwise.
    """
    for word in split_words(line):
        key, sep, value = word.partition("=")
        if strip_rd_prefix and key.startswith(RD_PREFIX):
            if not initrd:
                continue
            key = key[len(RD_PREFIX):]
        yield key, (value if sep else None)

