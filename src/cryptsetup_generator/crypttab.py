from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Optional


@dataclass(frozen=True)
class CrypttabEntry:
    line: int
    name: str
    device: str
    keyfile: Optional[str] = None
    options: Optional[str] = None


def parse_line(text: str, line: int) -> Optional[CrypttabEntry]:
    """Parse one crypttab line. None for blank/comment lines.

    Raises ValueError when the line does not have 2 to 4 fields.
    """
    stripped = text.strip()
    if not stripped or stripped.startswith("#"):
        return None
    fields = stripped.split()
    if not 2 <= len(fields) <= 4:
        raise ValueError(f"expected 2 to 4 fields, got {len(fields)}")
    fields += [None] * (4 - len(fields))
    return CrypttabEntry(line, *fields)


def read_crypttab(path: str, logger: logging.Logger) -> Iterator[CrypttabEntry]:
    """Yield the usable entries of ``path``.

    A missing table is the same as an empty one; unreadable tables and
    malformed lines are logged and skipped.
    """
    try:
        f = open(path, "r", encoding="utf-8", errors="surrogateescape")
    except FileNotFoundError:
        return
    except OSError as exc:
        logger.error("Failed to open %s: %s", path, exc)
        return
    with f:
        try:
            for lineno, text in enumerate(f, start=1):
                try:
                    entry = parse_line(text, lineno)
                except ValueError:
                    logger.error("Failed to parse %s:%d, ignoring.", path, lineno)
                    continue
                if entry is not None:
                    yield entry
        except OSError as exc:
            logger.error("Failed to read %s: %s", path, exc)
