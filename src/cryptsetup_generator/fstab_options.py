"""Parsing of fstab/crypttab style comma separated option strings."""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Tuple


def split_options(options: Optional[str]) -> List[str]:
    if not options:
        return []
    return [opt for opt in options.split(",") if opt]


def _match(option: str, name: str) -> Optional[str]:
    """Return "" for a bare match, the value for ``name=value``, else None."""
    if not option.startswith(name):
        return None
    rest = option[len(name):]
    if rest == "":
        return ""
    if rest.startswith("="):
        return rest[1:]
    return None


def has_option(options: Optional[str], names: Iterable[str]) -> bool:
    """True if any of ``names`` is present, bare or as ``name=value``."""
    names = tuple(names)
    return any(_match(opt, name) is not None for opt in split_options(options) for name in names)


def yes_no_option(options: Optional[str], yes: str, no: str) -> bool:
    """The last of ``yes``/``no`` found wins; neither present means no."""
    result = False
    for opt in split_options(options):
        if _match(opt, yes) is not None:
            result = True
        elif _match(opt, no) is not None:
            result = False
    return result


def filter_options(options: Optional[str], names: Iterable[str]) -> Tuple[bool, Optional[str], str]:
    """Find ``names`` in ``options`` and strip them.

    Returns ``(found, value, filtered)``. ``value`` is the value of the last
    occurrence (``None`` if it had no ``=``) and ``filtered`` the remaining
    options joined with commas.
    """
    names = tuple(names)
    found = False
    value: Optional[str] = None
    kept = []
    for opt in split_options(options):
        for name in names:
            matched = _match(opt, name)
            if matched is not None:
                found = True
                value = matched if opt != name else None
                break
        else:
            kept.append(opt)
    return found, value, ",".join(kept)


_TIMESPAN_UNITS = (
    "usec", "us", "µs", "msec", "ms", "seconds", "second", "sec", "s",
    "minutes", "minute", "min", "m", "hours", "hour", "hr", "h",
    "days", "day", "d", "weeks", "week", "w", "months", "month", "M",
    "years", "year", "y",
)
_TIMESPAN_RE = re.compile(
    r"^\s*(?:\d+(?:\.\d+)?\s*(?:%s)?\s*)+$" % "|".join(re.escape(u) for u in _TIMESPAN_UNITS)
)


def is_valid_timespan(value: Optional[str]) -> bool:
    """Accept systemd time spans such as ``0``, ``90``, ``1min 30s`` or ``infinity``."""
    if value is None:
        return False
    if value.strip() == "infinity":
        return True
    return bool(_TIMESPAN_RE.match(value))
