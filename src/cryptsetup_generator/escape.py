"""Escaping helpers for text embedded in generated unit files.

Unit names follow the systemd escaping rules: ``/`` becomes ``-`` and every
character outside ``[A-Za-z0-9:_.]`` (and a leading ``.``) is written as a
lowercase ``\\xHH`` sequence of its UTF-8 bytes.
"""

from __future__ import annotations

import re
import string
from typing import Optional

_VALID_UNIT_CHARS = frozenset(string.ascii_letters + string.digits + ":_.")

_C_ESCAPES = {
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
    "\\": "\\\\",
    '"': '\\"',
    "'": "\\'",
}


def _escape_char(ch: str) -> str:
    return "".join(f"\\x{b:02x}" for b in ch.encode("utf-8"))


def unit_name_escape(name: str) -> str:
    out = []
    for i, ch in enumerate(name):
        if ch == "/":
            out.append("-")
        elif (i == 0 and ch == ".") or ch not in _VALID_UNIT_CHARS:
            out.append(_escape_char(ch))
        else:
            out.append(ch)
    return "".join(out)


def path_simplify(path: str) -> str:
    """Collapse duplicate slashes and ``.`` components, keep ``..``."""
    absolute = path.startswith("/")
    parts = [p for p in path.split("/") if p not in ("", ".")]
    simplified = "/".join(parts)
    return "/" + simplified if absolute else simplified


def path_is_normalized(path: str) -> bool:
    return ".." not in path.split("/")


def unit_name_from_path(path: str, suffix: str) -> str:
    """Build a unit name like ``dev-sda1.device`` from an absolute path."""
    simplified = path_simplify(path)
    if simplified in ("", "/"):
        return "-" + suffix
    if not path_is_normalized(simplified):
        raise ValueError(f"path is not normalized: {path}")
    return unit_name_escape(simplified.strip("/")) + suffix


def unit_name_build(prefix: str, instance: Optional[str], suffix: str) -> str:
    if instance is None:
        return prefix + suffix
    return f"{prefix}@{instance}{suffix}"


def specifier_escape(text: str) -> str:
    return text.replace("%", "%%")


def cescape(text: str) -> str:
    out = []
    for ch in text:
        if ch in _C_ESCAPES:
            out.append(_C_ESCAPES[ch])
        elif ord(ch) < 0x20 or ord(ch) >= 0x7F:
            out.extend(f"\\{b:03o}" for b in ch.encode("utf-8", "surrogateescape"))
        else:
            out.append(ch)
    return "".join(out)


def path_startswith(path: str, prefix: str) -> Optional[str]:
    """Return the remainder of ``path`` below ``prefix`` or ``None``.

    Both sides are compared component-wise, so ``/dev//disk`` is below
    ``/dev/disk/``.
    """
    if path.startswith("/") != prefix.startswith("/"):
        return None
    path_parts = [p for p in path.split("/") if p]
    prefix_parts = [p for p in prefix.split("/") if p]
    if path_parts[: len(prefix_parts)] != prefix_parts:
        return None
    return "/".join(path_parts[len(prefix_parts):])


def path_equal(a: str, b: str) -> bool:
    return path_simplify(a) == path_simplify(b)


def prefix_root(root: str, path: str) -> str:
    """Place ``path`` below ``root`` with exactly one slash between them."""
    if not root or root == "/":
        return path
    return root.rstrip("/") + "/" + path.lstrip("/")


def path_join(*parts: str) -> str:
    joined = "/".join(p for p in parts if p)
    return re.sub(r"/{2,}", "/", joined)
