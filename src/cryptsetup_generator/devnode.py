from __future__ import annotations

import string

_TAGS = (
    ("LABEL=", "by-label"),
    ("UUID=", "by-uuid"),
    ("PARTUUID=", "by-partuuid"),
    ("PARTLABEL=", "by-partlabel"),
)

_PLAIN_CHARS = frozenset(string.ascii_letters + string.digits + "#+-.:=@_")


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def encode_devnode_name(value: str) -> str:
    """Encode a tag value the way udev names its /dev/disk/by-* links."""
    out = []
    for ch in value:
        if ch in _PLAIN_CHARS or (ord(ch) > 0x7F and ch.isprintable()):
            out.append(ch)
        else:
            out.extend(f"\\x{b:02x}" for b in ch.encode("utf-8", "surrogateescape"))
    return "".join(out)


def fstab_node_to_udev_node(node: str) -> str:
    """Turn ``UUID=...``-style references into their /dev/disk/by-* path.

    Anything else is returned as given.
    """
    for tag, directory in _TAGS:
        if node.startswith(tag):
            value = _unquote(node[len(tag):])
            return f"/dev/disk/{directory}/{encode_devnode_name(value)}"
    return node


def is_device_path(path: str) -> bool:
    return path.startswith("/dev/") or path.startswith("/sys/")
