"""Classification of key and header references into unit dependencies."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Union

from . import constants, devnode, escape


@dataclass(frozen=True)
class NoDependency:
    pass


@dataclass(frozen=True)
class RandomSource:
    pass


@dataclass(frozen=True)
class BlockDevice:
    path: str
    unit: str


@dataclass(frozen=True)
class RegularFile:
    path: str


Dependency = Union[NoDependency, RandomSource, BlockDevice, RegularFile]


def classify_dependency(path: Optional[str]) -> Dependency:
    if path is None or path in constants.NO_KEY_VALUES:
        return NoDependency()
    if any(escape.path_equal(path, rng) for rng in constants.RANDOM_SOURCES):
        return RandomSource()
    node = devnode.fstab_node_to_udev_node(path)
    if escape.path_equal(node, "/dev/null"):
        return NoDependency()
    if escape.path_startswith(node, "/dev/") is not None:
        return BlockDevice(node, escape.unit_name_from_path(node, ".device"))
    return RegularFile(path)


def dependency_lines(dep: Dependency) -> List[str]:
    if isinstance(dep, RandomSource):
        return [f"After={constants.RANDOM_SEED_SERVICE}"]
    if isinstance(dep, BlockDevice):
        return [f"After={dep.unit}", f"Requires={dep.unit}"]
    if isinstance(dep, RegularFile):
        return [f"RequiresMountsFor={escape.specifier_escape(dep.path)}"]
    return []


def is_block_device_path(node: str) -> bool:
    return escape.path_startswith(node, "/dev/") is not None
