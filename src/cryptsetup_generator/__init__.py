"""cryptsetup generator package exports for test/import convenience."""

from . import (
    bootparams,
    classify,
    cmdline,
    config,
    constants,
    crypttab,
    devnode,
    emitter,
    errors,
    escape,
    fstab_options,
    generator,
    logging_utils,
    merge,
    records,
    unit_files,
)

__all__ = [
    "bootparams",
    "classify",
    "cmdline",
    "config",
    "constants",
    "crypttab",
    "devnode",
    "emitter",
    "errors",
    "escape",
    "fstab_options",
    "generator",
    "logging_utils",
    "merge",
    "records",
    "unit_files",
]
