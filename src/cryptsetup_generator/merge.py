"""Merging of crypttab entries with devices named on the kernel command line."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from . import constants, escape
from .config import Policy
from .crypttab import CrypttabEntry
from .emitter import UnitEmitter, UnitRequest
from .records import DeviceRecord, DeviceStore


def candidate_identifier(entry: CrypttabEntry) -> Optional[str]:
    """Guess the device identifier of a crypttab entry.

    Tried in order: ``UUID=<id>``, ``/dev/disk/by-uuid/<id>``, ``luks-<id>``
    as the name. The first form that applies wins.
    """
    if entry.device.startswith(constants.UUID_PREFIX):
        return entry.device[len(constants.UUID_PREFIX):] or None
    by_uuid = escape.path_startswith(entry.device, constants.BY_UUID_DIR)
    if by_uuid is not None:
        return by_uuid or None
    if entry.name.startswith(constants.NAME_PREFIX):
        return entry.name[len(constants.NAME_PREFIX):] or None
    return None


class MergeResolver:
    def __init__(self, store: DeviceStore, policy: Policy, emitter: UnitEmitter, logger: logging.Logger):
        self.store = store
        self.policy = policy
        self.emitter = emitter
        self.logger = logger

    def lookup(self, entry: CrypttabEntry) -> Optional[DeviceRecord]:
        identifier = candidate_identifier(entry)
        if identifier is None:
            return None
        return self.store.get(identifier)

    def add_crypttab_devices(self, entries: Iterable[CrypttabEntry]) -> int:
        """Emit units for crypttab entries; returns the number generated."""
        generated = 0
        for entry in entries:
            record = self.lookup(entry)
            if self.policy.whitelist and record is None:
                self.logger.info(
                    "Not creating device '%s' because it was not specified on the kernel command line.",
                    entry.name,
                )
                continue

            options = record.options if record and record.options else entry.options
            request = UnitRequest(
                name=entry.name,
                device=entry.device,
                keyfile=entry.keyfile,
                options=options,
                source=constants.SOURCE_CRYPTTAB,
            )
            if self.emitter.emit(request):
                generated += 1
            if record is not None:
                record.create = False
        return generated

    def effective_options(self, record: DeviceRecord) -> str:
        if record.options:
            return record.options
        if self.policy.default_options:
            return self.policy.default_options
        return constants.DEFAULT_CMDLINE_OPTIONS

    def add_cmdline_devices(self) -> int:
        generated = 0
        for record in self.store:
            if not record.create:
                continue
            if not record.name:
                record.name = record.mapped_name
            request = UnitRequest(
                name=record.name,
                device=record.device,
                keydev=record.keydev,
                hdrdev=record.hdrdev,
                keyfile=record.keyfile or self.policy.default_keyfile,
                options=self.effective_options(record),
                source=constants.SOURCE_CMDLINE,
            )
            if self.emitter.emit(request):
                generated += 1
        return generated
