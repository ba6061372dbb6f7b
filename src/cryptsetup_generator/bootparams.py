"""Interpretation of ``luks*`` kernel command line switches."""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional, Tuple

from . import constants, devnode
from .cmdline import parse_boolean
from .config import Policy
from .records import DeviceStore

_ID128_RE = re.compile(r"^(?:[0-9a-fA-F]{32}|[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12})$")
# luks.options= and luks.name=: "<hex-and-dashes>=<value>"
_UUID_VALUE_RE = re.compile(r"^([0-9a-fA-F-]+)=(\S+)")
_KEY_RE = re.compile(r"^([A-Za-z0-9-]+)=(.*)$", re.DOTALL)


def id128_is_valid(value: str) -> bool:
    return bool(_ID128_RE.match(value))


class BootParameterInterpreter:
    def __init__(self, store: DeviceStore, policy: Policy, logger: logging.Logger):
        self.store = store
        self.policy = policy
        self.logger = logger
        self._handlers = {
            constants.PARAM_ENABLED: self._handle_enabled,
            constants.PARAM_CRYPTTAB: self._handle_crypttab,
            constants.PARAM_UUID: self._handle_uuid,
            constants.PARAM_OPTIONS: self._handle_options,
            constants.PARAM_KEY: self._handle_key,
            constants.PARAM_HEADER: self._handle_header,
            constants.PARAM_DATA: self._handle_data,
            constants.PARAM_NAME: self._handle_name,
        }

    def feed(self, parameters: Iterable[Tuple[str, Optional[str]]]) -> None:
        for key, value in parameters:
            self.handle(key, value)

    def handle(self, key: str, value: Optional[str]) -> None:
        handler = self._handlers.get(key)
        if handler is None:
            return
        handler(key, value)

    def _value_missing(self, key: str, value: Optional[str]) -> bool:
        if value is None:
            self.logger.error("Missing argument for %s= kernel command line switch, ignoring.", key)
            return True
        return False

    def _parse_switch(self, key: str, value: Optional[str]) -> Optional[bool]:
        if value is None:
            return True
        try:
            return parse_boolean(value)
        except ValueError:
            self.logger.warning("Failed to parse %s= kernel command line switch %s. Ignoring.", key, value)
            return None

    def _handle_enabled(self, key: str, value: Optional[str]) -> None:
        enabled = self._parse_switch(key, value)
        if enabled is not None:
            self.policy.enabled = enabled

    def _handle_crypttab(self, key: str, value: Optional[str]) -> None:
        read_crypttab = self._parse_switch(key, value)
        if read_crypttab is not None:
            self.policy.read_crypttab = read_crypttab

    def _handle_uuid(self, key: str, value: Optional[str]) -> None:
        if self._value_missing(key, value):
            return
        if value.startswith(constants.NAME_PREFIX):
            value = value[len(constants.NAME_PREFIX):]
        record = self.store.get_or_create(value)
        record.create = True
        self.policy.whitelist = True

    def _handle_options(self, key: str, value: Optional[str]) -> None:
        if self._value_missing(key, value):
            return
        match = _UUID_VALUE_RE.match(value)
        if match:
            record = self.store.get_or_create(match.group(1))
            record.options = match.group(2)
        else:
            self.policy.default_options = value

    def _handle_key(self, key: str, value: Optional[str]) -> None:
        if self._value_missing(key, value):
            return
        match = _KEY_RE.match(value)
        if not match:
            self.policy.default_keyfile = value
            return
        record = self.store.get_or_create(match.group(1))
        keyspec = match.group(2)
        keyfile, sep, keydev = keyspec.rpartition(":")
        if sep:
            record.keyfile = keyfile
            record.keydev = keydev
        else:
            record.keyfile = keyspec
            record.keydev = None

    def _split_device_switch(self, key: str, value: Optional[str]) -> Optional[Tuple[str, str]]:
        """Parse ``<uuid>=<device>`` for luks.hdr= and luks.data=."""
        if self._value_missing(key, value):
            return None
        uuid, sep, device = value.partition("=")
        if not sep or not id128_is_valid(uuid):
            self.logger.warning("Failed to parse %s= kernel command line switch. UUID is invalid, ignoring.", key)
            return None
        return uuid, devnode.fstab_node_to_udev_node(device)

    def _handle_header(self, key: str, value: Optional[str]) -> None:
        parsed = self._split_device_switch(key, value)
        if parsed is None:
            return
        uuid, device = parsed
        self.store.get_or_create(uuid).hdrdev = device

    def _handle_data(self, key: str, value: Optional[str]) -> None:
        parsed = self._split_device_switch(key, value)
        if parsed is None:
            return
        uuid, device = parsed
        self.store.get_or_create(uuid).datadev = device

    def _handle_name(self, key: str, value: Optional[str]) -> None:
        if self._value_missing(key, value):
            return
        match = _UUID_VALUE_RE.match(value)
        if not match:
            self.logger.warning("Failed to parse luks name switch %s. Ignoring.", value)
            return
        record = self.store.get_or_create(match.group(1))
        record.create = True
        self.policy.whitelist = True
        record.name = match.group(2)
