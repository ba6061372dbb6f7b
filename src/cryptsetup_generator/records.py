from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Optional

from . import constants


@dataclass
class DeviceRecord:
    identifier: str
    keyfile: Optional[str] = None
    keydev: Optional[str] = None
    hdrdev: Optional[str] = None
    datadev: Optional[str] = None
    name: Optional[str] = None
    options: Optional[str] = None
    create: bool = False

    @property
    def mapped_name(self) -> str:
        return self.name or constants.NAME_PREFIX + self.identifier

    @property
    def device(self) -> str:
        return self.datadev or constants.UUID_PREFIX + self.identifier


def normalize_identifier(identifier: str) -> str:
    return identifier.lower()


class DeviceStore:
    """Owns every DeviceRecord of a run.

    Lookups ignore case; a record keeps the identifier as first given.
    """

    def __init__(self) -> None:
        self._records: Dict[str, DeviceRecord] = {}

    def get_or_create(self, identifier: str) -> DeviceRecord:
        key = normalize_identifier(identifier)
        record = self._records.get(key)
        if record is None:
            record = DeviceRecord(identifier=identifier)
            self._records[key] = record
        return record

    def get(self, identifier: str) -> Optional[DeviceRecord]:
        return self._records.get(normalize_identifier(identifier))

    def __iter__(self) -> Iterator[DeviceRecord]:
        return iter(list(self._records.values()))

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, identifier: str) -> bool:
        return normalize_identifier(identifier) in self._records
