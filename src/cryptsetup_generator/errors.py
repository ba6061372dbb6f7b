from __future__ import annotations


class GeneratorError(Exception):
    """Fatal error; the generation run stops."""


class UnitFileError(GeneratorError):
    pass


class DeviceConfigError(Exception):
    """Configuration of a single device is unusable. The device is skipped."""

    def __init__(self, name: str, message: str):
        super().__init__(message)
        self.name = name
