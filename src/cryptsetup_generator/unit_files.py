"""Writing generated units, dependency symlinks and drop-ins."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from . import constants
from .errors import UnitFileError


class UnitFileSink:
    def __init__(self, dest: str, logger: logging.Logger):
        self.dest = Path(dest)
        self.logger = logger

    def write_unit(self, name: str, body: str, source: Optional[str] = None) -> Path:
        """Create ``<dest>/<name>``; it must not exist yet."""
        path = self.dest / name
        try:
            with path.open("x", encoding="utf-8") as f:
                f.write(constants.GENERATED_HEADER)
                f.write(body)
        except FileExistsError as exc:
            if source:
                raise UnitFileError(
                    f"Failed to create unit file {path}, as it already exists. Duplicate entry in {source}?"
                ) from exc
            raise UnitFileError(f"Failed to create unit file {path}: {exc.strerror}") from exc
        except OSError as exc:
            raise UnitFileError(f"Failed to write unit file {path}: {exc.strerror}") from exc
        self.logger.debug("Wrote %s", path)
        return path

    def add_symlink(self, anchor: str, dep_type: str, unit: str) -> Path:
        """Add ``<anchor>.<dep_type>/<unit>`` pointing at the generated unit."""
        target = unit if os.path.isabs(unit) else os.path.join("..", unit)
        link = self.dest / f"{anchor}.{dep_type}" / os.path.basename(unit)
        try:
            link.parent.mkdir(mode=0o755, parents=True, exist_ok=True)
        except OSError as exc:
            raise UnitFileError(f'Failed to create symlink "{link}": {exc.strerror}') from exc
        try:
            os.symlink(target, link)
        except FileExistsError:
            pass
        except OSError as exc:
            raise UnitFileError(f'Failed to create symlink "{link}": {exc.strerror}') from exc
        return link

    def write_drop_in(self, unit: str, priority: int, name: str, body: str) -> Path:
        directory = self.dest / f"{unit}.d"
        path = directory / f"{priority:02d}-{name}.conf"
        tmp = directory / f".#{path.name}"
        try:
            directory.mkdir(mode=0o755, parents=True, exist_ok=True)
            tmp.write_text(body if body.endswith("\n") else body + "\n", encoding="utf-8")
            os.replace(tmp, path)
        except OSError as exc:
            raise UnitFileError(f"Failed to write drop-in {path}: {exc.strerror}") from exc
        return path
