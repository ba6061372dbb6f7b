"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Generator, Optional

import pytest

from cryptsetup_generator.config import Config
from cryptsetup_generator.generator import Generator as CryptsetupGenerator


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def dest_dir(temp_dir: Path) -> Path:
    """Generator output directory."""
    dest = temp_dir / "normal"
    dest.mkdir()
    return dest


@pytest.fixture
def test_config(temp_dir: Path, monkeypatch) -> Config:
    """Config with every path redirected into the temporary directory."""
    monkeypatch.delenv("SYSTEMD_PROC_CMDLINE", raising=False)
    monkeypatch.delenv("CRYPTSETUP_GENERATOR_CONFIG", raising=False)
    return Config(
        crypttab_path=str(temp_dir / "crypttab"),
        cmdline_path=str(temp_dir / "cmdline"),
        initrd_release_path=str(temp_dir / "initrd-release"),
        runtime_dir=str(temp_dir / "run" / "cryptsetup"),
        default_dest=str(temp_dir / "default"),
    )


@pytest.fixture
def logger() -> logging.Logger:
    """Logger whose records reach caplog through propagation."""
    log = logging.getLogger("cryptsetup-generator-tests")
    log.setLevel(logging.DEBUG)
    return log


@pytest.fixture
def mock_config_file(temp_dir: Path) -> Path:
    """Create a test configuration file."""
    config_content = """
crypttab_path = "/etc/crypttab.test"
runtime_dir = "/run/test-cryptsetup"
cryptsetup_path = "/usr/libexec/systemd-cryptsetup"
log_level = "debug"
"""
    config_path = temp_dir / "config.toml"
    config_path.write_text(config_content)
    return config_path


@pytest.fixture
def mock_empty_config(temp_dir: Path) -> Path:
    """Create an empty configuration file."""
    config_path = temp_dir / "empty_config.toml"
    config_path.write_text("")
    return config_path


def write_inputs(config: Config, cmdline: str = "", crypttab: Optional[str] = None) -> None:
    Path(config.cmdline_path).write_text(cmdline + "\n")
    if crypttab is not None:
        Path(config.crypttab_path).write_text(crypttab)


def run_generator(config: Config, dest: Path, logger: logging.Logger,
                  cmdline: str = "", crypttab: Optional[str] = None) -> int:
    write_inputs(config, cmdline, crypttab)
    return CryptsetupGenerator(str(dest), config, logger).run()


def snapshot(dest: Path) -> Dict[str, str]:
    """Relative path -> file content (or link target) for everything in ``dest``."""
    result = {}
    for root, dirs, files in os.walk(dest):
        for name in files + dirs:
            path = Path(root) / name
            rel = str(path.relative_to(dest))
            if path.is_symlink():
                result[rel] = "-> " + os.readlink(path)
            elif path.is_file():
                result[rel] = path.read_text()
    return result


@pytest.fixture
def generate(test_config: Config, dest_dir: Path, logger: logging.Logger):
    """Run a full generation into ``dest_dir``."""
    def _generate(cmdline: str = "", crypttab: Optional[str] = None) -> int:
        return run_generator(test_config, dest_dir, logger, cmdline, crypttab)
    return _generate


@pytest.fixture
def read_tree():
    """Return a function snapshotting a directory tree."""
    return snapshot
