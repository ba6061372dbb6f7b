from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_CONFIG_PATH = Path("/etc/cryptsetup-generator/config.toml")
CONFIG_ENV = "CRYPTSETUP_GENERATOR_CONFIG"


@dataclass
class Config:
    crypttab_path: str = "/etc/crypttab"
    cmdline_path: str = "/proc/cmdline"
    initrd_release_path: str = "/etc/initrd-release"
    runtime_dir: str = "/run/systemd/cryptsetup"  # mount points for key/header devices
    default_dest: str = "/tmp"
    cryptsetup_path: str = "/usr/lib/systemd/systemd-cryptsetup"
    umount_path: str = "/bin/umount"
    mke2fs_path: str = "/sbin/mke2fs"
    mkswap_path: str = "/sbin/mkswap"
    log_level: str = "info"

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Config":
        if path:
            cfg_path = Path(path)
        elif os.environ.get(CONFIG_ENV):
            cfg_path = Path(os.environ[CONFIG_ENV])
        else:
            cfg_path = DEFAULT_CONFIG_PATH
        if not cfg_path.exists():
            return cls()
        with cfg_path.open("rb") as f:
            parsed = tomllib.load(f)

        defaults = cls()
        return cls(
            crypttab_path=parsed.get("crypttab_path", defaults.crypttab_path),
            cmdline_path=parsed.get("cmdline_path", defaults.cmdline_path),
            initrd_release_path=parsed.get("initrd_release_path", defaults.initrd_release_path),
            runtime_dir=parsed.get("runtime_dir", defaults.runtime_dir),
            default_dest=parsed.get("default_dest", defaults.default_dest),
            cryptsetup_path=parsed.get("cryptsetup_path", defaults.cryptsetup_path),
            umount_path=parsed.get("umount_path", defaults.umount_path),
            mke2fs_path=parsed.get("mke2fs_path", defaults.mke2fs_path),
            mkswap_path=parsed.get("mkswap_path", defaults.mkswap_path),
            log_level=parsed.get("log_level", defaults.log_level),
        )


@dataclass
class Policy:
    """Switches collected from the kernel command line for one run."""

    enabled: bool = True
    read_crypttab: bool = True
    whitelist: bool = False  # only devices named on the command line are created
    default_options: Optional[str] = None
    default_keyfile: Optional[str] = None
