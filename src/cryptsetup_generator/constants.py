from __future__ import annotations

PROGRAM_NAME = "systemd-cryptsetup-generator"
GENERATED_HEADER = f"# Automatically generated by {PROGRAM_NAME}\n\n"

# Targets
CRYPTSETUP_PRE_TARGET = "cryptsetup-pre.target"
CRYPTSETUP_TARGET = "cryptsetup.target"
REMOTE_FS_PRE_TARGET = "remote-fs-pre.target"
REMOTE_CRYPTSETUP_TARGET = "remote-cryptsetup.target"
UMOUNT_TARGET = "umount.target"
RANDOM_SEED_SERVICE = "systemd-random-seed.service"

# Dependency symlink types
WANTS = "wants"
REQUIRES = "requires"

# Device references
UUID_PREFIX = "UUID="
BY_UUID_DIR = "/dev/disk/by-uuid/"
NAME_PREFIX = "luks-"
DEFAULT_CMDLINE_OPTIONS = "timeout=0"
KEYDEV_PREFIX = "keydev"
HDRDEV_PREFIX = "hdrdev"
RANDOM_SOURCES = ("/dev/urandom", "/dev/random", "/dev/hw_random")
NO_KEY_VALUES = ("-", "none")

# Boot parameters
PARAM_ENABLED = "luks"
PARAM_CRYPTTAB = "luks.crypttab"
PARAM_UUID = "luks.uuid"
PARAM_OPTIONS = "luks.options"
PARAM_KEY = "luks.key"
PARAM_HEADER = "luks.hdr"
PARAM_DATA = "luks.data"
PARAM_NAME = "luks.name"

# Journald keys
LOG_KEY_DEVICE = "DEVICE"
LOG_KEY_UNIT = "UNIT"
LOG_KEY_SOURCE = "SOURCE"
LOG_KEY_RESULT = "RESULT"

# Where a device request came from
SOURCE_CRYPTTAB = "crypttab"
SOURCE_CMDLINE = "cmdline"
