from __future__ import annotations

import argparse
import logging
import os
import sys
import tomllib
from typing import List, Optional

from . import cmdline, constants, logging_utils
from .bootparams import BootParameterInterpreter
from .config import Config, Policy
from .crypttab import read_crypttab
from .emitter import UnitEmitter
from .errors import GeneratorError
from .merge import MergeResolver
from .records import DeviceStore
from .unit_files import UnitFileSink


class Generator:
    """One generation run: command line, then crypttab, then the remaining devices."""

    def __init__(self, dest: str, config: Optional[Config] = None, logger: Optional[logging.Logger] = None):
        self.config = config or Config()
        self.logger = logger or logging_utils.setup_logging(self.config.log_level)
        self.dest = dest
        self.store = DeviceStore()
        self.policy = Policy()
        self.sink = UnitFileSink(dest, self.logger)
        self.emitter = UnitEmitter(self.sink, self.config, self.logger)
        self.resolver = MergeResolver(self.store, self.policy, self.emitter, self.logger)

    def parse_cmdline(self) -> None:
        try:
            line = cmdline.read_cmdline(self.config.cmdline_path)
        except OSError as exc:
            raise GeneratorError(f"Failed to parse kernel command line: {exc}") from exc
        initrd = cmdline.in_initrd(self.config.initrd_release_path)
        interpreter = BootParameterInterpreter(self.store, self.policy, self.logger)
        interpreter.feed(cmdline.iter_parameters(line, strip_rd_prefix=True, initrd=initrd))

    def run(self) -> int:
        """Generate all units; returns the number of devices set up."""
        self.parse_cmdline()
        if not self.policy.enabled:
            self.logger.debug("Disabled on the kernel command line, not generating anything.")
            return 0

        generated = 0
        if self.policy.read_crypttab:
            entries = read_crypttab(self.config.crypttab_path, self.logger)
            generated += self.resolver.add_crypttab_devices(entries)
        generated += self.resolver.add_cmdline_devices()
        return generated


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog=constants.PROGRAM_NAME,
        description="Generate systemd units for encrypted block devices.",
    )
    parser.add_argument("--config", type=str, help="Path to config.toml")
    parser.add_argument("dirs", metavar="DIR", nargs="*", help="normal, early and late unit directories")
    args = parser.parse_args(argv)

    logger = logging_utils.setup_logging()
    if len(args.dirs) not in (0, 3):
        logger.error("This program takes three or no arguments.")
        return 1

    try:
        config = Config.load(args.config)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.error("Failed to load configuration: %s", exc)
        return 1
    logger = logging_utils.setup_logging(config.log_level)

    dest = args.dirs[0] if args.dirs else config.default_dest
    os.umask(0o022)
    try:
        Generator(dest, config, logger).run()
    except GeneratorError as exc:
        logger.error("%s", exc)
        return 1
    except MemoryError:
        logger.critical("Out of memory.")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
