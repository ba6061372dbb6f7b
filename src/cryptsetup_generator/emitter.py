"""Generation of the units for one encrypted device.

The work is split into pure steps which can be tested on their own:

* :func:`classify_options` reads the flags out of the option string,
* :func:`plan_unit` validates the request, derives unit names and plans the
  auxiliary mounts for key and header devices,
* :func:`build_unit_section` / :func:`build_service_section` produce the
  directive lines,

and :class:`UnitEmitter` writes the result through a :class:`UnitFileSink`.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from . import classify, constants, devnode, escape, fstab_options, logging_utils
from .config import Config
from .errors import DeviceConfigError, UnitFileError
from .unit_files import UnitFileSink

TIMEOUT_OPTIONS = ("comment=systemd.device-timeout", "x-systemd.device-timeout")

UNIT_HEADER = (
    "Description=Cryptography Setup for %I",
    "Documentation=man:crypttab(5) man:systemd-cryptsetup-generator(8) man:systemd-cryptsetup@.service(8)",
)


@dataclass
class UnitRequest:
    name: str
    device: str
    keydev: Optional[str] = None
    hdrdev: Optional[str] = None
    keyfile: Optional[str] = None
    options: Optional[str] = None
    source: str = constants.SOURCE_CRYPTTAB


@dataclass(frozen=True)
class OptionFlags:
    noauto: bool = False
    nofail: bool = False
    tmp: bool = False
    swap: bool = False
    netdev: bool = False
    header: bool = False
    header_path: Optional[str] = None
    # options without any header= entry; only set when a header device is used
    without_header: Optional[str] = None

    @property
    def pre_target(self) -> str:
        return constants.REMOTE_FS_PRE_TARGET if self.netdev else constants.CRYPTSETUP_PRE_TARGET

    @property
    def target(self) -> str:
        return constants.REMOTE_CRYPTSETUP_TARGET if self.netdev else constants.CRYPTSETUP_TARGET


@dataclass(frozen=True)
class UnitNames:
    escaped: str
    service: str
    node: str
    device_unit: str
    mapper_unit: str


@dataclass(frozen=True)
class MountUnit:
    unit: str
    what: str
    where: str
    read_only: bool

    def render(self) -> str:
        return (
            "[Unit]\n"
            "DefaultDependencies=no\n"
            "\n"
            "[Mount]\n"
            f"What={self.what}\n"
            f"Where={self.where}\n"
            f"Options={'ro' if self.read_only else 'rw'}\n"
        )


@dataclass
class UnitPlan:
    request: UnitRequest
    flags: OptionFlags
    names: UnitNames
    keyfile: Optional[str] = None  # specifier-escaped, below the key mount if any
    options: Optional[str] = None
    key_mount: Optional[MountUnit] = None
    header_mount: Optional[MountUnit] = None
    mounts: List[MountUnit] = field(default_factory=list)


def classify_options(options: Optional[str], has_header_device: bool = False) -> OptionFlags:
    header, header_path, without_header = fstab_options.filter_options(options, ("header",))
    return OptionFlags(
        noauto=fstab_options.yes_no_option(options, "noauto", "auto"),
        nofail=fstab_options.yes_no_option(options, "nofail", "fail"),
        tmp=fstab_options.has_option(options, ("tmp",)),
        swap=fstab_options.has_option(options, ("swap",)),
        netdev=fstab_options.has_option(options, ("_netdev",)),
        header=header,
        header_path=header_path,
        without_header=without_header if has_header_device else None,
    )


def derive_names(name: str, device: str) -> UnitNames:
    escaped = escape.unit_name_escape(name)
    node = devnode.fstab_node_to_udev_node(device)
    try:
        device_unit = escape.unit_name_from_path(node, ".device")
    except ValueError as exc:
        raise DeviceConfigError(name, f"Failed to generate unit name for {device}: {exc}") from exc
    return UnitNames(
        escaped=escaped,
        service=escape.unit_name_build("systemd-cryptsetup", escaped, ".service"),
        node=node,
        device_unit=device_unit,
        mapper_unit=f"dev-mapper-{escaped}.device",
    )


def validate(request: UnitRequest, flags: OptionFlags) -> None:
    if flags.tmp and flags.swap:
        raise DeviceConfigError(request.name, f"Device '{request.name}' cannot be both 'tmp' and 'swap'. Ignoring.")
    if request.keydev and not request.keyfile:
        raise DeviceConfigError(request.name, "Key device is specified, but path to the password file is missing.")
    if request.hdrdev and not flags.header_path:
        raise DeviceConfigError(request.name, "Header device is specified, but path to the header file is missing.")


def synthesize_mount(runtime_dir: str, name: str, device: str, prefix: str, read_only: bool) -> MountUnit:
    where = f"{runtime_dir.rstrip('/')}/{prefix}-{escape.cescape(name)}"
    try:
        unit = escape.unit_name_from_path(where, ".mount")
    except ValueError as exc:
        raise DeviceConfigError(name, f"Failed to generate unit name for {where}: {exc}") from exc
    return MountUnit(
        unit=unit,
        what=devnode.fstab_node_to_udev_node(device),
        where=where,
        read_only=read_only,
    )


def plan_unit(request: UnitRequest, runtime_dir: str) -> UnitPlan:
    """Validate ``request`` and resolve everything needed to render it.

    Raises DeviceConfigError when the device cannot be set up.
    """
    flags = classify_options(request.options, has_header_device=bool(request.hdrdev))
    validate(request, flags)
    names = derive_names(request.name, request.device)
    plan = UnitPlan(request=request, flags=flags, names=names, options=request.options)

    if request.keyfile:
        plan.keyfile = escape.specifier_escape(request.keyfile)

    if request.keydev:
        plan.key_mount = synthesize_mount(runtime_dir, request.name, request.keydev, constants.KEYDEV_PREFIX, True)
        plan.keyfile = escape.prefix_root(plan.key_mount.where, plan.keyfile)
        plan.mounts.append(plan.key_mount)

    if request.hdrdev:
        # rw, LUKS2 header recovery needs to write
        plan.header_mount = synthesize_mount(runtime_dir, request.name, request.hdrdev, constants.HDRDEV_PREFIX, False)
        header_path = escape.path_join(plan.header_mount.where, flags.header_path)
        prefix = flags.without_header + "," if flags.without_header else ""
        plan.options = f"{prefix}header={header_path}"
        plan.mounts.append(plan.header_mount)

    return plan


def build_unit_section(plan: UnitPlan, source_path: str = "/etc/crypttab") -> List[str]:
    request, flags, names = plan.request, plan.flags, plan.names
    lines = ["[Unit]", *UNIT_HEADER, f"SourcePath={source_path}"]
    lines += [
        "DefaultDependencies=no",
        f"Conflicts={constants.UMOUNT_TARGET}",
        "IgnoreOnIsolate=true",
        f"After={flags.pre_target}",
    ]
    for mount in plan.mounts:
        lines += [f"After={mount.unit}", f"Requires={mount.unit}"]

    if not flags.nofail:
        lines.append(f"Before={flags.target}")

    if request.keyfile:
        lines += _dependency_lines(request.name, request.keyfile)

    if flags.header and not request.hdrdev and flags.header_path:
        lines += _dependency_lines(request.name, flags.header_path)

    if classify.is_block_device_path(names.node):
        lines += [
            f"BindsTo={names.device_unit}",
            f"After={names.device_unit}",
            f"Before={constants.UMOUNT_TARGET}",
        ]
        if flags.swap:
            lines.append("Before=dev-mapper-%i.swap")
    else:
        lines.append(f"RequiresMountsFor={escape.specifier_escape(names.node)}")
    return lines


def _dependency_lines(name: str, path: str) -> List[str]:
    try:
        dep = classify.classify_dependency(path)
    except ValueError as exc:
        raise DeviceConfigError(name, f"Failed to generate unit name for {path}: {exc}") from exc
    return classify.dependency_lines(dep)


def split_timeout(options: Optional[str]) -> Tuple[bool, Optional[str], Optional[str]]:
    """Strip device timeout options. Returns ``(found, timeout, filtered)``."""
    if options is None:
        return False, None, None
    return fstab_options.filter_options(options, TIMEOUT_OPTIONS)


def build_service_section(plan: UnitPlan, filtered: Optional[str], config: Config) -> List[str]:
    names = plan.names
    name = escape.specifier_escape(plan.request.name)
    node = escape.specifier_escape(names.node)
    keyfile = plan.keyfile or ""
    options = escape.specifier_escape(filtered) if filtered else ""
    lines = [
        "[Service]",
        "Type=oneshot",
        "RemainAfterExit=yes",
        "TimeoutSec=0",  # systemd-cryptsetup handles timeouts itself
        "KeyringMode=shared",  # cached passphrases are shared between instances
        f"ExecStart={config.cryptsetup_path} attach '{name}' '{node}' '{keyfile}' '{options}'",
        f"ExecStop={config.cryptsetup_path} detach '{name}'",
    ]
    if plan.flags.tmp:
        lines.append(f"ExecStartPost={config.mke2fs_path} '/dev/mapper/{name}'")
    if plan.flags.swap:
        lines.append(f"ExecStartPost={config.mkswap_path} '/dev/mapper/{name}'")
    if plan.key_mount:
        lines.append(f"ExecStartPost={config.umount_path} {plan.key_mount.where}")
    return lines


def render_service(plan: UnitPlan, filtered: Optional[str], config: Config) -> str:
    unit = build_unit_section(plan, config.crypttab_path)
    service = build_service_section(plan, filtered, config)
    return "\n".join(unit) + "\n\n" + "\n".join(service) + "\n"


class UnitEmitter:
    def __init__(self, sink: UnitFileSink, config: Config, logger: logging.Logger):
        self.sink = sink
        self.config = config
        self.logger = logger

    def emit(self, request: UnitRequest) -> bool:
        """Generate all units for ``request``.

        Returns False if the device was skipped because of its configuration.
        UnitFileError is raised on write failures.
        """
        try:
            plan = plan_unit(request, self.config.runtime_dir)
            found, timeout, filtered = split_timeout(plan.options)
            service_text = render_service(plan, filtered, self.config)
        except DeviceConfigError as exc:
            self.logger.error("%s", exc)
            return False

        self.sink.write_unit(plan.names.service, service_text, source=self.config.crypttab_path)
        for mount in plan.mounts:
            self._write_mount(mount)
        if found:
            self._write_device_timeout(request, timeout)
        self._wire(plan)

        logging_utils.log_structured(
            self.logger,
            f"Generated {plan.names.service}",
            {
                constants.LOG_KEY_DEVICE: request.device,
                constants.LOG_KEY_UNIT: plan.names.service,
                constants.LOG_KEY_SOURCE: request.source,
                constants.LOG_KEY_RESULT: "generated",
            },
        )
        return True

    def _write_mount(self, mount: MountUnit) -> None:
        runtime_dir = self.config.runtime_dir
        try:
            os.makedirs(os.path.dirname(runtime_dir.rstrip("/")), mode=0o755, exist_ok=True)
            os.makedirs(runtime_dir, mode=0o700, exist_ok=True)
            os.makedirs(mount.where, mode=0o700, exist_ok=True)
        except OSError as exc:
            raise UnitFileError(f"Failed to create mount point {mount.where}: {exc.strerror}") from exc
        self.sink.write_unit(mount.unit, mount.render())

    def _write_device_timeout(self, request: UnitRequest, timeout: Optional[str]) -> None:
        if not fstab_options.is_valid_timespan(timeout):
            self.logger.warning("Failed to parse timeout for %s, ignoring: %s", request.name, timeout)
            return
        node = devnode.fstab_node_to_udev_node(request.device)
        if not devnode.is_device_path(node):
            self.logger.warning("x-systemd.device-timeout ignored for %s", request.device)
            return
        try:
            unit = escape.unit_name_from_path(node, ".device")
        except ValueError as exc:
            self.logger.warning("x-systemd.device-timeout ignored for %s: %s", request.device, exc)
            return
        self.sink.write_drop_in(
            unit, 50, "device-timeout",
            f"{constants.GENERATED_HEADER}[Unit]\nJobRunningTimeoutSec={timeout}",
        )

    def _wire(self, plan: UnitPlan) -> None:
        flags, names = plan.flags, plan.names
        if not flags.noauto:
            self.sink.add_symlink(names.device_unit, constants.WANTS, names.service)
            self.sink.add_symlink(
                flags.target,
                constants.WANTS if flags.nofail else constants.REQUIRES,
                names.service,
            )

        self.sink.add_symlink(names.mapper_unit, constants.REQUIRES, names.service)

        if not flags.noauto and not flags.nofail:
            self.sink.write_drop_in(
                names.mapper_unit, 90, "device-timeout",
                f"# Automatically generated by {constants.PROGRAM_NAME} \n\n[Unit]\nJobTimeoutSec=0",
            )
