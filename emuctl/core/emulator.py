"""Emulator launcher: AVD listing, argument building, and process start."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Sequence
from pathlib import Path

from emuctl.core.identity import inject_launch_token
from emuctl.core.model import CommandResult, StartOptions
from emuctl.core.process import EmulatorProcess, TransportFactory
from emuctl.core.runner import ProcessRunner, run_command
from emuctl.core.sdk import require_tool
from emuctl.transports.adb import AdbClient

LOGGER = logging.getLogger(__name__)

ProcessFactory = Callable[..., ProcessRunner]


def build_start_args(avd_name: str, options: StartOptions | None = None) -> list[str]:
    """Build emulator arguments for `avd_name`, excluding the launch token."""
    options = options or StartOptions()
    args = ["-avd", avd_name]

    if options.no_snapshot_load:
        args.append("-no-snapshot-load")
    if options.no_snapshot_save:
        args.append("-no-snapshot-save")
    if options.no_snapshot:
        args.append("-no-snapshot")

    if options.camera_back:
        args.extend(["-camera-back", options.camera_back])
    if options.camera_front:
        args.extend(["-camera-front", options.camera_front])

    if options.memory_mb is not None:
        args.extend(["-memory", str(options.memory_mb)])

    if options.sdcard is not None:
        args.extend(["-sdcard", str(Path(options.sdcard).resolve())])

    if options.wipe_data:
        args.append("-wipe-data")

    if options.debug:
        args.extend(["-debug", ",".join(options.debug)])
    if options.logcat:
        args.extend(["-logcat", ",".join(options.logcat)])

    if options.show_kernel:
        args.append("-show-kernel")
    if options.verbose:
        args.append("-verbose")

    if options.dns_servers:
        args.extend(["-dns-server", ",".join(options.dns_servers)])
    if options.http_proxy:
        args.extend(["-http-proxy", options.http_proxy])
    if options.netdelay:
        args.extend(["-netdelay", options.netdelay])
    if options.netfast:
        args.append("-netfast")
    if options.netspeed:
        args.extend(["-netspeed", options.netspeed])

    if options.ports is not None:
        console, adb = options.ports
        args.extend(["-ports", f"{console},{adb}"])
    elif options.port is not None:
        args.extend(["-port", str(options.port)])

    if options.tcpdump is not None:
        args.extend(["-tcpdump", str(Path(options.tcpdump).resolve())])

    if options.accel:
        args.extend(["-accel", options.accel.lower()])
    if options.no_accel:
        args.append("-no-accel")
    if options.engine:
        args.extend(["-engine", options.engine.lower()])
    if options.no_jni:
        args.append("-no-jni")
    if options.selinux:
        args.extend(["-selinux", options.selinux.lower()])
    if options.timezone:
        args.extend(["-timezone", options.timezone])
    if options.no_boot_anim:
        args.append("-no-boot-anim")
    if options.screen:
        args.extend(["-screen", options.screen.lower()])
    if options.no_window:
        args.append("-no-window")
    if options.gpu:
        args.extend(["-gpu", options.gpu])

    return args


class Emulator:
    def __init__(
        self,
        sdk_root: str | os.PathLike[str],
        *,
        runner: Callable[[Path, Sequence[str]], CommandResult] = run_command,
        process_factory: ProcessFactory = ProcessRunner,
        transport_factory: TransportFactory = AdbClient.from_sdk,
    ) -> None:
        self.sdk_root = Path(sdk_root)
        self._runner = runner
        self._process_factory = process_factory
        self._transport_factory = transport_factory

    def _emulator_path(self) -> Path:
        return require_tool(self.sdk_root, "emulator")

    def list_avds(self) -> list[str]:
        result = self._runner(self._emulator_path(), ["-list-avds"])
        return [line.strip() for line in result.stdout_lines if line.strip()]

    def start(
        self,
        avd_name: str,
        options: StartOptions | None = None,
        *,
        output_path: str | os.PathLike[str] | None = None,
    ) -> EmulatorProcess:
        options = options or StartOptions()
        emulator = self._emulator_path()

        args = build_start_args(avd_name, options)
        token = inject_launch_token(args)
        args.extend(options.extra_args)

        LOGGER.info("Launching AVD %s with launch token %s", avd_name, token)
        process = self._process_factory(emulator, args, output_path=output_path)
        return EmulatorProcess(
            process,
            token,
            self.sdk_root,
            transport_factory=self._transport_factory,
        )
