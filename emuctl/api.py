"""Stable public API for building tooling on top of emuctl.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

import os

from emuctl.core.boot import CancellationToken, Timeout
from emuctl.core.emulator import Emulator
from emuctl.core.errors import (
    DeviceCommunicationError,
    EmuctlError,
    ExecutableNotFoundError,
    ProfileLoadError,
    ProfileValidationError,
    SdkNotFoundError,
)
from emuctl.core.model import (
    AdbState,
    AdbTransport,
    BootResult,
    DeviceHandle,
    LaunchProfile,
    StartOptions,
)
from emuctl.core.process import EmulatorProcess
from emuctl.core.service import EmulatorService
from emuctl.transports.adb import AdbClient
from emuctl.transports.base import DeviceTransport

__all__ = [
    "EmuctlError",
    "DeviceCommunicationError",
    "ExecutableNotFoundError",
    "ProfileLoadError",
    "ProfileValidationError",
    "SdkNotFoundError",
    "AdbState",
    "AdbTransport",
    "BootResult",
    "DeviceHandle",
    "LaunchProfile",
    "StartOptions",
    "AdbClient",
    "CancellationToken",
    "EmulatorProcess",
    "Client",
]


class Client:
    """Public client for launching emulators and waiting for them to boot.

    A `Client` instance wraps profile loading, SDK tool lookup, the adb
    transport, and the boot orchestration behind a stable API intended for
    third-party tools (CI scripts, test fixtures, services).
    """

    def __init__(
        self,
        sdk_root: str | os.PathLike[str] | None = None,
        *,
        transport: DeviceTransport | None = None,
        emulator: Emulator | None = None,
    ) -> None:
        self._service = EmulatorService(sdk_root, transport=transport, emulator=emulator)

    @property
    def load_warnings(self) -> tuple[str, ...]:
        return self._service.load_warnings

    def list_profiles(self) -> list[LaunchProfile]:
        return self._service.list_profiles()

    def list_avds(self) -> list[str]:
        return self._service.list_avds()

    def list_devices(self) -> list[DeviceHandle]:
        return self._service.list_devices()

    def get_property(self, key: str, *, serial: str | None = None) -> str:
        return self._service.get_property(key, serial)

    def start(
        self,
        avd: str,
        options: StartOptions | None = None,
        *,
        output_path: str | os.PathLike[str] | None = None,
    ) -> EmulatorProcess:
        return self._service.start(avd, options, output_path=output_path)

    def boot(
        self,
        avd: str | None = None,
        *,
        profile_id: str | None = None,
        timeout: Timeout | None = None,
        cancel: CancellationToken | None = None,
        kill_on_timeout: bool = False,
        output_path: str | os.PathLike[str] | None = None,
    ) -> BootResult:
        return self._service.boot(
            avd,
            profile_id=profile_id,
            timeout=timeout,
            cancel=cancel,
            kill_on_timeout=kill_on_timeout,
            output_path=output_path,
        )
