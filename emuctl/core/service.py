"""Service layer used by CLI and the public client."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from emuctl.core.boot import CancellationToken, Timeout
from emuctl.core.emulator import Emulator
from emuctl.core.errors import ProfileValidationError
from emuctl.core.model import BootResult, DeviceHandle, LaunchProfile, StartOptions
from emuctl.core.process import EmulatorProcess
from emuctl.core.profile_loader import load_profiles
from emuctl.core.sdk import resolve_sdk_root
from emuctl.transports.adb import AdbClient
from emuctl.transports.base import DeviceTransport

LOGGER = logging.getLogger(__name__)


class EmulatorService:
    def __init__(
        self,
        sdk_root: str | os.PathLike[str] | None = None,
        *,
        transport: DeviceTransport | None = None,
        emulator: Emulator | None = None,
    ) -> None:
        loaded = load_profiles()
        self.profiles = loaded.profiles
        self.load_warnings = loaded.warnings
        self._sdk_root_hint = sdk_root
        self._transport = transport
        self._emulator = emulator

    @property
    def sdk_root(self) -> Path:
        return resolve_sdk_root(self._sdk_root_hint)

    @property
    def transport(self) -> DeviceTransport:
        if self._transport is None:
            self._transport = AdbClient.from_sdk(self.sdk_root)
        return self._transport

    @property
    def emulator(self) -> Emulator:
        if self._emulator is None:
            if self._transport is not None:
                transport = self._transport
                self._emulator = Emulator(self.sdk_root, transport_factory=lambda _root: transport)
            else:
                self._emulator = Emulator(self.sdk_root)
        return self._emulator

    def list_profiles(self) -> list[LaunchProfile]:
        return sorted(self.profiles.values(), key=lambda p: p.id)

    def resolve_profile(self, profile_id: str) -> LaunchProfile:
        profile = self.profiles.get(profile_id)
        if profile is None:
            raise ProfileValidationError(
                f"Unknown profile '{profile_id}'. Use 'emuctl profiles' to inspect available profiles."
            )
        return profile

    def list_avds(self) -> list[str]:
        return self.emulator.list_avds()

    def list_devices(self) -> list[DeviceHandle]:
        return self.transport.list_devices()

    def get_property(self, key: str, serial: str | None = None) -> str:
        return self.transport.get_property(key, serial)

    def start(
        self,
        avd: str,
        options: StartOptions | None = None,
        *,
        output_path: str | os.PathLike[str] | None = None,
    ) -> EmulatorProcess:
        return self.emulator.start(avd, options, output_path=output_path)

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
        profile = self.resolve_profile(profile_id) if profile_id else None
        avd_name = avd or (profile.avd if profile else None)
        if not avd_name:
            raise ProfileValidationError("Specify an AVD name or a launch profile to boot.")

        options = profile.options if profile else StartOptions()
        if timeout is None and profile is not None:
            timeout = profile.boot_timeout_s

        process = self.start(avd_name, options, output_path=output_path)
        try:
            result = process.wait_for_boot_complete(timeout, cancel=cancel)
        except Exception:
            if kill_on_timeout:
                process.kill()
            raise

        if not result and kill_on_timeout:
            LOGGER.info("Killing emulator for %s after unsuccessful boot wait", avd_name)
            process.kill()
        return result
