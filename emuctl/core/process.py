"""Handle for a launched emulator process."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path

from emuctl.core.boot import CancellationToken, Timeout, poll_boot_complete
from emuctl.core.device_match import find_device_by_token
from emuctl.core.model import AdbState, AdbTransport, BootResult
from emuctl.core.runner import ProcessRunner
from emuctl.transports.adb import AdbClient
from emuctl.transports.base import DeviceTransport

LOGGER = logging.getLogger(__name__)

TransportFactory = Callable[[Path], DeviceTransport]


class EmulatorProcess:
    def __init__(
        self,
        process: ProcessRunner,
        token: str,
        sdk_root: Path,
        *,
        transport_factory: TransportFactory = AdbClient.from_sdk,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._process = process
        self._sdk_root = sdk_root
        self._transport_factory = transport_factory
        self._sleep = sleep
        self._exit_code: int | None = None
        self._output: tuple[str, ...] = ()
        self.token = token

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def exit_code(self) -> int | None:
        return self._exit_code

    def wait_for_exit(self) -> int:
        if self._exit_code is None:
            result = self._process.wait()
            self._exit_code = result.exit_code
            self._output = result.stdout_lines
        return self._exit_code

    def kill(self) -> None:
        self._process.kill()

    @property
    def standard_output(self) -> list[str]:
        return list(self._output)

    def get_standard_output(self) -> list[str]:
        return self.standard_output

    def wait_for_boot_complete(
        self,
        timeout: Timeout | None = None,
        *,
        cancel: CancellationToken | None = None,
    ) -> BootResult:
        """Block until this emulator reports boot completion.

        With no arguments the wait is unbounded. A `timeout` (seconds or
        timedelta, zero meaning unbounded) and an explicit `cancel` token may
        be combined; whichever fires first ends the wait with a falsy result.
        The returned result carries the resolved adb serial when discovery
        found this emulator.
        """
        token = CancellationToken.from_timeout(timeout)
        if cancel is not None:
            token = token.link(cancel)

        transport = self._transport_factory(self._sdk_root)

        transport.wait_for(AdbTransport.ANY, AdbState.DEVICE, None)

        serial = find_device_by_token(transport, self.token)
        if serial is None:
            LOGGER.warning("Could not resolve adb serial for launch token %s; polling any device", self.token)
        else:
            LOGGER.info("Emulator %s registered as %s", self.token, serial)

        booted = poll_boot_complete(transport, serial, token, sleep=self._sleep)
        return BootResult(booted=booted, serial=serial)
