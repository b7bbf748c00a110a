"""Transport interfaces."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from emuctl.core.model import AdbState, AdbTransport, DeviceHandle


class DeviceTransport(Protocol):
    def list_devices(self) -> list[DeviceHandle]:
        """Return every device currently visible to the transport daemon."""

    def shell(self, command: str | Sequence[str], serial: str | None = None) -> list[str]:
        """Run a remote command and return its output lines."""

    def wait_for(
        self,
        transport: AdbTransport = AdbTransport.ANY,
        state: AdbState = AdbState.DEVICE,
        serial: str | None = None,
    ) -> None:
        """Block until the daemon reports a device in the given transport/state."""

    def get_property(self, key: str, serial: str | None = None) -> str:
        """Return the first line of `getprop <key>`, or an empty string when unset."""
