"""Launched-emulator to adb-device matching logic."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from emuctl.core.errors import DeviceCommunicationError, ExecutableNotFoundError
from emuctl.core.identity import launch_token_query
from emuctl.core.model import DeviceHandle
from emuctl.transports.base import DeviceTransport

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProbeResult:
    serial: str
    matched: bool
    error: str | None = None


def probe_device(transport: DeviceTransport, device: DeviceHandle, token: str) -> ProbeResult:
    try:
        lines = transport.shell(launch_token_query(), device.serial)
    except ExecutableNotFoundError:
        raise
    except (DeviceCommunicationError, OSError) as exc:
        return ProbeResult(serial=device.serial, matched=False, error=str(exc))
    matched = any(token in (line or "") for line in lines)
    return ProbeResult(serial=device.serial, matched=matched)


def find_device_by_token(transport: DeviceTransport, token: str) -> str | None:
    """Return the serial of the first visible device reporting `token`, or None."""
    try:
        devices = transport.list_devices()
    except DeviceCommunicationError as exc:
        LOGGER.debug("Device listing failed during discovery: %s", exc)
        return None

    for device in devices:
        probe = probe_device(transport, device, token)
        if probe.error is not None:
            LOGGER.debug("Skipping %s during discovery: %s", probe.serial, probe.error)
            continue
        if probe.matched:
            LOGGER.debug("Launch token %s resolved to %s", token, probe.serial)
            return probe.serial

    LOGGER.debug("No visible device reported launch token %s", token)
    return None
