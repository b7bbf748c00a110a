"""adb transport implementation driving the platform-tools executable."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Callable, Sequence

from emuctl.core.errors import DeviceCommunicationError
from emuctl.core.model import WAITABLE_STATES, AdbState, AdbTransport, CommandResult, DeviceHandle
from emuctl.core.runner import run_command
from emuctl.core.sdk import require_tool

LOGGER = logging.getLogger(__name__)

_ATTR_RE = re.compile(r"\b(product|model|device|transport_id):(\S+)")
_ERROR_LINE_RE = re.compile(r"^(?:adb: )?error: (.+)$", re.IGNORECASE)
_DAEMON_FAILURE_MARKERS = ("cannot connect to daemon", "failed to start daemon")

CommandRunner = Callable[[str | os.PathLike[str], Sequence[str]], CommandResult]


def parse_devices_output(lines: Sequence[str]) -> list[DeviceHandle]:
    """Parse `adb devices -l` output into device handles."""
    devices: list[DeviceHandle] = []
    for line in lines:
        stripped = line.strip()
        if not stripped or stripped.startswith("*") or stripped.lower().startswith("list of devices"):
            continue
        parts = stripped.split(None, 1)
        if len(parts) < 2:
            continue
        serial, rest = parts
        attrs = dict(_ATTR_RE.findall(rest))
        devices.append(
            DeviceHandle(
                serial=serial,
                state=AdbState.parse(rest),
                product=attrs.get("product"),
                model=attrs.get("model"),
                device=attrs.get("device"),
                transport_id=attrs.get("transport_id"),
            )
        )
    return devices


def _error_detail(result: CommandResult) -> str | None:
    # adb reports host-side failures on stderr; stdout belongs to the remote command.
    for line in result.stderr_lines:
        match = _ERROR_LINE_RE.match(line.strip())
        if match:
            return match.group(1).strip()
    return None


class AdbClient:
    def __init__(self, adb_path: str | os.PathLike[str] = "adb", *, runner: CommandRunner = run_command) -> None:
        self.adb_path = adb_path
        self._runner = runner

    @classmethod
    def from_sdk(cls, sdk_root: str | os.PathLike[str], *, runner: CommandRunner = run_command) -> AdbClient:
        return cls(require_tool(sdk_root, "adb"), runner=runner)

    def _run(self, args: Sequence[str], serial: str | None = None) -> CommandResult:
        full_args = ["-s", serial, *args] if serial else list(args)
        return self._runner(self.adb_path, full_args)

    def list_devices(self) -> list[DeviceHandle]:
        result = self._run(["devices", "-l"])
        stderr = " ".join(result.stderr_lines).strip()
        if not result.ok() or any(marker in stderr.lower() for marker in _DAEMON_FAILURE_MARKERS):
            detail = stderr or _error_detail(result) or f"exit code {result.exit_code}"
            raise DeviceCommunicationError(f"adb daemon unreachable: {detail}")
        return parse_devices_output(result.stdout_lines)

    def shell(self, command: str | Sequence[str], serial: str | None = None) -> list[str]:
        remote = [command] if isinstance(command, str) else list(command)
        result = self._run(["shell", *remote], serial)
        detail = _error_detail(result)
        target = serial or "<any>"
        if detail is not None:
            raise DeviceCommunicationError(f"adb shell on {target} failed: {detail}")
        if not result.ok():
            stderr = " ".join(result.stderr_lines).strip() or f"exit code {result.exit_code}"
            raise DeviceCommunicationError(f"adb shell on {target} failed: {stderr}")
        return list(result.stdout_lines)

    def wait_for(
        self,
        transport: AdbTransport = AdbTransport.ANY,
        state: AdbState = AdbState.DEVICE,
        serial: str | None = None,
    ) -> None:
        if state not in WAITABLE_STATES:
            raise ValueError(f"adb cannot wait for state '{state.value}'")
        command = f"wait-for-{transport.value}-{state.value}"
        LOGGER.debug("Waiting for %s on %s", command, serial or "<any>")
        result = self._run([command], serial)
        if not result.ok():
            detail = _error_detail(result) or " ".join(result.stderr_lines).strip() or f"exit code {result.exit_code}"
            raise DeviceCommunicationError(f"adb {command} failed: {detail}")

    def get_property(self, key: str, serial: str | None = None) -> str:
        lines = self.shell(["getprop", key], serial)
        return lines[0].strip() if lines else ""
