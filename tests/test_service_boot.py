from __future__ import annotations

from pathlib import Path

import pytest

from emuctl.core.boot import CancellationToken
from emuctl.core.emulator import Emulator
from emuctl.core.errors import DeviceCommunicationError, ProfileValidationError
from emuctl.core.model import AdbState, CommandResult, DeviceHandle
from emuctl.core.service import EmulatorService


class FakeProcessRunner:
    instances: list[FakeProcessRunner] = []

    def __init__(self, executable, args, output_path=None) -> None:
        self.args = list(args)
        self.output_path = output_path
        self.kills = 0
        self.pid = 1
        FakeProcessRunner.instances.append(self)

    def wait(self) -> CommandResult:
        return CommandResult(args=tuple(self.args), exit_code=0, stdout_lines=())

    def kill(self) -> None:
        self.kills += 1

    @property
    def token(self) -> str:
        directive = self.args[self.args.index("-prop") + 1]
        return directive.split("=", 1)[1]


class EmulatorTransport:
    """Answers the launch token query with whatever token the last launch injected."""

    def __init__(self, boot_value: str = "1", boot_error: Exception | None = None) -> None:
        self.boot_value = boot_value
        self.boot_error = boot_error
        self.queries = 0
        self.property_calls: list[tuple[str, str | None]] = []

    def list_devices(self) -> list[DeviceHandle]:
        return [DeviceHandle(serial="emulator-5580", state=AdbState.DEVICE)]

    def shell(self, command, serial=None) -> list[str]:
        command = list(command)
        if command == ["getprop", "emu.uuid"]:
            return [FakeProcessRunner.instances[-1].token]
        self.queries += 1
        if self.boot_error is not None:
            raise self.boot_error
        return [self.boot_value]

    def wait_for(self, transport, state, serial=None) -> None:
        return None

    def get_property(self, key: str, serial: str | None = None) -> str:
        self.property_calls.append((key, serial))
        return self.boot_value


@pytest.fixture(autouse=True)
def _isolated_xdg(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))


def _service(tmp_path: Path, transport: EmulatorTransport) -> EmulatorService:
    emulator_bin = tmp_path / "emulator" / "emulator"
    emulator_bin.parent.mkdir(parents=True, exist_ok=True)
    emulator_bin.write_text("", encoding="utf-8")
    emulator = Emulator(
        tmp_path,
        process_factory=FakeProcessRunner,
        transport_factory=lambda _root: transport,
    )
    return EmulatorService(tmp_path, transport=transport, emulator=emulator)


def test_boot_by_avd_returns_resolved_serial(tmp_path: Path) -> None:
    service = _service(tmp_path, EmulatorTransport())
    result = service.boot("Pixel_8", timeout=30, output_path=tmp_path / "emu.log")

    assert result.booted is True
    assert result.serial == "emulator-5580"
    launched = FakeProcessRunner.instances[-1]
    assert launched.args[:2] == ["-avd", "Pixel_8"]
    assert launched.output_path == tmp_path / "emu.log"


def test_boot_by_profile_uses_profile_options(tmp_path: Path) -> None:
    service = _service(tmp_path, EmulatorTransport())
    result = service.boot(profile_id="headless_ci")

    assert result
    launched = FakeProcessRunner.instances[-1]
    assert launched.args[:2] == ["-avd", "ci_api_34"]
    assert "-no-window" in launched.args


def test_boot_requires_avd_or_profile(tmp_path: Path) -> None:
    service = _service(tmp_path, EmulatorTransport())
    with pytest.raises(ProfileValidationError):
        service.boot()


def test_unknown_profile(tmp_path: Path) -> None:
    service = _service(tmp_path, EmulatorTransport())
    with pytest.raises(ProfileValidationError, match="Unknown profile"):
        service.boot(profile_id="nope")


def test_kill_on_timeout(tmp_path: Path) -> None:
    service = _service(tmp_path, EmulatorTransport(boot_value="0"))
    cancel = CancellationToken()
    cancel.cancel()

    result = service.boot("Pixel_8", cancel=cancel, kill_on_timeout=True)

    assert not result
    assert FakeProcessRunner.instances[-1].kills == 1


def test_no_kill_without_flag(tmp_path: Path) -> None:
    service = _service(tmp_path, EmulatorTransport(boot_value="0"))
    cancel = CancellationToken()
    cancel.cancel()

    assert not service.boot("Pixel_8", cancel=cancel)
    assert FakeProcessRunner.instances[-1].kills == 0


def test_communication_failure_propagates_and_kills(tmp_path: Path) -> None:
    service = _service(tmp_path, EmulatorTransport(boot_error=DeviceCommunicationError("device offline")))
    with pytest.raises(DeviceCommunicationError):
        service.boot("Pixel_8", kill_on_timeout=True)
    assert FakeProcessRunner.instances[-1].kills == 1


def test_get_property_uses_transport(tmp_path: Path) -> None:
    transport = EmulatorTransport(boot_value="1")
    service = _service(tmp_path, transport)
    assert service.get_property("dev.bootcomplete", "emulator-5580") == "1"
    assert transport.property_calls == [("dev.bootcomplete", "emulator-5580")]
