"""Core data models used across launcher, transport, service, and CLI."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class AdbTransport(str, Enum):
    ANY = "any"
    USB = "usb"
    LOCAL = "local"


class AdbState(str, Enum):
    DEVICE = "device"
    RECOVERY = "recovery"
    RESCUE = "rescue"
    SIDELOAD = "sideload"
    BOOTLOADER = "bootloader"
    DISCONNECT = "disconnect"
    OFFLINE = "offline"
    UNAUTHORIZED = "unauthorized"
    AUTHORIZING = "authorizing"
    CONNECTING = "connecting"
    HOST = "host"
    NO_PERMISSIONS = "no permissions"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str) -> AdbState:
        normalized = value.strip().lower()
        if normalized.startswith("no permissions"):
            return cls.NO_PERMISSIONS
        token = normalized.split()[0] if normalized else ""
        try:
            return cls(token)
        except ValueError:
            return cls.UNKNOWN


# States accepted by `adb wait-for-<transport>-<state>`.
WAITABLE_STATES = frozenset(
    {
        AdbState.DEVICE,
        AdbState.RECOVERY,
        AdbState.RESCUE,
        AdbState.SIDELOAD,
        AdbState.BOOTLOADER,
        AdbState.DISCONNECT,
    }
)


@dataclass(frozen=True)
class DeviceHandle:
    serial: str
    state: AdbState
    product: str | None = None
    model: str | None = None
    device: str | None = None
    transport_id: str | None = None

    @property
    def is_emulator(self) -> bool:
        return self.serial.startswith("emulator-")


@dataclass(frozen=True)
class CommandResult:
    args: tuple[str, ...]
    exit_code: int
    stdout_lines: tuple[str, ...]
    stderr_lines: tuple[str, ...] = ()

    def ok(self) -> bool:
        return self.exit_code == 0


@dataclass(frozen=True)
class StartOptions:
    no_snapshot_load: bool = False
    no_snapshot_save: bool = False
    no_snapshot: bool = False
    camera_back: str | None = None
    camera_front: str | None = None
    memory_mb: int | None = None
    sdcard: Path | None = None
    wipe_data: bool = False
    debug: tuple[str, ...] = ()
    logcat: tuple[str, ...] = ()
    show_kernel: bool = False
    verbose: bool = False
    dns_servers: tuple[str, ...] = ()
    http_proxy: str | None = None
    netdelay: str | None = None
    netfast: bool = False
    netspeed: str | None = None
    ports: tuple[int, int] | None = None
    port: int | None = None
    tcpdump: Path | None = None
    accel: str | None = None
    no_accel: bool = False
    engine: str | None = None
    no_jni: bool = False
    selinux: str | None = None
    timezone: str | None = None
    no_boot_anim: bool = False
    screen: str | None = None
    no_window: bool = False
    gpu: str | None = None
    extra_args: tuple[str, ...] = ()


@dataclass(frozen=True)
class LaunchProfile:
    id: str
    name: str
    avd: str
    boot_timeout_s: float = 0.0
    options: StartOptions = field(default_factory=StartOptions)


@dataclass(frozen=True)
class BootResult:
    booted: bool
    serial: str | None = None

    def __bool__(self) -> bool:
        return self.booted
