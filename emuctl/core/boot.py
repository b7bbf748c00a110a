"""Boot-completion polling and cooperative cancellation."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable, Sequence
from datetime import timedelta

from emuctl.transports.base import DeviceTransport

BOOT_PROPERTY = "dev.bootcomplete"
POLL_INTERVAL_S = 1.0
LOGGER = logging.getLogger(__name__)

Timeout = float | int | timedelta


def to_seconds(timeout: Timeout) -> float:
    if isinstance(timeout, timedelta):
        return timeout.total_seconds()
    return float(timeout)


class CancellationToken:
    """Cooperative cancellation signal, optionally backed by a monotonic deadline.

    The token never interrupts work in flight; pollers check `cancelled`
    between operations.
    """

    def __init__(
        self,
        deadline: float | None = None,
        *,
        linked: Sequence[CancellationToken] = (),
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._event = threading.Event()
        self._deadline = deadline
        self._linked = tuple(linked)
        self._clock = clock

    @classmethod
    def after(cls, timeout: Timeout, *, clock: Callable[[], float] = time.monotonic) -> CancellationToken:
        return cls(clock() + to_seconds(timeout), clock=clock)

    @classmethod
    def from_timeout(
        cls,
        timeout: Timeout | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> CancellationToken:
        """Build a token for a caller timeout; None or zero waits indefinitely."""
        if timeout is None:
            return cls(clock=clock)
        seconds = to_seconds(timeout)
        if seconds < 0:
            raise ValueError(f"Timeout must not be negative, got {seconds}")
        if seconds == 0:
            return cls(clock=clock)
        return cls.after(seconds, clock=clock)

    def link(self, *others: CancellationToken) -> CancellationToken:
        """Return a token that is cancelled as soon as this one or any of `others` is."""
        return CancellationToken(linked=(self, *others), clock=self._clock)

    def cancel(self) -> None:
        self._event.set()

    @property
    def deadline(self) -> float | None:
        return self._deadline

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and self._clock() >= self._deadline:
            return True
        return any(token.cancelled for token in self._linked)


def is_boot_complete(lines: Iterable[str]) -> bool:
    return any((line or "").strip() == "1" for line in lines)


def poll_boot_complete(
    transport: DeviceTransport,
    serial: str | None,
    cancel: CancellationToken,
    *,
    interval: float = POLL_INTERVAL_S,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Query the boot property on `serial` until it reports completion or `cancel` fires.

    Communication errors propagate; cancellation returns False.
    """
    attempts = 0
    while not cancel.cancelled:
        attempts += 1
        lines = transport.shell(["getprop", BOOT_PROPERTY], serial)
        if is_boot_complete(lines):
            LOGGER.info("Boot completed on %s after %d queries", serial or "<any>", attempts)
            return True
        if cancel.cancelled:
            break
        sleep(interval)

    LOGGER.info("Boot wait on %s cancelled after %d queries", serial or "<any>", attempts)
    return False
