"""Subprocess plumbing for SDK tool invocations."""

from __future__ import annotations

import logging
import subprocess
import threading
from collections.abc import Sequence
from os import PathLike
from pathlib import Path

from emuctl.core.errors import ExecutableNotFoundError
from emuctl.core.model import CommandResult

LOGGER = logging.getLogger(__name__)


def _command(executable: str | PathLike[str], args: Sequence[str]) -> list[str]:
    return [str(executable), *(str(arg) for arg in args)]


def run_command(executable: str | PathLike[str], args: Sequence[str] = ()) -> CommandResult:
    """Run a tool to completion and capture its output as lines."""
    cmd = _command(executable, args)
    LOGGER.debug("Running %s", " ".join(cmd))
    try:
        completed = subprocess.run(
            cmd,
            check=False,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as exc:
        raise ExecutableNotFoundError(f"Could not find executable {executable}") from exc

    return CommandResult(
        args=tuple(cmd),
        exit_code=completed.returncode,
        stdout_lines=tuple((completed.stdout or "").splitlines()),
        stderr_lines=tuple((completed.stderr or "").splitlines()),
    )


class ProcessRunner:
    """A long-lived child process with its combined output captured.

    Output is buffered in memory by a background reader unless `output_path`
    is given, in which case it goes to that file so the child never depends on
    this process staying alive.
    """

    def __init__(
        self,
        executable: str | PathLike[str],
        args: Sequence[str] = (),
        *,
        output_path: str | PathLike[str] | None = None,
    ) -> None:
        self.args = tuple(_command(executable, args))
        self.output_path = Path(output_path) if output_path is not None else None
        self._lines: list[str] = []
        self._lock = threading.Lock()
        self._reader: threading.Thread | None = None

        LOGGER.debug("Starting %s", " ".join(self.args))
        try:
            if self.output_path is not None:
                with self.output_path.open("w", encoding="utf-8") as sink:
                    self._process = subprocess.Popen(
                        list(self.args),
                        stdin=subprocess.DEVNULL,
                        stdout=sink,
                        stderr=subprocess.STDOUT,
                    )
            else:
                self._process = subprocess.Popen(
                    list(self.args),
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.STDOUT,
                    text=True,
                )
        except FileNotFoundError as exc:
            raise ExecutableNotFoundError(f"Could not find executable {executable}") from exc

        if self.output_path is None:
            self._reader = threading.Thread(target=self._drain, name=f"emuctl-stdout-{self.pid}", daemon=True)
            self._reader.start()

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def returncode(self) -> int | None:
        return self._process.poll()

    def _drain(self) -> None:
        stream = self._process.stdout
        if stream is None:
            return
        with stream:
            for line in stream:
                with self._lock:
                    self._lines.append(line.rstrip("\r\n"))

    def output_lines(self) -> tuple[str, ...]:
        if self.output_path is not None:
            try:
                text = self.output_path.read_text(encoding="utf-8", errors="replace")
            except FileNotFoundError:
                return ()
            return tuple(text.splitlines())
        with self._lock:
            return tuple(self._lines)

    def wait(self) -> CommandResult:
        exit_code = self._process.wait()
        if self._reader is not None:
            self._reader.join()
        return CommandResult(args=self.args, exit_code=exit_code, stdout_lines=self.output_lines())

    def kill(self) -> None:
        if self._process.poll() is not None:
            return
        try:
            self._process.kill()
        except ProcessLookupError:
            return
        self._process.wait()
