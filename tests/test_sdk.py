from __future__ import annotations

import sys
from pathlib import Path

import pytest

from emuctl.core.errors import ExecutableNotFoundError, SdkNotFoundError
from emuctl.core.sdk import find_tool, require_tool, resolve_sdk_root


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("", encoding="utf-8")
    return path


def test_find_tool_layouts(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(sys, "platform", "linux")
    emulator = _touch(tmp_path / "emulator" / "emulator")
    adb = _touch(tmp_path / "platform-tools" / "adb")

    assert find_tool(tmp_path, "emulator") == emulator
    assert find_tool(tmp_path, "adb") == adb


def test_find_tool_windows_extension(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(sys, "platform", "win32")
    adb = _touch(tmp_path / "platform-tools" / "adb.exe")
    assert find_tool(tmp_path, "adb") == adb


def test_find_tool_missing_returns_none(tmp_path: Path) -> None:
    assert find_tool(tmp_path, "emulator") is None


def test_require_tool_raises_file_not_found(tmp_path: Path) -> None:
    with pytest.raises(ExecutableNotFoundError) as exc:
        require_tool(tmp_path, "emulator")
    assert isinstance(exc.value, FileNotFoundError)


def test_resolve_sdk_root_prefers_explicit(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("ANDROID_SDK_ROOT", "/env/sdk")
    assert resolve_sdk_root(tmp_path) == tmp_path


def test_resolve_sdk_root_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("ANDROID_SDK_ROOT", raising=False)
    monkeypatch.setenv("ANDROID_HOME", "/opt/android-sdk")
    assert resolve_sdk_root() == Path("/opt/android-sdk")


def test_resolve_sdk_root_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("ANDROID_SDK_ROOT", raising=False)
    monkeypatch.delenv("ANDROID_HOME", raising=False)
    with pytest.raises(SdkNotFoundError):
        resolve_sdk_root()


def test_find_tool_avdmanager_layout(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(sys, "platform", "linux")
    avdmanager = _touch(tmp_path / "tools" / "bin" / "avdmanager")
    assert find_tool(tmp_path, "avdmanager") == avdmanager


def test_find_tool_avdmanager_windows_batch(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(sys, "platform", "win32")
    avdmanager = _touch(tmp_path / "tools" / "bin" / "avdmanager.bat")
    assert find_tool(tmp_path, "avdmanager") == avdmanager
