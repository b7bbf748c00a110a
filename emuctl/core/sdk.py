"""Android SDK root resolution and tool lookup."""

from __future__ import annotations

import os
import sys
from pathlib import Path

from emuctl.core.errors import ExecutableNotFoundError, SdkNotFoundError

SDK_ENV_VARS = ("ANDROID_SDK_ROOT", "ANDROID_HOME")

_TOOL_LAYOUTS: dict[str, tuple[tuple[str, ...], str]] = {
    "emulator": (("emulator",), ".exe"),
    "adb": (("platform-tools",), ".exe"),
    "avdmanager": (("tools", "bin"), ".bat"),
}


def resolve_sdk_root(sdk_root: str | os.PathLike[str] | None = None) -> Path:
    if sdk_root is not None:
        return Path(sdk_root).expanduser()
    for name in SDK_ENV_VARS:
        value = os.environ.get(name, "").strip()
        if value:
            return Path(value).expanduser()
    raise SdkNotFoundError(
        f"No Android SDK configured. Pass --sdk or set one of: {', '.join(SDK_ENV_VARS)}"
    )


def find_tool(sdk_root: str | os.PathLike[str], tool_name: str) -> Path | None:
    """Return the path of an SDK tool, or None when it is not installed."""
    subdirs, windows_ext = _TOOL_LAYOUTS.get(tool_name, ((), ".exe"))
    filename = tool_name + windows_ext if sys.platform.startswith("win") else tool_name
    candidate = Path(sdk_root).joinpath(*subdirs, filename)
    if candidate.is_file():
        return candidate
    return None


def require_tool(sdk_root: str | os.PathLike[str], tool_name: str) -> Path:
    path = find_tool(sdk_root, tool_name)
    if path is None:
        raise ExecutableNotFoundError(f"Could not find {tool_name} under Android SDK {sdk_root}")
    return path
