"""Launch token generation and injection into emulator arguments."""

from __future__ import annotations

import uuid

UUID_PROPERTY = "emu.uuid"


def new_launch_token() -> str:
    return str(uuid.uuid4())


def inject_launch_token(args: list[str], token: str | None = None) -> str:
    """Append the runtime property directive carrying the launch token to `args`.

    Returns the token so the caller can keep it for discovery.
    """
    token = token or new_launch_token()
    args.extend(["-prop", f"{UUID_PROPERTY}={token}"])
    return token


def launch_token_query() -> list[str]:
    return ["getprop", UUID_PROPERTY]
