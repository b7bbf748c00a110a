"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

import typer

from emuctl.core.errors import EmuctlError
from emuctl.core.service import EmulatorService

app = typer.Typer(help="Launch Android emulators and wait for them to finish booting")


def _build_service(ctx: typer.Context) -> EmulatorService:
    sdk = (ctx.obj or {}).get("sdk")
    service = EmulatorService(sdk)
    for warning in getattr(service, "load_warnings", ()):
        typer.echo(f"Warning: {warning}", err=True)
    return service


@app.callback()
def main(
    ctx: typer.Context,
    sdk: str | None = typer.Option(
        None,
        "--sdk",
        help="Android SDK root (defaults to ANDROID_SDK_ROOT / ANDROID_HOME)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = {"sdk": sdk}


@app.command("avds")
def list_avds(ctx: typer.Context) -> None:
    """List AVDs known to the emulator."""
    try:
        service = _build_service(ctx)
        avds = service.list_avds()
        if not avds:
            typer.echo("No AVDs found")
            return
        for avd in avds:
            typer.echo(avd)
    except EmuctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("devices")
def list_devices(ctx: typer.Context) -> None:
    """List devices visible to the adb daemon."""
    try:
        service = _build_service(ctx)
        devices = service.list_devices()
        if not devices:
            typer.echo("No devices attached")
            return

        for device in devices:
            detail = f" ({device.model})" if device.model else ""
            typer.echo(f"{device.serial} {device.state.value}{detail}")
    except EmuctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("profiles")
def list_profiles(ctx: typer.Context) -> None:
    """List launch profiles."""
    try:
        service = _build_service(ctx)
        profiles = service.list_profiles()
        if not profiles:
            typer.echo("No profiles loaded")
            raise typer.Exit(code=1)

        for profile in profiles:
            timeout = f"{profile.boot_timeout_s:g}s" if profile.boot_timeout_s else "no timeout"
            typer.echo(f"{profile.id}: {profile.name} (avd={profile.avd}, {timeout})")
    except EmuctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("boot")
def boot(
    ctx: typer.Context,
    avd: str | None = typer.Argument(None, help="AVD name; optional when --profile is given"),
    profile: str | None = typer.Option(None, "--profile", help="Launch profile ID"),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        min=0,
        help="Seconds to wait for boot; 0 waits indefinitely",
    ),
    kill_on_timeout: bool = typer.Option(
        False,
        "--kill-on-timeout",
        help="Kill the emulator when it does not boot in time",
    ),
    log_file: Path | None = typer.Option(None, "--log-file", help="Where to write emulator output"),
) -> None:
    """Launch an emulator and block until it reports boot completion."""
    try:
        service = _build_service(ctx)
        output_path = log_file or Path(tempfile.gettempdir()) / f"emuctl-{avd or profile or 'emulator'}.log"
        result = service.boot(
            avd,
            profile_id=profile,
            timeout=timeout,
            kill_on_timeout=kill_on_timeout,
            output_path=output_path,
        )
        if not result:
            typer.echo("Error: emulator did not finish booting before the timeout", err=True)
            raise typer.Exit(code=1)
        typer.echo(f"Booted {result.serial or '<unresolved serial>'}")
        typer.echo(f"Emulator output: {output_path}")
    except EmuctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("getprop")
def getprop(
    ctx: typer.Context,
    key: str,
    serial: str | None = typer.Option(None, "--serial", "-s", help="Device serial"),
) -> None:
    """Read a system property from a device."""
    try:
        service = _build_service(ctx)
        typer.echo(service.get_property(key, serial))
    except EmuctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
