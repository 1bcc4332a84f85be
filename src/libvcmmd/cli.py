"""
Command-line interface for libvcmmd.

This module defines a few read-only diagnostic commands using the Typer
library. Managing VEs is left to the tools that own them.
"""

from typing import Annotated

import typer

from libvcmmd import __version__

app = typer.Typer(
    name="libvcmmd",
    help="libvcmmd - query the VCMMD memory management daemon",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        typer.echo(f"libvcmmd {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
    session: Annotated[
        bool,
        typer.Option("--session", help="Talk to a daemon on the session bus"),
    ] = False,
) -> None:
    """libvcmmd - query the VCMMD memory management daemon."""
    from libvcmmd.dbus import BusType

    ctx.obj = BusType.SESSION if session else BusType.SYSTEM


def _make_client(ctx: typer.Context):
    from libvcmmd.dbus import BusConnection, BusType
    from libvcmmd.rpc import RpcClient

    return RpcClient(BusConnection(ctx.obj if ctx.obj is not None else BusType.SYSTEM))


def _fail(code: int) -> None:
    from libvcmmd.errors import strerror

    print(f"Error: {strerror(code)} ({code})")
    raise typer.Exit(code=1)


@app.command("strerror")
def show_strerror(code: int = typer.Argument(..., help="Error code")) -> None:
    """Describe an error code."""
    from libvcmmd.errors import classify, strerror

    kind = classify(code)
    band = f"{type(kind).__name__}.{kind.name}" if kind is not None else "-"
    print(f"{code}: {strerror(code)} [{band}]")


@app.command("state")
def show_state(ctx: typer.Context, name: str = typer.Argument(..., help="VE name")) -> None:
    """Show whether a VE is unregistered, registered or active."""
    from libvcmmd.api import get_ve_state

    err, state = get_ve_state(name, client=_make_client(ctx))
    if err:
        _fail(err)
    print(f"{name}: {state.value}")


@app.command("config")
def show_config(ctx: typer.Context, name: str = typer.Argument(..., help="VE name")) -> None:
    """
    Show the config the daemon holds for a VE.

    Memory sizes are printed in bytes.
    """
    from libvcmmd.api import get_ve_config

    err, config = get_ve_config(name, client=_make_client(ctx))
    if err:
        _fail(err)

    print(f"VE {name}")
    print("-" * 40)
    for entry in config:
        print(f"  {entry.key.name.lower():<16} {entry.value}")


@app.command("policy")
def show_policy(ctx: typer.Context) -> None:
    """Show the current load-management policy and the configured one."""
    from libvcmmd.api import get_current_policy, get_policy_from_file

    client = _make_client(ctx)

    err, current = get_current_policy(client=client)
    if err:
        _fail(err)
    print(f"Current policy:    {current}")

    err, configured = get_policy_from_file(client=client)
    if err:
        _fail(err)
    print(f"Configured policy: {configured}")


if __name__ == "__main__":
    app()
