"""Command-line entry points for inspecting and operating player world locks."""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Tuple

import typer
from rich import print as rprint
from rich.logging import RichHandler

from .config import HostSettings, WorldLockConfig, get_host_settings, load_config
from .errors import ProtocolViolation, WorldLockError
from .files_backend import parse_record, split_record
from .friendly import FriendlyNames
from .gate import JoinGate
from .identifiers import SAFE_CHARSET_DISPLAY, is_safe_identifier
from .models import Owner, PutTransientFailure, Transient, Unclaimed
from .provider import LockProvider
from .registry import ProviderRegistry
from .runtime import DEFAULT_PLUGINS, build_provider

app = typer.Typer(help="Inspect and manage which server instance owns each player.")


def _settings(ctx: typer.Context) -> HostSettings:
    return ctx.obj["settings"]


def _safe(value: str, what: str) -> str:
    if not value or not is_safe_identifier(value):
        raise typer.BadParameter(f"{what} must use only {SAFE_CHARSET_DISPLAY}.")
    return value


def _fail(exc: Exception) -> typer.Exit:
    rprint(f"[red]{exc}[/red]")
    return typer.Exit(code=1)


@contextmanager
def _open_provider(
    settings: HostSettings, config_path: Optional[Path]
) -> Iterator[Tuple[WorldLockConfig, LockProvider]]:
    config = load_config(config_path or settings.config_path())
    provider = build_provider(config, settings, registry=ProviderRegistry())
    try:
        yield config, provider
    finally:
        provider.close()


@app.callback()
def main_callback(
    ctx: typer.Context,
    world: Optional[Path] = typer.Option(
        None,
        "--world",
        "-w",
        help="World directory holding player_world_lock.json (overrides PLAYER_WORLD_LOCK_WORLD_PATH).",
    ),
    lockdir: Optional[Path] = typer.Option(
        None,
        "--lockdir",
        help="Shared lock directory for the files backend (overrides PLAYER_WORLD_LOCK_LOCKDIR).",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
):
    """Load host settings and configure logging for every command."""
    settings = get_host_settings()
    overrides = {}
    if world is not None:
        overrides["world_path"] = world
    if lockdir is not None:
        overrides["lockdir"] = str(lockdir)
    if overrides:
        settings = settings.model_copy(update=overrides)

    logging.basicConfig(
        level="DEBUG" if verbose else settings.log_level.upper(),
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )
    ctx.obj = {"settings": settings}


@app.command("providers")
def providers_command(ctx: typer.Context):
    """List the lock backends that are available."""
    registry = ProviderRegistry()
    for plugin in DEFAULT_PLUGINS:
        plugin(registry, _settings(ctx))
    registry.seal()
    for name in registry.names():
        rprint(name)


@app.command("check")
def check_command(
    ctx: typer.Context,
    player: str = typer.Argument(..., help="Player name to look up."),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Path to player_world_lock.json."),
):
    """Show which instance owns PLAYER."""
    _safe(player, "player name")
    try:
        with _open_provider(_settings(ctx), config_path) as (_, provider):
            result = provider.check(player)
    except WorldLockError as exc:
        raise _fail(exc)

    if isinstance(result, Owner):
        rprint(f"[green]{player} is owned by {result.instance}[/green]")
    elif isinstance(result, Unclaimed):
        rprint(f"[cyan]{player} is unclaimed[/cyan]")
    elif isinstance(result, Transient):
        rprint(f"[yellow]transient: {result.reason}[/yellow]")
        raise typer.Exit(code=2)


@app.command("claim")
def claim_command(
    ctx: typer.Context,
    player: str = typer.Argument(..., help="Player name to assign."),
    owner: str = typer.Argument(..., help="Instance that should own the player."),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Path to player_world_lock.json."),
):
    """Assign PLAYER to OWNER, overwriting any existing record."""
    _safe(player, "player name")
    _safe(owner, "owner")
    try:
        with _open_provider(_settings(ctx), config_path) as (_, provider):
            outcome = provider.put(player, owner)
    except WorldLockError as exc:
        raise _fail(exc)

    if isinstance(outcome, PutTransientFailure):
        rprint(f"[yellow]transient: {outcome.reason}[/yellow]")
        raise typer.Exit(code=2)
    rprint(f"[green]{player} now belongs to {owner}[/green]")


@app.command("admit")
def admit_command(
    ctx: typer.Context,
    player: str = typer.Argument(..., help="Player name to run the join decision for."),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Path to player_world_lock.json."),
):
    """Run the join decision for PLAYER exactly as a connection attempt would."""
    try:
        with _open_provider(_settings(ctx), config_path) as (config, provider):
            gate = JoinGate(
                provider,
                config.instance_name,
                is_lock_master=config.is_lock_master,
                friendly_name=FriendlyNames(config.friendly_names),
                provider_name=config.lock_provider,
            )
            denial = gate.on_prejoin(player)
    except WorldLockError as exc:
        raise _fail(exc)

    if denial is None:
        rprint(f"[green]allow: {player} may join {config.instance_name}[/green]")
    else:
        rprint(f"[red]deny:[/red] {denial}")
        raise typer.Exit(code=1)


@app.command("inspect")
def inspect_command(
    path: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="Lock record file to inspect."
    ),
):
    """Show how a lock record file is split and what it means."""
    data = path.read_bytes()
    first_line, has_newline, remainder = split_record(data)
    rprint(f"first_line: {len(first_line)} {first_line!r}")
    rprint(f"has_newline: {has_newline}")
    rprint(f"remainder: {len(remainder)} {remainder!r}")
    try:
        result = parse_record(data, str(path))
    except ProtocolViolation as exc:
        rprint(f"[red]verdict: {exc}[/red]")
        raise typer.Exit(code=1)
    rprint(f"verdict: {result!r}")


@app.command("serve")
def serve_command(
    ctx: typer.Context,
    host: str = typer.Option("0.0.0.0", "--host", help="Interface to bind."),
    port: int = typer.Option(8000, "--port", "-p", help="Port to listen on."),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Path to player_world_lock.json."),
):
    """Serve the configured lock provider over HTTP."""
    from .server import serve

    try:
        with _open_provider(_settings(ctx), config_path) as (_, provider):
            rprint(f"[cyan]Serving {provider!r} on {host}:{port}[/cyan]")
            serve(provider, host=host, port=port)
    except WorldLockError as exc:
        raise _fail(exc)


def main():
    app()


if __name__ == "__main__":
    main()
