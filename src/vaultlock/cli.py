"""Vaultlock CLI: inspect and manage the lock of a synced vault."""

import time
from pathlib import Path

import typer

from vaultlock import __version__

from .config import write_config_template
from .constants import CONFIG_FILE
from .core import (
    acquire_vault_lock,
    check_vault_lock_status,
    get_machine_info,
    get_metadata_dir,
    is_vault_lock_held,
    release_vault_lock,
)
from .errors import VaultLockError
from .logging import configure_logging
from .models import AcquireDenied, AcquireError
from .output import OutputContext, get_output_context, set_output_context

HOLD_POLL_INTERVAL = 1.0


def _version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"vaultlock {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="vaultlock",
    help="Single-writer lock for vaults replicated by a file-sync service",
    no_args_is_help=True,
)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v, -vv)",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress non-error output",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in JSON format for automation",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
) -> None:
    """Vaultlock - lease-based vault lock."""
    console = configure_logging(
        verbosity=verbose,
        quiet=quiet,
        no_color=no_color,
    )
    set_output_context(OutputContext(console=console, json_mode=json_output))


def _wait_while_held(vault: Path) -> bool:
    """Block until interrupted or the lock is lost.

    Returns:
        True if interrupted by the user, False if the lock was lost
    """
    try:
        while is_vault_lock_held(vault):
            time.sleep(HOLD_POLL_INTERVAL)
    except KeyboardInterrupt:
        return True
    return False


# ============================================================================
# vaultlock whoami
# ============================================================================


@app.command()
def whoami() -> None:
    """Show the identity this machine stamps on locks."""
    get_output_context().machine_info(get_machine_info())


# ============================================================================
# vaultlock status
# ============================================================================


@app.command()
def status(
    vault: Path = typer.Argument(..., help="Vault root directory"),
) -> None:
    """Show who holds the vault lock."""
    ctx = get_output_context()

    try:
        lock_status = check_vault_lock_status(vault)
    except VaultLockError as e:
        ctx.error(str(e))
        raise typer.Exit(2) from None

    ctx.lock_status(lock_status)


# ============================================================================
# vaultlock hold
# ============================================================================


@app.command()
def hold(
    vault: Path = typer.Argument(..., help="Vault root directory"),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Take over a lock held by another machine",
    ),
) -> None:
    """Acquire the vault lock and keep it until interrupted."""
    ctx = get_output_context()

    result = acquire_vault_lock(vault, force)
    ctx.acquire_result(result)
    if isinstance(result, AcquireError):
        raise typer.Exit(2)
    if isinstance(result, AcquireDenied):
        raise typer.Exit(1)
    ctx.print("Press Ctrl-C to release")

    interrupted = _wait_while_held(vault)
    if not interrupted:
        ctx.error("Lock was lost: taken over by another machine or removed")
        raise typer.Exit(1)

    try:
        release_vault_lock(vault)
    except VaultLockError as e:
        ctx.error(str(e))
        raise typer.Exit(2) from None
    ctx.success("Lock released")


# ============================================================================
# vaultlock release
# ============================================================================


@app.command()
def release(
    vault: Path = typer.Argument(..., help="Vault root directory"),
) -> None:
    """Remove this machine's lock from the vault."""
    ctx = get_output_context()
    try:
        release_vault_lock(vault)
    except VaultLockError as e:
        ctx.error(str(e))
        raise typer.Exit(2) from None

    try:
        lock_status = check_vault_lock_status(vault)
    except VaultLockError as e:
        ctx.error(str(e))
        raise typer.Exit(2) from None
    if lock_status.is_locked and lock_status.holder is not None and not lock_status.is_mine:
        ctx.release_refused(lock_status)
        raise typer.Exit(1)
    ctx.success("Lock released")


# ============================================================================
# vaultlock init
# ============================================================================


@app.command()
def init(
    vault: Path = typer.Argument(..., help="Vault root directory"),
) -> None:
    """Write a lock config template into the vault."""
    ctx = get_output_context()
    if not vault.is_dir():
        ctx.error(f"Vault directory not found: {vault}")
        raise typer.Exit(1)

    metadata_dir = get_metadata_dir(vault)
    config_path = metadata_dir / CONFIG_FILE
    if config_path.exists():
        ctx.print(f"[yellow]Config already exists:[/yellow] {config_path}")
        return

    write_config_template(metadata_dir)
    ctx.success(f"Created config template: {config_path}")


if __name__ == "__main__":
    app()
