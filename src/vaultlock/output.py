"""Rendering of lock outcomes for the vaultlock CLI.

Commands report through an OutputContext: rich text for people, or the
pydantic model dumped as JSON with ``--json``.
"""

import json
from dataclasses import dataclass
from typing import Any

from rich.console import Console

from .models import (
    AcquireDenied,
    AcquireError,
    LockAcquireResult,
    LockRecord,
    LockStatus,
    MachineInfo,
    utc_now,
)


def describe_holder(holder: LockRecord) -> str:
    """One-line summary of who holds a lock and how fresh its heartbeat is."""
    age = int(holder.heartbeat_age(utc_now()).total_seconds())
    return (
        f"{holder.hostname} (machine {holder.machine_id}, pid {holder.pid}, "
        f"v{holder.app_version}), locked {holder.locked_at:%Y-%m-%d %H:%M:%S} UTC, "
        f"last heartbeat {age}s ago"
    )


@dataclass
class OutputContext:
    """Where and how lock outcomes are reported."""

    console: Console
    json_mode: bool = False

    def _emit_json(self, data: dict[str, Any]) -> None:
        print(json.dumps(data, indent=2, default=str))

    def print(self, message: str, style: str | None = None) -> None:
        """Print a human-only hint; suppressed in JSON mode."""
        if not self.json_mode:
            self.console.print(message, style=style)

    def error(self, message: str, data: dict[str, Any] | None = None) -> None:
        if self.json_mode:
            self._emit_json({"error": message, **(data or {})})
        else:
            self.console.print(f"[red]Error: {message}[/red]")

    def success(self, message: str, data: dict[str, Any] | None = None) -> None:
        if self.json_mode:
            self._emit_json({"success": message, **(data or {})})
        else:
            self.console.print(f"[green]{message}[/green]")

    def machine_info(self, info: MachineInfo) -> None:
        """Show the identity this machine stamps on lock records."""
        if self.json_mode:
            self._emit_json(info.model_dump(mode="json"))
            return
        self.console.print(
            f"[bold]Machine ID:[/bold] {info.machine_id}\n"
            f"[bold]Hostname:[/bold] {info.hostname}\n"
            f"[bold]PID:[/bold] {info.pid}"
        )

    def lock_status(self, status: LockStatus) -> None:
        """Show the current holder of a vault, if any."""
        if self.json_mode:
            self._emit_json(status.model_dump(mode="json"))
            return
        if not status.is_locked or status.holder is None:
            self.console.print("[green]Vault is not locked[/green]")
            return

        owner = "this machine" if status.is_mine else "another machine"
        self.console.print(f"[bold]Locked by {owner}:[/bold] {describe_holder(status.holder)}")
        if status.is_stale:
            self.console.print("[yellow]Lock appears stale[/yellow]")

    def acquire_result(self, result: LockAcquireResult) -> None:
        """Report an acquire outcome.

        A denial carries the holder and staleness so a person can decide
        whether to force a takeover.
        """
        if isinstance(result, AcquireError):
            self.error(result.message, result.model_dump(mode="json"))
            return
        if isinstance(result, AcquireDenied):
            self.error(
                f"Vault is locked by {describe_holder(result.holder)}",
                result.model_dump(mode="json"),
            )
            if result.is_stale:
                self.print("[yellow]The lock appears stale.[/yellow]")
            self.print("Re-run with --force to take over the lock.")
            return

        message = "Lock acquired" if result.status == "Success" else "Lock already held here"
        self.success(message, result.model_dump(mode="json"))

    def release_refused(self, status: LockStatus) -> None:
        """Report a release that left another machine's lock in place."""
        hostname = status.holder.hostname if status.holder else "another machine"
        self.error(f"Lock belongs to {hostname}; left in place", status.model_dump(mode="json"))


# Global output context (set by cli.py main callback)
_ctx: OutputContext | None = None


def get_output_context() -> OutputContext:
    """Get the current output context.

    Returns a default OutputContext if not yet initialized by CLI.
    """
    if _ctx is None:
        return OutputContext(Console())
    return _ctx


def set_output_context(ctx: OutputContext) -> None:
    """Set the global output context. Called by CLI main callback."""
    global _ctx
    _ctx = ctx
