"""Lock record model for vault-level mutual exclusion.

A single record lives at .vaultlock/vault.lock inside the vault and is
replicated to other devices by the external sync service.
"""

from datetime import UTC, datetime, timedelta

from pydantic import BaseModel, Field, field_validator


def utc_now() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(UTC)


class LockRecord(BaseModel):
    """Vault lock written to .vaultlock/vault.lock.

    Attributes:
        machine_id: Stable identifier of the holder's machine (decides ownership).
        hostname: Display name of the holder, used in messages and backup names.
        pid: Process ID of the holder (informational only).
        app_version: Version of the application that took the lock.
        locked_at: When the lock was acquired. Never changes afterwards.
        heartbeat: Last refresh by the holder's heartbeat maintainer.
    """

    machine_id: str = Field(description="Stable machine identifier of the holder")
    hostname: str = Field(description="Hostname of the holder")
    pid: int = Field(description="Process ID holding the lock")
    app_version: str = Field(description="Application version of the holder")
    locked_at: datetime = Field(default_factory=utc_now)
    heartbeat: datetime = Field(default_factory=utc_now)

    @field_validator("locked_at", "heartbeat")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Records written without an offset are taken as UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    def heartbeat_age(self, now: datetime | None = None) -> timedelta:
        """Time elapsed since the last heartbeat."""
        return (now or utc_now()) - self.heartbeat

    def is_stale(self, threshold_secs: float, now: datetime | None = None) -> bool:
        """Check whether the heartbeat is older than the stale threshold.

        Args:
            threshold_secs: Max heartbeat age before the holder is considered gone
            now: Reference time (defaults to current UTC time)

        Returns:
            True if the heartbeat age strictly exceeds the threshold
        """
        return self.heartbeat_age(now) > timedelta(seconds=threshold_secs)

    def with_heartbeat(self, now: datetime | None = None) -> "LockRecord":
        """Return a copy with the heartbeat refreshed.

        The heartbeat never moves backwards and never precedes locked_at,
        even if the wall clock was stepped back.
        """
        stamp = max(now or utc_now(), self.heartbeat, self.locked_at)
        return self.model_copy(update={"heartbeat": stamp})
