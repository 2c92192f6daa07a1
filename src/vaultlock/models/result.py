"""Outcomes of a vault lock acquisition attempt.

Serialized with a ``status`` tag so the UI layer can switch on it:

    {"status": "Denied", "holder": {...}, "is_stale": true}
"""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from .lock import LockRecord


class AcquireSuccess(BaseModel):
    """A new lock record for this machine was written."""

    status: Literal["Success"] = "Success"

    @property
    def grants_access(self) -> bool:
        return True


class AcquireAlreadyHeld(BaseModel):
    """The on-disk record already belongs to this machine (reconnection)."""

    status: Literal["AlreadyHeld"] = "AlreadyHeld"

    @property
    def grants_access(self) -> bool:
        return True


class AcquireDenied(BaseModel):
    """A valid record from another machine holds the vault.

    Attributes:
        holder: The foreign lock record.
        is_stale: Whether the holder's heartbeat is older than the stale threshold.
            Advisory only: a stale lock is never taken over without ``force``.
    """

    status: Literal["Denied"] = "Denied"
    holder: LockRecord
    is_stale: bool

    @property
    def grants_access(self) -> bool:
        return False


class AcquireError(BaseModel):
    """Acquisition failed on I/O; nothing was changed on disk."""

    status: Literal["Error"] = "Error"
    message: str

    @property
    def grants_access(self) -> bool:
        return False


LockAcquireResult = Annotated[
    AcquireSuccess | AcquireAlreadyHeld | AcquireDenied | AcquireError,
    Field(discriminator="status"),
]
