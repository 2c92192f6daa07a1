"""Read-only views of lock and machine state."""

from pydantic import BaseModel, Field

from .lock import LockRecord


class LockStatus(BaseModel):
    """Current lock state of a vault as seen from this device."""

    is_locked: bool = Field(description="A valid lock record exists")
    holder: LockRecord | None = Field(default=None, description="Current holder, if locked")
    is_stale: bool = Field(default=False, description="Holder's heartbeat exceeds the threshold")
    is_mine: bool = Field(default=False, description="Holder is this machine")


class MachineInfo(BaseModel):
    """Identity this process uses when taking locks."""

    machine_id: str
    hostname: str
    pid: int
