"""Pydantic data models for vault lock state.

This package defines:
- The persisted lock record (LockRecord)
- Acquisition outcomes (LockAcquireResult and its variants)
- Read-only status views (LockStatus, MachineInfo)

Example:
    >>> from vaultlock.models import LockRecord
    >>> record = LockRecord(machine_id="abc", hostname="laptop", pid=42, app_version="0.1.0")
    >>> record.model_dump_json(indent=2)
"""

from .lock import LockRecord, utc_now
from .result import (
    AcquireAlreadyHeld,
    AcquireDenied,
    AcquireError,
    AcquireSuccess,
    LockAcquireResult,
)
from .status import LockStatus, MachineInfo

__all__ = [
    "AcquireAlreadyHeld",
    "AcquireDenied",
    "AcquireError",
    "AcquireSuccess",
    "LockAcquireResult",
    "LockRecord",
    "LockStatus",
    "MachineInfo",
    "utc_now",
]
