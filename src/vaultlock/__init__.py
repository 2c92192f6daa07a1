"""Vaultlock: lease-based single-writer lock for sync-replicated vaults."""

__version__ = "0.1.0"

from .core import (  # noqa: E402
    acquire_vault_lock,
    acquire_vault_lock_async,
    check_vault_lock_status,
    get_hostname,
    get_machine_id,
    get_machine_info,
    is_vault_lock_held,
    release_all_locks,
    release_vault_lock,
    release_vault_lock_async,
)
from .errors import (  # noqa: E402
    LockConfigError,
    LockIOError,
    LockNotFoundError,
    LockParseError,
    VaultLockError,
)
from .models import (  # noqa: E402
    AcquireAlreadyHeld,
    AcquireDenied,
    AcquireError,
    AcquireSuccess,
    LockAcquireResult,
    LockRecord,
    LockStatus,
    MachineInfo,
)

__all__ = [
    "AcquireAlreadyHeld",
    "AcquireDenied",
    "AcquireError",
    "AcquireSuccess",
    "LockAcquireResult",
    "LockConfigError",
    "LockIOError",
    "LockNotFoundError",
    "LockParseError",
    "LockRecord",
    "LockStatus",
    "MachineInfo",
    "VaultLockError",
    "__version__",
    "acquire_vault_lock",
    "acquire_vault_lock_async",
    "check_vault_lock_status",
    "get_hostname",
    "get_machine_id",
    "get_machine_info",
    "is_vault_lock_held",
    "release_all_locks",
    "release_vault_lock",
    "release_vault_lock_async",
]
