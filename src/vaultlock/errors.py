"""Vault lock errors."""


class VaultLockError(Exception):
    """Base exception for vault lock errors."""


class LockNotFoundError(VaultLockError):
    """Raised when no lock record exists at the well-known path."""


class LockParseError(VaultLockError):
    """Raised when the lock record is malformed or partially written."""


class LockIOError(VaultLockError):
    """Raised when reading, writing or removing the lock record fails."""


class LockConfigError(VaultLockError):
    """Raised when the vault's config.toml cannot be read or is invalid."""
