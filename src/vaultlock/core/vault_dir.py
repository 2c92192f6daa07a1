"""Vault metadata directory utilities."""

from pathlib import Path

from ..constants import LOCK_FILE, METADATA_DIR


def normalize_vault_path(vault_path: str | Path) -> Path:
    """Expand ``~`` and resolve a vault root to an absolute path.

    Lock I/O and the per-process registry both use this path, so that
    ``~/vault`` and ``/home/me/vault`` name the same lock.
    """
    return Path(vault_path).expanduser().resolve()


def get_metadata_dir(vault_path: str | Path) -> Path:
    """Get .vaultlock directory path.

    Args:
        vault_path: Root of the vault

    Returns:
        Path to the vault's .vaultlock directory
    """
    return Path(vault_path) / METADATA_DIR


def get_lock_path(vault_path: str | Path) -> Path:
    """Get path to the vault lock file."""
    return get_metadata_dir(vault_path) / LOCK_FILE


def vault_key(vault_path: str | Path) -> str:
    """Normalize a vault path for use as a registry key."""
    return str(normalize_vault_path(vault_path))
