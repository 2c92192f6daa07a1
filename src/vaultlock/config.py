"""Configuration management for vaultlock.

The config lives inside the vault's metadata directory so that every device
syncing the vault sees the same lease timings.
"""

import tomllib
from pathlib import Path

import tomli_w
from pydantic import BaseModel, Field, ValidationError, model_validator

from .constants import CONFIG_FILE, HEARTBEAT_INTERVAL_SECS, STALE_THRESHOLD_SECS
from .errors import LockConfigError


class LockConfig(BaseModel):
    """Lease timings for the vault lock."""

    stale_threshold_secs: float = Field(
        default=STALE_THRESHOLD_SECS,
        gt=0,
        description="Heartbeat age after which a holder is reported stale",
    )
    heartbeat_interval_secs: float = Field(
        default=HEARTBEAT_INTERVAL_SECS,
        gt=0,
        description="Seconds between heartbeat refreshes while holding the lock",
    )

    @model_validator(mode="after")
    def _threshold_exceeds_interval(self) -> "LockConfig":
        if self.stale_threshold_secs <= self.heartbeat_interval_secs:
            raise ValueError(
                "stale_threshold_secs must be greater than heartbeat_interval_secs "
                f"({self.stale_threshold_secs} <= {self.heartbeat_interval_secs})"
            )
        return self


class VaultLockConfig(BaseModel):
    """Root configuration for vaultlock."""

    lock: LockConfig = Field(default_factory=LockConfig)


def load_config(metadata_dir: Path) -> VaultLockConfig:
    """Load config from .vaultlock/config.toml.

    Args:
        metadata_dir: Path to the vault's .vaultlock directory

    Returns:
        Loaded configuration, or defaults if config.toml doesn't exist

    Raises:
        LockConfigError: If the file exists but does not load as a valid config
    """
    config_path = metadata_dir / CONFIG_FILE
    if not config_path.exists():
        return VaultLockConfig()
    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
        return VaultLockConfig.model_validate(data)
    except OSError as e:
        raise LockConfigError(f"Cannot read {config_path}: {e}") from e
    except (UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
        raise LockConfigError(f"Invalid TOML in {config_path}: {e}") from e
    except ValidationError as e:
        raise LockConfigError(f"Invalid lock settings in {config_path}: {e}") from e


def write_config_template(metadata_dir: Path) -> Path:
    """Write default config.toml template.

    Args:
        metadata_dir: Path to the vault's .vaultlock directory

    Returns:
        Path to the written config file
    """
    metadata_dir.mkdir(parents=True, exist_ok=True)
    config_path = metadata_dir / CONFIG_FILE
    template = {
        # Tune both values to the sync provider's propagation delay.
        # The stale threshold should stay several heartbeats wide.
        "lock": {
            "stale_threshold_secs": STALE_THRESHOLD_SECS,
            "heartbeat_interval_secs": HEARTBEAT_INTERVAL_SECS,
        },
    }
    with open(config_path, "wb") as f:
        tomli_w.dump(template, f)
    return config_path
