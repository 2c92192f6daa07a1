"""Shared test fixtures for vaultlock tests."""

from collections.abc import Callable, Generator
from datetime import datetime, timedelta
from pathlib import Path

import pytest
from typer.testing import CliRunner

from vaultlock.config import LockConfig
from vaultlock.core import release_all_locks
from vaultlock.models import LockRecord, utc_now


@pytest.fixture
def runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _release_held_locks() -> Generator[None, None, None]:
    """Stop heartbeats and drop locks left behind by a test."""
    yield
    release_all_locks()


@pytest.fixture
def vault(tmp_path: Path) -> Path:
    """Create an empty vault directory."""
    d = tmp_path / "vault"
    d.mkdir()
    return d


@pytest.fixture
def lock_path(vault: Path) -> Path:
    """Path of the vault's lock file (metadata dir created)."""
    metadata_dir = vault / ".vaultlock"
    metadata_dir.mkdir()
    return metadata_dir / "vault.lock"


@pytest.fixture
def fast_config() -> LockConfig:
    """Lease timings short enough to observe heartbeats in a test."""
    return LockConfig(heartbeat_interval_secs=0.05, stale_threshold_secs=1.0)


@pytest.fixture
def foreign_record() -> Callable[..., LockRecord]:
    """Factory for lock records held by another device."""

    def _make(
        hostname: str = "OTHER-DEVICE",
        heartbeat: datetime | None = None,
        machine_id: str = "other-machine-id-12345",
    ) -> LockRecord:
        heartbeat = heartbeat or utc_now()
        return LockRecord(
            machine_id=machine_id,
            hostname=hostname,
            pid=99999,
            app_version="1.0.0",
            locked_at=heartbeat - timedelta(minutes=1),
            heartbeat=heartbeat,
        )

    return _make
