"""Background heartbeat for a held vault lock.

While this process holds a vault, a daemon thread refreshes the record's
heartbeat every interval. Each tick re-reads the file first so that a forced
takeover from another device is noticed instead of overwritten.
"""

import logging
import threading
from pathlib import Path

from ..errors import LockIOError, LockNotFoundError, LockParseError
from ..models import LockRecord, utc_now
from .lock_store import read_lock, write_lock_atomic

logger = logging.getLogger(__name__)


class HeartbeatMaintainer:
    """Periodically refresh the heartbeat of a lock record owned by this machine.

    The loop ends on ``stop()``, or once the on-disk record is gone or belongs
    to another machine. Unreadable records and write failures are retried on
    the next interval.

    Args:
        lock_path: Path to vault.lock
        record: The record this process wrote (or reconnected to)
        machine_id: This machine's identifier
        interval: Seconds between refreshes
    """

    def __init__(
        self,
        lock_path: Path,
        record: LockRecord,
        machine_id: str,
        interval: float,
    ) -> None:
        self.lock_path = lock_path
        self.record = record
        self.machine_id = machine_id
        self.interval = interval
        self.beats = 0

        self._stop_event = threading.Event()
        self._taken_over = False
        self._removed = False
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        """Whether the heartbeat thread is alive and has not been told to stop."""
        return (
            self._thread is not None
            and self._thread.is_alive()
            and not self._stop_event.is_set()
        )

    @property
    def taken_over(self) -> bool:
        """Whether another machine's record replaced ours."""
        return self._taken_over

    @property
    def removed(self) -> bool:
        """Whether the record disappeared while we held it."""
        return self._removed

    def start(self) -> None:
        """Start the heartbeat thread."""
        if self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self._run,
            name=f"vaultlock-heartbeat-{self.lock_path.parent.parent.name}",
            daemon=True,
        )
        self._thread.start()
        logger.debug(f"Heartbeat started for {self.lock_path} every {self.interval}s")

    def stop(self) -> None:
        """Stop the loop and wait for any in-flight write to finish.

        After this returns no further heartbeat write will be issued.
        """
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    def beat(self) -> bool:
        """Run one read-verify-write cycle.

        Returns:
            False if the lock was taken over or removed and the loop should end
        """
        try:
            on_disk = read_lock(self.lock_path)
        except LockNotFoundError:
            logger.warning(f"Lock record {self.lock_path} was removed; stopping heartbeat")
            self._removed = True
            return False
        except LockParseError as e:
            logger.warning(f"Lock record unreadable during heartbeat, skipping refresh: {e}")
            return True
        except LockIOError as e:
            logger.error(f"Failed to read lock during heartbeat: {e}")
            return True

        if on_disk.machine_id != self.machine_id:
            logger.warning(
                f"Vault lock taken over by {on_disk.hostname} ({on_disk.machine_id}); "
                "stopping heartbeat"
            )
            self._taken_over = True
            return False

        updated = on_disk.with_heartbeat(utc_now())
        try:
            write_lock_atomic(self.lock_path, updated)
        except LockIOError as e:
            logger.error(f"Failed to update heartbeat: {e}")
            return True

        self.record = updated
        self.beats += 1
        logger.debug(f"Heartbeat updated for {self.lock_path}")
        return True

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval):
            if not self.beat():
                break
        logger.debug(f"Heartbeat stopped for {self.lock_path}")
