"""Machine identity for lock ownership.

Ownership of a vault lock is decided by machine ID, so the ID must survive
reboots and process restarts. Each platform has one or more lookups; the
first that yields a value wins, then the hostname, then a fixed placeholder.
Nothing in this module raises to callers.
"""

import logging
import os
import platform
import re
import socket
import subprocess
import sys
import threading
from collections.abc import Callable
from pathlib import Path

from ..constants import IDENTITY_COMMAND_TIMEOUT, UNKNOWN_HOST
from ..models import MachineInfo

logger = logging.getLogger(__name__)

LINUX_MACHINE_ID_FILES = (Path("/etc/machine-id"), Path("/var/lib/dbus/machine-id"))

IdentityLookup = Callable[[], str | None]

_cache_lock = threading.Lock()
_cached_machine_id: str | None = None
_cached_hostname: str | None = None


def _run_lookup(args: list[str]) -> str | None:
    """Run an OS query command, returning stdout or None on any failure."""
    try:
        result = subprocess.run(
            args,
            capture_output=True,
            text=True,
            timeout=IDENTITY_COMMAND_TIMEOUT,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug(f"Identity lookup {args[0]} failed: {e}")
        return None
    if result.returncode != 0:
        logger.debug(f"Identity lookup {args[0]} exited with {result.returncode}")
        return None
    return result.stdout


def windows_machine_guid() -> str | None:
    """Read MachineGuid from the Windows cryptography registry key."""
    stdout = _run_lookup(
        [
            "reg",
            "query",
            r"HKEY_LOCAL_MACHINE\SOFTWARE\Microsoft\Cryptography",
            "/v",
            "MachineGuid",
        ]
    )
    if not stdout:
        return None
    for line in stdout.splitlines():
        if "MachineGuid" in line:
            parts = line.split()
            if parts:
                return parts[-1]
    return None


def macos_platform_uuid() -> str | None:
    """Read IOPlatformUUID from the macOS I/O registry."""
    stdout = _run_lookup(["ioreg", "-rd1", "-c", "IOPlatformExpertDevice"])
    if not stdout:
        return None
    match = re.search(r'"IOPlatformUUID"\s*=\s*"([^"]+)"', stdout)
    return match.group(1) if match else None


def linux_machine_id() -> str | None:
    """Read the systemd or D-Bus machine-id file."""
    for path in LINUX_MACHINE_ID_FILES:
        try:
            value = path.read_text().strip()
        except OSError:
            continue
        if value:
            return value
    return None


def platform_lookups(system: str | None = None) -> list[IdentityLookup]:
    """Select identity lookups for a platform.

    Args:
        system: sys.platform-style name (defaults to the running platform)

    Returns:
        Lookups to try in order. Empty for unsupported platforms.
    """
    system = system or sys.platform
    if system.startswith("win"):
        return [windows_machine_guid]
    if system == "darwin":
        return [macos_platform_uuid]
    if system.startswith("linux"):
        return [linux_machine_id]
    return []


def resolve_hostname() -> str:
    """Resolve the hostname without caching."""
    for source in (socket.gethostname, platform.node):
        try:
            name = source().strip()
        except OSError:
            continue
        if name:
            return name
    return UNKNOWN_HOST


def resolve_machine_id(lookups: list[IdentityLookup] | None = None) -> str:
    """Resolve the machine ID without caching.

    Args:
        lookups: Lookups to try (defaults to the running platform's)

    Returns:
        First non-empty lookup result, else the hostname, else a placeholder
    """
    if lookups is None:
        lookups = platform_lookups()
    for lookup in lookups:
        try:
            value = lookup()
        except Exception as e:
            logger.debug(f"Identity lookup {lookup.__name__} raised: {e}")
            continue
        if value and value.strip():
            return value.strip()
    logger.debug("No platform machine ID available, falling back to hostname")
    return resolve_hostname()


def get_machine_id() -> str:
    """Get this machine's identifier (cached for the process lifetime)."""
    global _cached_machine_id
    if _cached_machine_id is None:
        with _cache_lock:
            if _cached_machine_id is None:
                _cached_machine_id = resolve_machine_id()
    return _cached_machine_id


def get_hostname() -> str:
    """Get this machine's hostname (cached for the process lifetime)."""
    global _cached_hostname
    if _cached_hostname is None:
        with _cache_lock:
            if _cached_hostname is None:
                _cached_hostname = resolve_hostname()
    return _cached_hostname


def get_machine_info() -> MachineInfo:
    """Get the identity this process stamps on lock records."""
    return MachineInfo(machine_id=get_machine_id(), hostname=get_hostname(), pid=os.getpid())
