"""Constants for vaultlock."""

# Vault layout
METADATA_DIR = ".vaultlock"
LOCK_FILE = "vault.lock"
CONFIG_FILE = "config.toml"
CONFLICT_MARKER = "Vaultlock Conflict"

# Lease timing (seconds). Defaults for [lock] in config.toml
STALE_THRESHOLD_SECS = 120.0  # well above sync propagation delay
HEARTBEAT_INTERVAL_SECS = 15.0

# Subprocess timeouts (seconds)
IDENTITY_COMMAND_TIMEOUT = 5

# Placeholder when the OS cannot supply a hostname
UNKNOWN_HOST = "unknown"
