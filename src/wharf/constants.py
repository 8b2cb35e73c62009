"""Constants for wharf CLI."""

# Subprocess timeouts (seconds)
GIT_TIMEOUT = 30
GIT_PUSH_TIMEOUT = 120  # network round-trip to the remote
COMPILER_TIMEOUT = 600  # 10 minutes for full builds
COMPILER_VERSION_TIMEOUT = 10

# Registry protocol
REGISTRY_TIMEOUT = 30.0
REGISTRY_MAX_ATTEMPTS = 3
REGISTRY_BACKOFF_MULTIPLIER = 0.5
REGISTRY_BACKOFF_MAX = 8.0
RETRYABLE_STATUS_CODES = frozenset({502, 503, 504})
JOB_POLL_INTERVAL = 0.5

# Registry rules
METADATA_PACKAGE_NAME = "metadata"
DISALLOWED_MODULE_PREFIXES = ("Prim",)

CONFIG_FILENAME = "wharf.toml"
