"""Centralized settings and advanced parameters for Load Shedder."""

# Logging
LOG_STARTUP_DEVICES = True
LOG_DEVICE_ACTIONS = True

# Journal/Audit
ENABLE_JOURNAL = True
ENABLE_AUDIT = True

# Command transport
COMMAND_TIMEOUT_SECONDS = 10
HTTP_SCHEME = "http"

# Limits accepted by the config flow
MAX_HEADROOM_W = 10000
MAX_HYSTERESIS_SPAN_W = 10000
MAX_THRESHOLD_DURATION_SECONDS = 3600
MIN_SYNC_INTERVAL_SECONDS = 10
MAX_SYNC_INTERVAL_SECONDS = 86400
MAX_PARALLEL_CALLS_LIMIT = 16
MAX_DEVICE_CHANNEL = 15
