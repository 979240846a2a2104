"""Environment-based configuration for netsift.

All settings come from environment variables; there is no config file.
"""

import logging
import os

# Environment variable names
HEADLESS_ENV_VAR = "NETSIFT_HEADLESS"
LOG_LEVEL_ENV_VAR = "NETSIFT_LOG_LEVEL"
BODY_TIMEOUT_ENV_VAR = "NETSIFT_BODY_TIMEOUT"

DEFAULT_BODY_TIMEOUT = 10.0


def get_headless_mode() -> bool:
    """Get headless mode from NETSIFT_HEADLESS environment variable.

    Default: True. Set NETSIFT_HEADLESS=false to show the browser window.

    Returns:
        True if headless mode is enabled (default)
    """
    return os.environ.get(HEADLESS_ENV_VAR, "true").lower() != "false"


def get_log_level() -> int:
    """Get the logging level from NETSIFT_LOG_LEVEL (default INFO)."""
    name = os.environ.get(LOG_LEVEL_ENV_VAR, "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def get_body_timeout() -> float:
    """Get the per-body read timeout in seconds from NETSIFT_BODY_TIMEOUT.

    Non-numeric or non-positive values fall back to the default.
    """
    raw = os.environ.get(BODY_TIMEOUT_ENV_VAR)
    if raw is None:
        return DEFAULT_BODY_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        return DEFAULT_BODY_TIMEOUT
    return value if value > 0 else DEFAULT_BODY_TIMEOUT
