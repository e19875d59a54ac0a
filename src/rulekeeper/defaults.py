"""Default configuration values for rulekeeper.

These can be overridden by:
1. User config file (~/.rulekeeper/config.yaml)
2. Environment variables
3. CLI flags

Priority (highest to lowest):
CLI flags > Environment > User config > Defaults
"""

from __future__ import annotations

# =============================================================================
# RULES API
# =============================================================================

# Rules service origin
DEFAULT_ORIGIN: str = "https://firebaserules.googleapis.com"

# Path prefix for every request
API_VERSION: str = "v1"

# Request timeout in seconds
DEFAULT_TIMEOUT: float = 30.0

# Project used when --project is not given (None = must be supplied)
DEFAULT_PROJECT: str | None = None

# =============================================================================
# ERRORS
# =============================================================================

# Internal error code attached to every API failure
ERROR_CODE: int = 2

UNEXPECTED_ERROR_MESSAGE: str = "Unexpected error encountered with rules."
