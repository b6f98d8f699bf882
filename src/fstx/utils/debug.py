"""Debug utility for fstx.

Provides a single debug() function that can be toggled via the
FSTX_DEBUG environment variable. The backup store and path helpers use it
for low-level trace output that is too noisy for the structured log.

Usage:
    from fstx.utils.debug import debug

    debug(f"Copied {src} -> {dst}")

Environment:
    FSTX_DEBUG: Set to '1', 'true', 'yes' or 'on' (case-insensitive) to enable
                debug output. Any other value or unset disables it.

Example:
    $ FSTX_DEBUG=1 fstx-run script.json    # Debug enabled
    $ fstx-run script.json                 # Debug disabled (default)
"""

import os
import sys
from typing import Any

from fstx.core.constants import ENV_DEBUG, TRUTHY_VALUES

# Determine if debug mode is enabled at module import time
_DEBUG_ENABLED = os.environ.get(ENV_DEBUG, "").lower() in TRUTHY_VALUES


def debug(msg: Any) -> None:
    """Print debug message if FSTX_DEBUG is enabled.

    Args:
        msg: Message to print. Will be converted to string.

    Note:
        The environment variable is read at module import time. Changing it
        after import has no effect unless the module is reloaded.
    """
    if _DEBUG_ENABLED:
        print(f"[DEBUG] {msg}", file=sys.stderr)
