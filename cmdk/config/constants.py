"""
Centralized constants for cmdk.

Defaults for the palette's display options, section naming and the
thresholds that switch ranking work off the event loop.
"""

import os
from pathlib import Path

# =============================================================================
# PATHS
# =============================================================================

CMDK_CONFIG_DIR = Path(os.environ.get("CMDK_CONFIG_DIR", Path.home() / ".config" / "cmdk"))

# =============================================================================
# DISPLAY DEFAULTS
# =============================================================================

DEFAULT_PLACEHOLDER_TEXT = "Type a command or search..."
DEFAULT_EMPTY_STATE_TEXT = "No commands found"
DEFAULT_LOADING_TEXT = "Loading commands..."

# Truncation widths for a single result row
MAX_LABEL_WIDTH = 50
MAX_DESCRIPTION_WIDTH = 35

# =============================================================================
# SECTIONS
# =============================================================================

RECENT_SECTION_ID = "_recent"
RECENT_SECTION_LABEL = "Recent"
OTHER_SECTION_ID = "_other"
OTHER_SECTION_LABEL = "Other"
ALL_SECTION_ID = "_all"  # Flat ranked results for a non-empty query

# =============================================================================
# SEARCH TIMING
# =============================================================================

# Catalogues at least this large are ranked in a worker thread
DEFAULT_ASYNC_THRESHOLD = 2000

# Delay between the last keystroke and the search it triggers
DEFAULT_DEBOUNCE_SECONDS = 0.1
