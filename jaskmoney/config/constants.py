"""
Centralized constants for jaskmoney.

Paths, timeouts and scoring weights used by the input-dispatch core live here
so tests and the CLI read the same values the TUI does.
"""

import os
from pathlib import Path

# =============================================================================
# PATHS
# =============================================================================

JASKMONEY_CONFIG_DIR = Path(
    os.environ.get("JASKMONEY_CONFIG_DIR", Path.home() / ".config" / "jaskmoney")
).expanduser()
KEYBINDINGS_FILENAME = "keybindings.yaml"
REJECTED_SUFFIX = ".rejected"  # Appended to a keybindings file that failed validation
LOG_FILENAME = "jaskmoney.log"

# =============================================================================
# KEYBINDINGS
# =============================================================================

KEYBINDINGS_FORMAT_VERSION = 2
LEGACY_KEYBINDINGS_FORMAT_VERSION = 1
SEARCH_TRIGGER_KEY = "/"  # Always kept on the search action, even under overrides

# =============================================================================
# TIMEOUTS (in seconds)
# =============================================================================

CONFIRM_TIMEOUT_SECONDS = 2.0  # Window for the second press of a destructive action

# =============================================================================
# COMMAND SEARCH SCORING
# =============================================================================

FUZZY_PREFIX_BONUS = 10  # First query char matched at index 0
FUZZY_CONSECUTIVE_BONUS = 3  # Per matched char adjacent to the previous one
FUZZY_EXACT_LABEL_BONUS = 20  # Whole label equals query
EXACT_MATCH_BONUS = 15  # Command field equals query (label, id or description)

# =============================================================================
# SAVED FILTERS
# =============================================================================

MAX_FILTER_ID_LENGTH = 63
DEFAULT_FILTER_ID = "filter"
FILTER_COMMAND_PREFIX = "filter:apply:"

# =============================================================================
# TASK LABELS
# =============================================================================

RELOAD_KEYBINDINGS_TASK = "keybindings:reload"

# =============================================================================
# UI DEFAULTS
# =============================================================================

DEFAULT_ROWS_PER_PAGE = 20
MIN_ROWS_PER_PAGE = 5
MAX_ROWS_PER_PAGE = 100
ROWS_PER_PAGE_STEP = 5
DASHBOARD_MODES = ("spending", "income", "net", "categories")
DASHBOARD_TIMEFRAMES = ("this month", "last month", "last 3 months", "year to date", "custom")
DASHBOARD_SECTION_COUNT = 3
SORT_COLUMNS = ("date", "amount", "description", "category")
