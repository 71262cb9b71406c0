"""
Semantic actions a key can trigger.

Several member names are aliases of one underlying action (``SELECT``,
``ACTIVATE`` and ``NEXT`` are all ``CONFIRM``). Call sites pick whichever
name reads best; lookups compare values, so the aliases never diverge.
"""

from enum import Enum
from typing import Optional


class Action(str, Enum):
    """Semantic gestures, independent of the physical key."""

    QUIT = "quit"
    NEXT_TAB = "next_tab"
    PREV_TAB = "prev_tab"
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    CONFIRM = "confirm"
    SELECT = "confirm"
    ACTIVATE = "confirm"
    NEXT = "confirm"
    CANCEL = "cancel"
    CLOSE = "cancel"
    BACK = "cancel"
    CLEAR_SEARCH = "cancel"
    SEARCH = "search"
    FILTER_SAVE = "filter_save"
    FILTER_LOAD = "filter_load"
    SORT = "sort"
    SORT_DIRECTION = "sort_direction"
    TOGGLE_SELECT = "toggle_select"
    RANGE_HIGHLIGHT = "range_highlight"
    QUICK_CATEGORY = "quick_category"
    QUICK_TAG = "quick_tag"
    QUICK_OFFSET = "quick_offset"
    IMPORT_ALL = "import_all"
    SKIP_DUPES = "skip_dupes"
    IMPORT_RAW_VIEW = "import_raw_view"
    IMPORT_PREVIEW_TOGGLE = "import_preview_toggle"
    SAVE = "save"
    ADD = "add"
    EDIT = "edit"
    DELETE = "delete"
    APPLY_ALL = "apply_all"
    ROWS_PER_PAGE = "rows_per_page"
    CLEAR_DB = "clear_db"
    IMPORT = "import"
    RESET_KEYBINDINGS = "reset_keybindings"
    FOCUS_ACCOUNTS = "focus_accounts"
    JUMP_TOP = "jump_top"
    JUMP_BOTTOM = "jump_bottom"
    COMMAND_PALETTE = "command_palette"
    COMMAND_MODE = "command_mode"
    COMMAND_DEFAULT = "command_default"
    COMMAND_GO_DASHBOARD = "command_go_dashboard"
    COMMAND_GO_TRANSACTIONS = "command_go_transactions"
    COMMAND_GO_SETTINGS = "command_go_settings"
    COMMAND_GO_BUDGET = "command_go_budget"
    COMMAND_CLEAR_SELECTION = "command_clear_selection"
    JUMP_MODE = "jump_mode"
    JUMP_CANCEL = "jump_cancel"
    DASHBOARD_MODE_NEXT = "dashboard_mode_next"
    DASHBOARD_MODE_PREV = "dashboard_mode_prev"
    DASHBOARD_DRILL_DOWN = "dashboard_drill_down"
    DASHBOARD_TIMEFRAME = "dashboard_timeframe"
    DASHBOARD_CUSTOM_EDIT = "dashboard_custom_edit"
    RULE_TOGGLE_ENABLED = "rule_toggle_enabled"
    RULE_MOVE_UP = "rule_move_up"
    RULE_MOVE_DOWN = "rule_move_down"
    RULE_DRY_RUN = "rule_dry_run"
    BUDGET_PREV_MONTH = "budget_prev_month"
    BUDGET_NEXT_MONTH = "budget_next_month"
    BUDGET_TOGGLE_VIEW = "budget_toggle_view"
    BUDGET_EDIT = "budget_edit"
    BUDGET_ADD_TARGET = "budget_add_target"
    BUDGET_DELETE_TARGET = "budget_delete_target"
    BUDGET_RESET_OVERRIDE = "budget_reset_override"
    BUDGET_PREV_YEAR = "budget_prev_year"
    BUDGET_NEXT_YEAR = "budget_next_year"

    def __str__(self) -> str:
        return self.value

    def __hash__(self) -> int:
        return hash(self.value)


def resolve_action(name: str) -> Optional[Action]:
    """Resolve an action from its value (``"confirm"``) or member name (``"select"``).

    Returns None when the name is not an action at all.
    """
    cleaned = name.strip()
    if not cleaned:
        return None
    try:
        return Action(cleaned.lower())
    except ValueError:
        pass
    return Action.__members__.get(cleaned.upper())
