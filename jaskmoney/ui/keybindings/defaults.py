"""
Default keybinding table.

Order is significant. ``KeyRegistry.register`` keeps the first binding that
claims a key in a scope and skips any later binding sharing one of its keys,
so within each scope:

* the binding that should own a contested key is listed first, and
* alternate keys for an action are never reused by a later action.

``build_default_registry`` asserts nothing is skipped, so a reordering
mistake shows up as an error at startup rather than a missing shortcut.
"""

import logging
from typing import Optional, Sequence, Tuple

from jaskmoney.exceptions import ConfigurationError

from .actions import Action
from .context import Scope
from .registry import KeyRegistry, make_binding

logger = logging.getLogger(__name__)

# (scope, action, command id, keys, footer help)
DefaultEntry = Tuple[Scope, Action, Optional[str], Sequence[str], str]

_UP = ("k", "up", "ctrl+p")
_DOWN = ("j", "down", "ctrl+n")
_QUIT = ("q", "ctrl+c")

DEFAULT_BINDINGS: Tuple[DefaultEntry, ...] = (
    # Global fallback
    (Scope.GLOBAL, Action.QUIT, None, _QUIT, "quit"),
    (Scope.GLOBAL, Action.NEXT_TAB, "nav:next-tab", ("tab",), "next tab"),
    (Scope.GLOBAL, Action.PREV_TAB, "nav:prev-tab", ("shift+tab",), "prev tab"),
    (Scope.GLOBAL, Action.COMMAND_GO_DASHBOARD, "nav:dashboard", ("1",), "dashboard"),
    (Scope.GLOBAL, Action.COMMAND_GO_BUDGET, "nav:budget", ("2",), "budget"),
    (Scope.GLOBAL, Action.COMMAND_GO_TRANSACTIONS, "nav:manager", ("3",), "manager"),
    (Scope.GLOBAL, Action.COMMAND_GO_SETTINGS, "nav:settings", ("4",), "settings"),
    (Scope.GLOBAL, Action.JUMP_MODE, "jump:activate", ("v",), "jump"),
    (Scope.GLOBAL, Action.COMMAND_PALETTE, "palette:open", ("ctrl+k",), "commands"),
    (Scope.GLOBAL, Action.COMMAND_MODE, "cmd:open", (":",), "command"),
    # Command palette / colon command line
    (Scope.COMMAND_PALETTE, Action.UP, None, ("up", "ctrl+p"), ""),
    (Scope.COMMAND_PALETTE, Action.DOWN, None, ("down", "ctrl+n"), ""),
    (Scope.COMMAND_PALETTE, Action.SELECT, None, ("enter",), "run"),
    (Scope.COMMAND_PALETTE, Action.CLOSE, None, ("esc",), "close"),
    (Scope.COMMAND_MODE, Action.UP, None, ("up", "ctrl+p"), ""),
    (Scope.COMMAND_MODE, Action.DOWN, None, ("down", "ctrl+n"), ""),
    (Scope.COMMAND_MODE, Action.SELECT, None, ("enter",), "run"),
    (Scope.COMMAND_MODE, Action.CLOSE, None, ("esc",), "close"),
    (Scope.JUMP_OVERLAY, Action.JUMP_CANCEL, "jump:cancel", ("esc",), "cancel"),
    # Manager tab
    (Scope.MANAGER_TRANSACTIONS, Action.FOCUS_ACCOUNTS, "focus:accounts", ("a",), "accounts"),
    (Scope.MANAGER, Action.LEFT, None, ("h", "left"), ""),
    (Scope.MANAGER, Action.RIGHT, None, ("l", "right"), ""),
    (Scope.MANAGER, Action.UP, None, _UP, ""),
    (Scope.MANAGER, Action.DOWN, None, _DOWN, ""),
    (Scope.MANAGER, Action.BACK, "focus:transactions", ("esc",), ""),
    (Scope.MANAGER, Action.SEARCH, None, ("/",), "filter"),
    (Scope.MANAGER, Action.FILTER_LOAD, "filter:apply", ("ctrl+l",), "load"),
    (Scope.MANAGER, Action.TOGGLE_SELECT, None, ("space",), ""),
    (Scope.MANAGER, Action.ADD, None, ("a",), "add"),
    (Scope.MANAGER, Action.SELECT, None, ("enter",), ""),
    (Scope.MANAGER, Action.DELETE, None, ("del",), "actions"),
    (Scope.MANAGER, Action.NEXT_TAB, "nav:next-tab", ("tab",), ""),
    (Scope.MANAGER, Action.QUIT, None, _QUIT, "quit"),
    (Scope.MANAGER_MODAL, Action.UP, None, ("up", "ctrl+p"), ""),
    (Scope.MANAGER_MODAL, Action.DOWN, None, ("down", "ctrl+n"), ""),
    (Scope.MANAGER_MODAL, Action.LEFT, None, ("left",), ""),
    (Scope.MANAGER_MODAL, Action.RIGHT, None, ("right",), ""),
    (Scope.MANAGER_MODAL, Action.TOGGLE_SELECT, None, ("space",), ""),
    (Scope.MANAGER_MODAL, Action.CONFIRM, None, ("enter",), ""),
    (Scope.MANAGER_MODAL, Action.CLOSE, None, ("esc",), ""),
    (Scope.MANAGER_ACCOUNT_ACTION, Action.UP, None, _UP, ""),
    (Scope.MANAGER_ACCOUNT_ACTION, Action.DOWN, None, _DOWN, ""),
    (Scope.MANAGER_ACCOUNT_ACTION, Action.SELECT, None, ("enter",), ""),
    (Scope.MANAGER_ACCOUNT_ACTION, Action.CLOSE, None, ("esc",), ""),
    # Dashboard tab
    (Scope.DASHBOARD, Action.NEXT_TAB, "nav:next-tab", ("tab",), ""),
    (Scope.DASHBOARD, Action.PREV_TAB, "nav:prev-tab", ("shift+tab",), ""),
    (Scope.DASHBOARD, Action.DOWN, None, _DOWN, ""),
    (Scope.DASHBOARD, Action.DASHBOARD_TIMEFRAME, None, ("f",), "timeframe"),
    (Scope.DASHBOARD, Action.QUIT, None, _QUIT, ""),
    (Scope.DASHBOARD_FOCUSED, Action.DASHBOARD_MODE_NEXT, "dash:mode-next", ("]",), "next"),
    (Scope.DASHBOARD_FOCUSED, Action.DASHBOARD_MODE_PREV, "dash:mode-prev", ("[",), "prev"),
    (Scope.DASHBOARD_FOCUSED, Action.DASHBOARD_DRILL_DOWN, "dash:drill-down", ("enter",), "drill"),
    (Scope.DASHBOARD_FOCUSED, Action.UP, None, _UP, ""),
    (Scope.DASHBOARD_FOCUSED, Action.DOWN, None, _DOWN, ""),
    (Scope.DASHBOARD_FOCUSED, Action.CANCEL, None, ("esc",), ""),
    (Scope.DASHBOARD_TIMEFRAME, Action.UP, None, ("k", "up"), ""),
    (Scope.DASHBOARD_TIMEFRAME, Action.DOWN, None, ("j", "down"), ""),
    (Scope.DASHBOARD_TIMEFRAME, Action.LEFT, None, ("h", "left"), ""),
    (Scope.DASHBOARD_TIMEFRAME, Action.RIGHT, None, ("l", "right"), ""),
    (Scope.DASHBOARD_TIMEFRAME, Action.DASHBOARD_CUSTOM_EDIT, None, ("e",), "custom"),
    (Scope.DASHBOARD_TIMEFRAME, Action.SELECT, None, ("enter",), "apply"),
    (Scope.DASHBOARD_TIMEFRAME, Action.CANCEL, None, ("esc",), "done"),
    (Scope.DASHBOARD_CUSTOM_INPUT, Action.CONFIRM, None, ("enter",), ""),
    (Scope.DASHBOARD_CUSTOM_INPUT, Action.CANCEL, None, ("esc",), ""),
    # Budget tab
    (Scope.BUDGET, Action.BUDGET_PREV_MONTH, "budget:prev-month", ("h", "left"), "prev month"),
    (Scope.BUDGET, Action.BUDGET_NEXT_MONTH, "budget:next-month", ("l", "right"), "next month"),
    (Scope.BUDGET, Action.BUDGET_TOGGLE_VIEW, "budget:toggle-view", ("w",), "view"),
    (Scope.BUDGET, Action.BUDGET_EDIT, "budget:edit", ("enter",), "edit"),
    (Scope.BUDGET, Action.BUDGET_ADD_TARGET, "budget:add-target", ("a",), "add"),
    (Scope.BUDGET, Action.BUDGET_DELETE_TARGET, "budget:delete-target", ("del",), "delete"),
    (Scope.BUDGET, Action.BUDGET_RESET_OVERRIDE, "budget:reset-override", ("r",), "reset"),
    (Scope.BUDGET, Action.BUDGET_PREV_YEAR, "budget:prev-year", ("[",), ""),
    (Scope.BUDGET, Action.BUDGET_NEXT_YEAR, "budget:next-year", ("]",), ""),
    (Scope.BUDGET, Action.UP, None, _UP, ""),
    (Scope.BUDGET, Action.DOWN, None, _DOWN, ""),
    (Scope.BUDGET, Action.NEXT_TAB, "nav:next-tab", ("tab",), ""),
    (Scope.BUDGET, Action.PREV_TAB, "nav:prev-tab", ("shift+tab",), ""),
    (Scope.BUDGET, Action.QUIT, None, _QUIT, ""),
    (Scope.BUDGET, Action.CANCEL, None, ("esc",), ""),
    # Transactions list
    (Scope.TRANSACTIONS, Action.SEARCH, "filter:open", ("/",), "filter"),
    (Scope.TRANSACTIONS, Action.FILTER_SAVE, "filter:save", ("ctrl+s",), "save"),
    (Scope.TRANSACTIONS, Action.FILTER_LOAD, "filter:apply", ("ctrl+l",), "load"),
    (Scope.TRANSACTIONS, Action.SORT, "txn:sort", ("s",), "sort"),
    (Scope.TRANSACTIONS, Action.SORT_DIRECTION, "txn:sort-dir", ("S",), "reverse"),
    (Scope.TRANSACTIONS, Action.QUICK_CATEGORY, "txn:quick-category", ("c",), "cat"),
    (Scope.TRANSACTIONS, Action.QUICK_TAG, "txn:quick-tag", ("t",), "tag"),
    (Scope.TRANSACTIONS, Action.QUICK_OFFSET, "txn:quick-offset", ("o",), "offset"),
    (Scope.TRANSACTIONS, Action.TOGGLE_SELECT, "txn:select", ("space", " "), ""),
    (Scope.TRANSACTIONS, Action.RANGE_HIGHLIGHT, None, ("shift+up/down", "shift+up", "shift+down"), ""),
    (Scope.TRANSACTIONS, Action.COMMAND_CLEAR_SELECTION, "txn:clear-selection", ("u",), "clear"),
    (Scope.TRANSACTIONS, Action.JUMP_TOP, "txn:jump-top", ("g",), "top"),
    (Scope.TRANSACTIONS, Action.JUMP_BOTTOM, "txn:jump-bottom", ("G",), "bottom"),
    (Scope.TRANSACTIONS, Action.CLEAR_SEARCH, "filter:clear", ("esc",), ""),
    (Scope.TRANSACTIONS, Action.SELECT, "txn:detail", ("enter",), ""),
    (Scope.TRANSACTIONS, Action.UP, None, _UP, ""),
    (Scope.TRANSACTIONS, Action.DOWN, None, _DOWN, ""),
    (Scope.TRANSACTIONS, Action.NEXT_TAB, "nav:next-tab", ("tab",), ""),
    (Scope.TRANSACTIONS, Action.QUIT, None, _QUIT, ""),
    # Pickers
    (Scope.CATEGORY_PICKER, Action.UP, None, ("up", "ctrl+p"), ""),
    (Scope.CATEGORY_PICKER, Action.DOWN, None, ("down", "ctrl+n"), ""),
    (Scope.CATEGORY_PICKER, Action.SELECT, None, ("enter",), ""),
    (Scope.CATEGORY_PICKER, Action.CLOSE, None, ("esc",), ""),
    (Scope.TAG_PICKER, Action.UP, None, ("up", "ctrl+p"), ""),
    (Scope.TAG_PICKER, Action.DOWN, None, ("down", "ctrl+n"), ""),
    (Scope.TAG_PICKER, Action.TOGGLE_SELECT, None, ("space",), ""),
    (Scope.TAG_PICKER, Action.SELECT, None, ("enter",), ""),
    (Scope.TAG_PICKER, Action.CLOSE, None, ("esc",), ""),
    (Scope.QUICK_OFFSET, Action.CONFIRM, None, ("enter",), "apply"),
    (Scope.QUICK_OFFSET, Action.CLOSE, None, ("esc",), "cancel"),
    (Scope.QUICK_OFFSET, Action.LEFT, None, ("left",), ""),
    (Scope.QUICK_OFFSET, Action.RIGHT, None, ("right",), ""),
    (Scope.FILTER_APPLY_PICKER, Action.UP, None, _UP, ""),
    (Scope.FILTER_APPLY_PICKER, Action.DOWN, None, _DOWN, ""),
    (Scope.FILTER_APPLY_PICKER, Action.SELECT, None, ("enter",), ""),
    (Scope.FILTER_APPLY_PICKER, Action.CLOSE, None, ("esc",), ""),
    # Detail / file picker
    (Scope.DETAIL_MODAL, Action.SELECT, None, ("enter",), ""),
    (Scope.DETAIL_MODAL, Action.EDIT, None, ("n",), "notes"),
    (Scope.DETAIL_MODAL, Action.CLOSE, None, ("esc",), ""),
    (Scope.DETAIL_MODAL, Action.UP, None, _UP, ""),
    (Scope.DETAIL_MODAL, Action.DOWN, None, _DOWN, ""),
    (Scope.DETAIL_MODAL, Action.QUIT, None, _QUIT, ""),
    (Scope.FILE_PICKER, Action.SELECT, None, ("enter",), ""),
    (Scope.FILE_PICKER, Action.CLOSE, None, ("esc",), ""),
    (Scope.FILE_PICKER, Action.UP, None, _UP, ""),
    (Scope.FILE_PICKER, Action.DOWN, None, _DOWN, ""),
    (Scope.FILE_PICKER, Action.QUIT, None, _QUIT, ""),
    # Import preview
    (Scope.IMPORT_PREVIEW, Action.UP, None, _UP, ""),
    (Scope.IMPORT_PREVIEW, Action.DOWN, None, _DOWN, ""),
    (Scope.IMPORT_PREVIEW, Action.IMPORT_ALL, "import:all", ("a",), "all"),
    (Scope.IMPORT_PREVIEW, Action.SKIP_DUPES, "import:skip-dupes", ("s",), "skip"),
    (Scope.IMPORT_PREVIEW, Action.IMPORT_RAW_VIEW, "import:raw-view", ("r",), "rules"),
    (Scope.IMPORT_PREVIEW, Action.IMPORT_PREVIEW_TOGGLE, "import:preview-toggle", ("p",), "preview"),
    (Scope.IMPORT_PREVIEW, Action.CLOSE, "import:cancel", ("esc",), ""),
    # Filter input line
    (Scope.FILTER_INPUT, Action.FILTER_SAVE, "filter:save", ("ctrl+s",), "save"),
    (Scope.FILTER_INPUT, Action.FILTER_LOAD, "filter:apply", ("ctrl+l",), "load"),
    (Scope.FILTER_INPUT, Action.LEFT, None, ("left",), ""),
    (Scope.FILTER_INPUT, Action.RIGHT, None, ("right",), ""),
    (Scope.FILTER_INPUT, Action.CLEAR_SEARCH, None, ("esc",), ""),
    (Scope.FILTER_INPUT, Action.CONFIRM, None, ("enter",), ""),
    # Settings edit modes and editors
    (Scope.SETTINGS_MODE_CAT, Action.UP, None, ("up", "ctrl+p"), ""),
    (Scope.SETTINGS_MODE_CAT, Action.DOWN, None, ("down", "ctrl+n"), ""),
    (Scope.SETTINGS_MODE_CAT, Action.LEFT, None, ("left",), ""),
    (Scope.SETTINGS_MODE_CAT, Action.RIGHT, None, ("right",), ""),
    (Scope.SETTINGS_MODE_CAT, Action.SAVE, None, ("enter",), ""),
    (Scope.SETTINGS_MODE_CAT, Action.CLOSE, None, ("esc",), ""),
    (Scope.SETTINGS_MODE_TAG, Action.UP, None, ("up", "ctrl+p"), ""),
    (Scope.SETTINGS_MODE_TAG, Action.DOWN, None, ("down", "ctrl+n"), ""),
    (Scope.SETTINGS_MODE_TAG, Action.LEFT, None, ("left",), ""),
    (Scope.SETTINGS_MODE_TAG, Action.RIGHT, None, ("right",), ""),
    (Scope.SETTINGS_MODE_TAG, Action.SAVE, None, ("enter",), ""),
    (Scope.SETTINGS_MODE_TAG, Action.CLOSE, None, ("esc",), ""),
    (Scope.RULE_EDITOR, Action.UP, None, ("up", "ctrl+p"), ""),
    (Scope.RULE_EDITOR, Action.DOWN, None, ("down", "ctrl+n"), ""),
    (Scope.RULE_EDITOR, Action.LEFT, None, ("left",), ""),
    (Scope.RULE_EDITOR, Action.RIGHT, None, ("right",), ""),
    (Scope.RULE_EDITOR, Action.TOGGLE_SELECT, None, ("space",), ""),
    (Scope.RULE_EDITOR, Action.SELECT, None, ("enter",), ""),
    (Scope.RULE_EDITOR, Action.CLOSE, None, ("esc",), ""),
    (Scope.DRY_RUN_MODAL, Action.UP, None, _UP, ""),
    (Scope.DRY_RUN_MODAL, Action.DOWN, None, _DOWN, ""),
    (Scope.DRY_RUN_MODAL, Action.CLOSE, None, ("esc",), ""),
    (Scope.FILTER_EDIT, Action.UP, None, ("up", "ctrl+p"), ""),
    (Scope.FILTER_EDIT, Action.DOWN, None, ("down", "ctrl+n"), ""),
    (Scope.FILTER_EDIT, Action.LEFT, None, ("left",), ""),
    (Scope.FILTER_EDIT, Action.RIGHT, None, ("right",), ""),
    (Scope.FILTER_EDIT, Action.SAVE, None, ("enter",), ""),
    (Scope.FILTER_EDIT, Action.CLOSE, None, ("esc",), ""),
    # Settings active sections
    (Scope.SETTINGS_ACTIVE_CATEGORIES, Action.UP, None, _UP, ""),
    (Scope.SETTINGS_ACTIVE_CATEGORIES, Action.DOWN, None, _DOWN, ""),
    (Scope.SETTINGS_ACTIVE_CATEGORIES, Action.BACK, None, ("esc",), ""),
    (Scope.SETTINGS_ACTIVE_CATEGORIES, Action.ADD, None, ("a",), "add"),
    (Scope.SETTINGS_ACTIVE_CATEGORIES, Action.SELECT, None, ("enter",), ""),
    (Scope.SETTINGS_ACTIVE_CATEGORIES, Action.DELETE, None, ("del",), "delete"),
    (Scope.SETTINGS_ACTIVE_TAGS, Action.UP, None, _UP, ""),
    (Scope.SETTINGS_ACTIVE_TAGS, Action.DOWN, None, _DOWN, ""),
    (Scope.SETTINGS_ACTIVE_TAGS, Action.BACK, None, ("esc",), ""),
    (Scope.SETTINGS_ACTIVE_TAGS, Action.ADD, None, ("a",), "add"),
    (Scope.SETTINGS_ACTIVE_TAGS, Action.SELECT, None, ("enter",), ""),
    (Scope.SETTINGS_ACTIVE_TAGS, Action.DELETE, None, ("del",), "delete"),
    (Scope.SETTINGS_ACTIVE_RULES, Action.UP, None, _UP, ""),
    (Scope.SETTINGS_ACTIVE_RULES, Action.DOWN, None, _DOWN, ""),
    (Scope.SETTINGS_ACTIVE_RULES, Action.BACK, None, ("esc",), ""),
    (Scope.SETTINGS_ACTIVE_RULES, Action.ADD, None, ("a",), "add"),
    (Scope.SETTINGS_ACTIVE_RULES, Action.SELECT, None, ("enter",), ""),
    (Scope.SETTINGS_ACTIVE_RULES, Action.RULE_TOGGLE_ENABLED, None, ("space",), ""),
    (Scope.SETTINGS_ACTIVE_RULES, Action.DELETE, None, ("del",), "delete"),
    (Scope.SETTINGS_ACTIVE_RULES, Action.RULE_MOVE_UP, None, ("K",), "move up"),
    (Scope.SETTINGS_ACTIVE_RULES, Action.RULE_MOVE_DOWN, None, ("J",), "move down"),
    (Scope.SETTINGS_ACTIVE_RULES, Action.APPLY_ALL, "rules:apply", ("A",), "apply all"),
    (Scope.SETTINGS_ACTIVE_RULES, Action.RULE_DRY_RUN, "rules:dry-run", ("D",), "dry run"),
    (Scope.SETTINGS_ACTIVE_FILTERS, Action.UP, None, _UP, ""),
    (Scope.SETTINGS_ACTIVE_FILTERS, Action.DOWN, None, _DOWN, ""),
    (Scope.SETTINGS_ACTIVE_FILTERS, Action.BACK, None, ("esc",), ""),
    (Scope.SETTINGS_ACTIVE_FILTERS, Action.ADD, None, ("a",), "add"),
    (Scope.SETTINGS_ACTIVE_FILTERS, Action.SELECT, None, ("enter",), ""),
    (Scope.SETTINGS_ACTIVE_FILTERS, Action.DELETE, None, ("del",), "delete"),
    (Scope.SETTINGS_ACTIVE_CHART, Action.UP, None, _UP, ""),
    (Scope.SETTINGS_ACTIVE_CHART, Action.DOWN, None, _DOWN, ""),
    (Scope.SETTINGS_ACTIVE_CHART, Action.BACK, None, ("esc",), ""),
    (Scope.SETTINGS_ACTIVE_CHART, Action.LEFT, None, ("h", "left"), "week"),
    (Scope.SETTINGS_ACTIVE_CHART, Action.RIGHT, None, ("l", "right"), "week"),
    (Scope.SETTINGS_ACTIVE_CHART, Action.CONFIRM, None, ("enter",), ""),
    (Scope.SETTINGS_ACTIVE_DB_IMPORT, Action.UP, None, _UP, ""),
    (Scope.SETTINGS_ACTIVE_DB_IMPORT, Action.DOWN, None, _DOWN, ""),
    (Scope.SETTINGS_ACTIVE_DB_IMPORT, Action.BACK, None, ("esc",), ""),
    (Scope.SETTINGS_ACTIVE_DB_IMPORT, Action.ROWS_PER_PAGE, None, ("+/-", "+", "=", "-"), "rows"),
    (Scope.SETTINGS_ACTIVE_DB_IMPORT, Action.COMMAND_DEFAULT, None, ("o",), "default"),
    (Scope.SETTINGS_ACTIVE_DB_IMPORT, Action.CLEAR_DB, "settings:clear-db", ("c",), "clear"),
    (Scope.SETTINGS_ACTIVE_DB_IMPORT, Action.IMPORT, "import:start", ("i",), "import"),
    (Scope.SETTINGS_ACTIVE_DB_IMPORT, Action.RESET_KEYBINDINGS, None, ("r",), "reset"),
    (Scope.SETTINGS_ACTIVE_IMPORT_HISTORY, Action.BACK, None, ("esc",), ""),
    (Scope.SETTINGS_ACTIVE_IMPORT_HISTORY, Action.UP, None, _UP, ""),
    (Scope.SETTINGS_ACTIVE_IMPORT_HISTORY, Action.DOWN, None, _DOWN, ""),
    # Settings navigation
    (Scope.SETTINGS_NAV, Action.LEFT, None, ("h", "left"), ""),
    (Scope.SETTINGS_NAV, Action.RIGHT, None, ("l", "right"), ""),
    (Scope.SETTINGS_NAV, Action.UP, None, _UP, ""),
    (Scope.SETTINGS_NAV, Action.DOWN, None, _DOWN, ""),
    (Scope.SETTINGS_NAV, Action.ACTIVATE, None, ("enter",), ""),
    (Scope.SETTINGS_NAV, Action.IMPORT, "import:start", ("i",), "import"),
    (Scope.SETTINGS_NAV, Action.NEXT_TAB, "nav:next-tab", ("tab",), ""),
    (Scope.SETTINGS_NAV, Action.QUIT, None, _QUIT, ""),
)


def build_default_registry() -> KeyRegistry:
    """Build a fresh registry holding the default bindings."""
    registry = KeyRegistry()
    for scope, action, command_id, keys, help_text in DEFAULT_BINDINGS:
        binding = make_binding(scope, action, keys, command_id, help_text)
        if not registry.register(binding):
            raise ConfigurationError(
                "Default keybinding was shadowed by an earlier entry",
                scope=scope.value,
                action=action.value,
            )
    logger.debug(f"Built default keybindings: {registry.summary()}")
    return registry
