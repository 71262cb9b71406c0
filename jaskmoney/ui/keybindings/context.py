"""
Keybinding scopes.

A scope is a named context (a modal or a tab sub-state) that owns its own
key namespace. ``GLOBAL`` is consulted whenever a scope-specific lookup
misses.
"""

from enum import Enum


class Scope(str, Enum):
    """All scopes that own keybindings or footer contracts."""

    GLOBAL = "global"

    # Command entry
    COMMAND_PALETTE = "command_palette"
    COMMAND_MODE = "command_mode"
    JUMP_OVERLAY = "jump_overlay"

    # Dashboard tab
    DASHBOARD = "dashboard"
    DASHBOARD_FOCUSED = "dashboard_focused"
    DASHBOARD_TIMEFRAME = "dashboard_timeframe"
    DASHBOARD_CUSTOM_INPUT = "dashboard_custom_input"

    # Budget tab
    BUDGET = "budget"

    # Manager tab
    TRANSACTIONS = "transactions"
    MANAGER = "manager"
    MANAGER_TRANSACTIONS = "manager_transactions"
    MANAGER_MODAL = "manager_modal"
    MANAGER_ACCOUNT_ACTION = "manager_account_action"

    # Overlays
    DETAIL_MODAL = "detail_modal"
    CATEGORY_PICKER = "category_picker"
    TAG_PICKER = "tag_picker"
    QUICK_OFFSET = "quick_offset"
    FILTER_APPLY_PICKER = "filter_apply_picker"
    FILTER_EDIT = "filter_edit"
    FILE_PICKER = "file_picker"
    IMPORT_PREVIEW = "import_preview"
    FILTER_INPUT = "filter_input"
    RULE_EDITOR = "rule_editor"
    DRY_RUN_MODAL = "dry_run_modal"

    # Settings tab
    SETTINGS_NAV = "settings_nav"
    SETTINGS_MODE_CAT = "settings_mode_cat"
    SETTINGS_MODE_TAG = "settings_mode_tag"
    SETTINGS_ACTIVE_CATEGORIES = "settings_active_categories"
    SETTINGS_ACTIVE_TAGS = "settings_active_tags"
    SETTINGS_ACTIVE_RULES = "settings_active_rules"
    SETTINGS_ACTIVE_FILTERS = "settings_active_filters"
    SETTINGS_ACTIVE_CHART = "settings_active_chart"
    SETTINGS_ACTIVE_DB_IMPORT = "settings_active_db_import"
    SETTINGS_ACTIVE_IMPORT_HISTORY = "settings_active_import_history"

    def __str__(self) -> str:
        return self.value

    def __hash__(self) -> int:
        return hash(self.value)

    @classmethod
    def is_known(cls, name: str) -> bool:
        """Check whether a plain string names a scope."""
        return name in cls._value2member_map_

    @classmethod
    def is_overlay(cls, scope: "Scope") -> bool:
        """Overlay scopes own input exclusively while they are open."""
        return scope in _OVERLAY_SCOPES


_OVERLAY_SCOPES = frozenset(
    {
        Scope.COMMAND_PALETTE,
        Scope.COMMAND_MODE,
        Scope.JUMP_OVERLAY,
        Scope.DETAIL_MODAL,
        Scope.CATEGORY_PICKER,
        Scope.TAG_PICKER,
        Scope.QUICK_OFFSET,
        Scope.FILTER_APPLY_PICKER,
        Scope.FILTER_EDIT,
        Scope.FILE_PICKER,
        Scope.IMPORT_PREVIEW,
        Scope.FILTER_INPUT,
        Scope.RULE_EDITOR,
        Scope.DRY_RUN_MODAL,
        Scope.MANAGER_MODAL,
        Scope.MANAGER_ACCOUNT_ACTION,
    }
)
