"""
Application state as seen by the input router.

``AppState`` is a frozen snapshot. Each overlay is an independent optional
field, and several may be set at once (a picker opened from inside the
detail view, for instance). The overlay precedence table decides which one
owns the keyboard, so nothing here assumes the overlays are mutually
exclusive.

Handlers never mutate a snapshot; they return ``dataclasses.replace(...)``.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import FrozenSet, Optional, Tuple

from jaskmoney.config.constants import DEFAULT_ROWS_PER_PAGE
from jaskmoney.ui.command_palette.fuzzy import fuzzy_match_score

from .text import FormState, TextField


class Tab(str, Enum):
    DASHBOARD = "dashboard"
    BUDGET = "budget"
    MANAGER = "manager"
    SETTINGS = "settings"


TAB_ORDER: Tuple[Tab, ...] = (Tab.DASHBOARD, Tab.BUDGET, Tab.MANAGER, Tab.SETTINGS)

# Letter pressed in jump mode -> tab
JUMP_KEYS = {
    "d": Tab.DASHBOARD,
    "b": Tab.BUDGET,
    "m": Tab.MANAGER,
    "s": Tab.SETTINGS,
}


class ManagerMode(str, Enum):
    TRANSACTIONS = "transactions"
    ACCOUNTS = "accounts"


class SettingsSection(str, Enum):
    CATEGORIES = "categories"
    TAGS = "tags"
    RULES = "rules"
    FILTERS = "filters"
    CHART = "chart"
    DB_IMPORT = "db_import"
    IMPORT_HISTORY = "import_history"


SETTINGS_SECTIONS: Tuple[SettingsSection, ...] = tuple(SettingsSection)


class SettingsEditMode(str, Enum):
    ADD_CATEGORY = "add_category"
    EDIT_CATEGORY = "edit_category"
    ADD_TAG = "add_tag"
    EDIT_TAG = "edit_tag"


class CommandUIKind(str, Enum):
    PALETTE = "palette"
    COLON = "colon"


class ConfirmAction(str, Enum):
    """Destructive actions that need a second key press."""

    DELETE_CATEGORY = "delete_cat"
    DELETE_TAG = "delete_tag"
    DELETE_RULE = "delete_rule"
    DELETE_FILTER = "delete_filter"
    CLEAR_DB = "clear_db"


@dataclass(frozen=True)
class SavedFilter:
    """A named transaction filter expression."""

    id: str
    name: str
    expression: str


@dataclass(frozen=True)
class PickerState:
    """A cursor over a fixed list, with optional multi-selection."""

    items: Tuple[str, ...]
    cursor: int = 0
    selected: FrozenSet[str] = frozenset()
    query: str = ""

    def visible(self) -> Tuple[str, ...]:
        """Items matching ``query``, best match first."""
        if not self.query:
            return self.items
        scored = []
        for position, item in enumerate(self.items):
            matched, score = fuzzy_match_score(item, self.query)
            if matched:
                scored.append((-score, position, item))
        return tuple(item for _, _, item in sorted(scored))

    @property
    def current(self) -> Optional[str]:
        items = self.visible()
        if 0 <= self.cursor < len(items):
            return items[self.cursor]
        return None


@dataclass(frozen=True)
class CommandUIState:
    """Open command palette or colon command line."""

    kind: CommandUIKind = CommandUIKind.PALETTE
    query: str = ""
    cursor: int = 0
    scope: str = "global"  # Command context the UI was opened from


@dataclass(frozen=True)
class Armed:
    """A destructive action waiting for its confirmation key."""

    action: ConfirmAction
    target: str
    deadline: float
    token: int


@dataclass(frozen=True)
class DetailState:
    """Transaction detail view; ``notes`` is set while notes are being edited."""

    transaction: int
    scroll: int = 0
    notes: Optional[TextField] = None


@dataclass(frozen=True)
class AppState:
    # Tabs
    active_tab: Tab = Tab.DASHBOARD
    manager_mode: ManagerMode = ManagerMode.TRANSACTIONS

    # Overlays, in no particular order; see overlays.py for precedence
    jump_active: bool = False
    command_ui: Optional[CommandUIState] = None
    detail: Optional[DetailState] = None
    import_preview_open: bool = False
    file_picker: Optional[PickerState] = None
    category_picker: Optional[PickerState] = None
    tag_picker: Optional[PickerState] = None
    quick_offset: Optional[TextField] = None
    filter_apply_picker: Optional[PickerState] = None
    manager_action_picker: Optional[PickerState] = None
    filter_edit: Optional[FormState] = None
    manager_modal: Optional[FormState] = None
    dry_run_open: bool = False
    rule_editor: Optional[FormState] = None
    filter_input: Optional[TextField] = None

    # Dashboard
    dash_focused_section: int = -1
    dash_mode: int = 0
    dash_timeframe_focus: bool = False
    dash_timeframe: int = 0
    dash_timeframe_cursor: int = 0
    dash_custom_input: Optional[TextField] = None
    dash_custom_start: str = ""
    dash_custom_end: str = ""

    # Transactions / accounts
    transaction_count: int = 0
    txn_cursor: int = 0
    selected_transactions: FrozenSet[int] = frozenset()
    search_query: str = ""
    applied_filter_id: str = ""
    sort_column: int = 0
    sort_ascending: bool = False
    accounts: Tuple[str, ...] = ()
    account_cursor: int = 0
    account_filter: FrozenSet[str] = frozenset()
    import_path: str = ""
    import_preview_cursor: int = 0
    import_raw_view: bool = False
    import_preview_compact: bool = False

    # Budget
    budget_available: bool = True
    budget_month_offset: int = 0
    budget_cursor: int = 0
    budget_show_targets: bool = False

    # Settings
    settings_section: SettingsSection = SettingsSection.CATEGORIES
    settings_active: bool = False
    settings_cursor: int = 0
    settings_edit_mode: Optional[SettingsEditMode] = None
    settings_edit_field: TextField = field(default_factory=TextField)
    settings_edit_target: str = ""
    rows_per_page: int = DEFAULT_ROWS_PER_PAGE
    command_default: CommandUIKind = CommandUIKind.PALETTE
    week_starts_monday: bool = False

    # Reference data shown in pickers and settings lists
    categories: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()
    rules: Tuple[str, ...] = ()
    import_files: Tuple[str, ...] = ()
    saved_filters: Tuple[SavedFilter, ...] = ()

    # Destructive confirmation (None = idle)
    confirm: Optional[Armed] = None
    confirm_seq: int = 0

    # Misc
    db_ready: bool = True
    last_command_id: str = ""
    status: str = ""
    status_error: bool = False

    def with_status(self, message: str) -> "AppState":
        return replace(self, status=message, status_error=False)

    def with_error(self, message: str) -> "AppState":
        return replace(self, status=message, status_error=True)

    def saved_filter(self, filter_id: str) -> Optional[SavedFilter]:
        for saved in self.saved_filters:
            if saved.id == filter_id:
                return saved
        return None

    def settings_items(self) -> Tuple[str, ...]:
        """Rows of the active settings section."""
        if self.settings_section is SettingsSection.CATEGORIES:
            return self.categories
        if self.settings_section is SettingsSection.TAGS:
            return self.tags
        if self.settings_section is SettingsSection.RULES:
            return self.rules
        if self.settings_section is SettingsSection.FILTERS:
            return tuple(f.id for f in self.saved_filters)
        return ()

    def current_settings_item(self) -> Optional[str]:
        items = self.settings_items()
        if 0 <= self.settings_cursor < len(items):
            return items[self.settings_cursor]
        return None

    @property
    def has_active_filter(self) -> bool:
        return bool(self.search_query or self.applied_filter_id)
