"""
Built-in commands and per-filter generated commands.

``build_command_registry`` is called once at startup and again whenever the
keybinding table is reloaded. Saved-filter commands are regenerated through
``CommandRegistry.replace_generated`` each time the filter list changes.
"""

import logging
from dataclasses import replace
from typing import Callable, Iterable, List

from jaskmoney.config.constants import FILTER_COMMAND_PREFIX, RELOAD_KEYBINDINGS_TASK
from jaskmoney.ui.dispatch import operations as ops
from jaskmoney.ui.dispatch.confirm import arm
from jaskmoney.ui.dispatch.effects import Domain, Quit, Task
from jaskmoney.ui.dispatch.state import (
    AppState,
    CommandUIKind,
    ConfirmAction,
    ManagerMode,
    SavedFilter,
    SettingsSection,
    Tab,
)
from jaskmoney.ui.keybindings.context import Scope
from jaskmoney.ui.keybindings.registry import KeyRegistry

from .palette_commands import Command, CommandOutcome, CommandRegistry, always_enabled
from .palette_presenter import can_open_command_ui, open_command_ui

logger = logging.getLogger(__name__)


def _outcome(step: ops.Step, before: AppState) -> CommandOutcome:
    """Wrap an operation result; an error status becomes the outcome's error."""
    state, effect = step
    if state.status_error:
        return CommandOutcome(before, error=state.status)
    return CommandOutcome(state, effect)


def _fresh(state: AppState) -> AppState:
    """``state`` without a stale error, so only errors set by the next step count."""
    return state.with_status("") if state.status_error else state


def _op(fn: Callable[[AppState], ops.Step]) -> Callable[[AppState], CommandOutcome]:
    return lambda state: _outcome(fn(_fresh(state)), state)


def _scopes(*scopes: Scope) -> frozenset:
    return frozenset(s.value for s in scopes)


# Enabled predicates


def _budget_available(state: AppState):
    if not state.budget_available:
        return False, ops.BUDGET_UNAVAILABLE
    return True, ""


def _has_saved_filters(state: AppState):
    if not state.saved_filters:
        return False, "No saved filters."
    return True, ""


def _has_search(state: AppState):
    query = state.filter_input.value if state.filter_input is not None else state.search_query
    if not query.strip():
        return False, "Nothing to save: type a filter first."
    return True, ""


def _db_ready(state: AppState):
    if not state.db_ready:
        return False, "Database is not ready."
    return True, ""


def _dashboard_focused(state: AppState):
    if state.dash_focused_section < 0:
        return False, "Focus a dashboard pane first."
    return True, ""


def _importing(state: AppState):
    if not state.import_preview_open:
        return False, "No import in progress."
    return True, ""


def _can_open_ui(state: AppState):
    if not can_open_command_ui(state):
        return False, "Close the current view first."
    return True, ""


def _nav(tab: Tab, label: str, enabled=always_enabled) -> Command:
    return Command(
        id=f"nav:{tab.value}",
        label=f"Go to {label}",
        description=f"Switch to the {label} tab",
        category="Navigation",
        execute=_op(lambda state: ops.switch_tab(state, tab)),
        enabled=enabled,
    )


def _toggle(field_name: str, on: str, off: str) -> Callable[[AppState], CommandOutcome]:
    def execute(state: AppState) -> CommandOutcome:
        value = not getattr(state, field_name)
        return CommandOutcome(replace(state, **{field_name: value}).with_status(on if value else off))

    return execute


def default_commands(domain: Domain, keys: KeyRegistry) -> List[Command]:
    """The static command set."""
    transactions = _scopes(Scope.TRANSACTIONS)
    filter_scopes = _scopes(Scope.TRANSACTIONS, Scope.MANAGER, Scope.FILTER_INPUT)
    import_preview = _scopes(Scope.IMPORT_PREVIEW)
    budget = _scopes(Scope.BUDGET)
    dashboard = _scopes(Scope.DASHBOARD_FOCUSED)
    rules = _scopes(Scope.SETTINGS_ACTIVE_RULES)

    def clear_db(state: AppState) -> CommandOutcome:
        next_state = replace(
            state,
            active_tab=Tab.SETTINGS,
            settings_active=True,
            settings_section=SettingsSection.DB_IMPORT,
        )
        armed, effect = arm(next_state, ConfirmAction.CLEAR_DB, "database", keys)
        return CommandOutcome(armed, effect)

    def run_rules(state: AppState) -> CommandOutcome:
        def apply_all() -> str:
            return f"{domain.apply_category_rules()} {domain.apply_tag_rules()}"

        return CommandOutcome(state.with_status("Applying rules..."), Task("rules:apply", apply_all))

    def budget_task(action: str) -> Callable[[AppState], CommandOutcome]:
        return _op(lambda state: ops.budget_task(state, action, domain))

    return [
        # Navigation
        _nav(Tab.DASHBOARD, "Dashboard"),
        _nav(Tab.BUDGET, "Budget", enabled=_budget_available),
        _nav(Tab.MANAGER, "Manager"),
        _nav(Tab.SETTINGS, "Settings"),
        Command(
            id="nav:next-tab",
            label="Next Tab",
            category="Navigation",
            execute=_op(lambda state: ops.cycle_tab(state, 1)),
        ),
        Command(
            id="nav:prev-tab",
            label="Previous Tab",
            category="Navigation",
            execute=_op(lambda state: ops.cycle_tab(state, -1)),
        ),
        Command(
            id="jump:activate",
            label="Jump to Tab",
            description="Press a letter to switch tabs",
            category="Navigation",
            execute=lambda state: CommandOutcome(replace(state, jump_active=True).with_status("Jump to...")),
        ),
        Command(
            id="jump:cancel",
            label="Cancel Jump",
            category="Navigation",
            hidden=True,
            scopes=_scopes(Scope.JUMP_OVERLAY),
            execute=lambda state: CommandOutcome(
                replace(state, jump_active=False).with_status("Jump mode cancelled")
            ),
        ),
        Command(
            id="palette:open",
            label="Command Palette",
            category="General",
            hidden=True,
            enabled=_can_open_ui,
            execute=lambda state: open_command_ui(state, CommandUIKind.PALETTE),
        ),
        Command(
            id="cmd:open",
            label="Command Line",
            category="General",
            hidden=True,
            enabled=_can_open_ui,
            execute=lambda state: open_command_ui(state, CommandUIKind.COLON),
        ),
        Command(
            id="app:quit",
            label="Quit",
            description="Exit jaskmoney",
            category="General",
            execute=lambda state: CommandOutcome(state, Quit()),
        ),
        # Filters
        Command(
            id="filter:open",
            label="Filter Transactions",
            description="Type a filter expression",
            category="Transactions",
            execute=_op(ops.open_filter_input),
        ),
        Command(
            id="filter:clear",
            label="Clear Filter",
            description="Remove the search, applied filter and selection",
            category="Transactions",
            scopes=transactions,
            execute=_op(ops.clear_filter),
        ),
        Command(
            id="filter:save",
            label="Save Filter",
            description="Save the current filter expression",
            category="Transactions",
            scopes=_scopes(Scope.TRANSACTIONS, Scope.FILTER_INPUT),
            enabled=_has_search,
            execute=_op(ops.open_filter_save),
        ),
        Command(
            id="filter:apply",
            label="Apply Saved Filter",
            description="Pick a saved filter",
            category="Transactions",
            scopes=filter_scopes,
            enabled=_has_saved_filters,
            execute=_op(ops.open_filter_apply_picker),
        ),
        # Transactions
        Command(
            id="txn:sort",
            label="Cycle Sort Column",
            category="Transactions",
            scopes=transactions,
            execute=_op(ops.cycle_sort),
        ),
        Command(
            id="txn:sort-dir",
            label="Reverse Sort",
            category="Transactions",
            scopes=transactions,
            execute=_op(ops.toggle_sort_direction),
        ),
        Command(
            id="txn:quick-category",
            label="Set Category",
            description="Categorize the selected transactions",
            category="Transactions",
            scopes=transactions,
            enabled=ops.has_transactions,
            execute=_op(ops.open_category_picker),
        ),
        Command(
            id="txn:quick-tag",
            label="Set Tags",
            description="Tag the selected transactions",
            category="Transactions",
            scopes=transactions,
            enabled=ops.has_transactions,
            execute=_op(ops.open_tag_picker),
        ),
        Command(
            id="txn:quick-offset",
            label="Offset Transaction",
            description="Allocate part of a transaction against another",
            category="Transactions",
            scopes=transactions,
            enabled=ops.has_transactions,
            execute=_op(ops.open_quick_offset),
        ),
        Command(
            id="txn:select",
            label="Toggle Selection",
            category="Transactions",
            scopes=transactions,
            enabled=ops.has_transactions,
            execute=lambda state: CommandOutcome(ops.toggle_transaction(state, state.txn_cursor)),
        ),
        Command(
            id="txn:clear-selection",
            label="Clear Selection",
            category="Transactions",
            scopes=transactions,
            execute=lambda state: CommandOutcome(
                replace(state, selected_transactions=frozenset()).with_status("Selection cleared.")
            ),
        ),
        Command(
            id="txn:jump-top",
            label="Jump to Top",
            category="Transactions",
            scopes=transactions,
            execute=lambda state: CommandOutcome(replace(state, txn_cursor=0)),
        ),
        Command(
            id="txn:jump-bottom",
            label="Jump to Bottom",
            category="Transactions",
            scopes=transactions,
            execute=lambda state: CommandOutcome(
                replace(state, txn_cursor=max(state.transaction_count - 1, 0))
            ),
        ),
        Command(
            id="txn:detail",
            label="Transaction Detail",
            category="Transactions",
            scopes=transactions,
            enabled=ops.has_transactions,
            execute=_op(ops.open_detail),
        ),
        Command(
            id="focus:accounts",
            label="Show Accounts",
            category="Manager",
            scopes=_scopes(Scope.TRANSACTIONS, Scope.MANAGER_TRANSACTIONS),
            execute=lambda state: CommandOutcome(
                replace(state, active_tab=Tab.MANAGER, manager_mode=ManagerMode.ACCOUNTS)
            ),
        ),
        Command(
            id="focus:transactions",
            label="Show Transactions",
            category="Manager",
            scopes=_scopes(Scope.MANAGER),
            execute=lambda state: CommandOutcome(ops.show_transactions(state)),
        ),
        # Budget
        Command(
            id="budget:prev-month",
            label="Previous Month",
            category="Budget",
            scopes=budget,
            execute=_op(lambda state: ops.shift_budget_month(state, -1)),
        ),
        Command(
            id="budget:next-month",
            label="Next Month",
            category="Budget",
            scopes=budget,
            execute=_op(lambda state: ops.shift_budget_month(state, 1)),
        ),
        Command(
            id="budget:prev-year",
            label="Previous Year",
            category="Budget",
            scopes=budget,
            execute=_op(lambda state: ops.shift_budget_month(state, -12)),
        ),
        Command(
            id="budget:next-year",
            label="Next Year",
            category="Budget",
            scopes=budget,
            execute=_op(lambda state: ops.shift_budget_month(state, 12)),
        ),
        Command(
            id="budget:toggle-view",
            label="Toggle Budget View",
            description="Switch between spending and targets",
            category="Budget",
            scopes=budget,
            execute=_toggle("budget_show_targets", "Showing targets", "Showing spending"),
        ),
        Command(id="budget:edit", label="Edit Budget", category="Budget", scopes=budget, execute=budget_task("edit")),
        Command(
            id="budget:add-target",
            label="Add Target",
            category="Budget",
            scopes=budget,
            execute=budget_task("add-target"),
        ),
        Command(
            id="budget:delete-target",
            label="Delete Target",
            category="Budget",
            scopes=budget,
            execute=budget_task("delete-target"),
        ),
        Command(
            id="budget:reset-override",
            label="Reset Override",
            category="Budget",
            scopes=budget,
            execute=budget_task("reset-override"),
        ),
        # Dashboard
        Command(
            id="dash:mode-next",
            label="Next Chart Mode",
            category="Dashboard",
            scopes=dashboard,
            enabled=_dashboard_focused,
            execute=_op(lambda state: ops.cycle_dashboard_mode(state, 1)),
        ),
        Command(
            id="dash:mode-prev",
            label="Previous Chart Mode",
            category="Dashboard",
            scopes=dashboard,
            enabled=_dashboard_focused,
            execute=_op(lambda state: ops.cycle_dashboard_mode(state, -1)),
        ),
        Command(
            id="dash:drill-down",
            label="Drill Down",
            description="Show the transactions behind the focused pane",
            category="Dashboard",
            scopes=dashboard,
            enabled=_dashboard_focused,
            execute=_op(ops.drill_down),
        ),
        # Import
        Command(
            id="import:start",
            label="Import CSV",
            description="Pick a file to import",
            category="Import",
            enabled=_db_ready,
            execute=_op(ops.open_file_picker),
        ),
        Command(
            id="import:all",
            label="Import All Rows",
            category="Import",
            scopes=import_preview,
            enabled=_importing,
            execute=_op(lambda state: ops.run_import(state, domain, skip_duplicates=False)),
        ),
        Command(
            id="import:skip-dupes",
            label="Import Skipping Duplicates",
            category="Import",
            scopes=import_preview,
            enabled=_importing,
            execute=_op(lambda state: ops.run_import(state, domain, skip_duplicates=True)),
        ),
        Command(
            id="import:raw-view",
            label="Toggle Rules Preview",
            category="Import",
            scopes=import_preview,
            enabled=_importing,
            execute=_toggle("import_raw_view", "Showing raw rows", "Showing rule results"),
        ),
        Command(
            id="import:preview-toggle",
            label="Toggle Compact Preview",
            category="Import",
            scopes=import_preview,
            enabled=_importing,
            execute=_toggle("import_preview_compact", "Compact preview", "Full preview"),
        ),
        Command(
            id="import:cancel",
            label="Cancel Import",
            category="Import",
            scopes=import_preview,
            enabled=_importing,
            execute=_op(ops.cancel_import),
        ),
        # Rules and maintenance
        Command(
            id="rules:apply",
            label="Apply All Rules",
            description="Run category and tag rules over every transaction",
            category="Rules",
            enabled=_db_ready,
            execute=run_rules,
        ),
        Command(
            id="rules:dry-run",
            label="Rules Dry Run",
            description="Preview what the rules would change",
            category="Rules",
            scopes=rules,
            execute=lambda state: CommandOutcome(replace(state, dry_run_open=True)),
        ),
        Command(
            id="apply:category-rules",
            label="Apply Category Rules",
            category="Rules",
            enabled=_db_ready,
            execute=lambda state: CommandOutcome(
                state.with_status("Applying category rules..."),
                Task("apply:category-rules", domain.apply_category_rules),
            ),
        ),
        Command(
            id="apply:tag-rules",
            label="Apply Tag Rules",
            category="Rules",
            enabled=_db_ready,
            execute=lambda state: CommandOutcome(
                state.with_status("Applying tag rules..."),
                Task("apply:tag-rules", domain.apply_tag_rules),
            ),
        ),
        Command(
            id="settings:clear-db",
            label="Clear Database",
            description="Delete all imported data (asks for confirmation)",
            category="Settings",
            enabled=_db_ready,
            execute=clear_db,
        ),
        Command(
            id="settings:reload-keybindings",
            label="Reload Keybindings",
            description="Re-read the keybindings file",
            category="Settings",
            execute=lambda state: CommandOutcome(
                state.with_status("Reloading keybindings..."),
                Task(RELOAD_KEYBINDINGS_TASK, lambda: None),
            ),
        ),
    ]


def saved_filter_commands(filters: Iterable[SavedFilter], domain: Domain) -> List[Command]:
    """One ``filter:apply:<id>`` command per saved filter; a repeated id keeps its first filter."""
    commands = []
    seen = set()
    for saved in filters:
        if saved.id in seen:
            logger.warning(f"Skipping duplicate saved filter id {saved.id!r}")
            continue
        seen.add(saved.id)
        snapshot = SavedFilter(id=saved.id, name=saved.name, expression=saved.expression)
        commands.append(
            Command(
                id=f"{FILTER_COMMAND_PREFIX}{snapshot.id}",
                label=f"Apply Filter: {snapshot.name}",
                description=snapshot.expression,
                category="Filters",
                execute=_apply_filter(snapshot, domain),
            )
        )
    return commands


def _apply_filter(saved: SavedFilter, domain: Domain) -> Callable[[AppState], CommandOutcome]:
    return lambda state: _outcome(ops.apply_saved_filter(_fresh(state), saved, domain), state)


def build_command_registry(
    domain: Domain,
    keys: KeyRegistry,
    saved_filters: Iterable[SavedFilter] = (),
) -> CommandRegistry:
    """Static commands plus one command per saved filter."""
    registry = CommandRegistry(default_commands(domain, keys))
    registry.replace_generated(FILTER_COMMAND_PREFIX, saved_filter_commands(saved_filters, domain))
    logger.debug(f"Built command registry with {len(registry)} commands")
    return registry
