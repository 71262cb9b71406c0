"""
State transitions shared by commands and key handlers.

Each function takes the current ``AppState`` and returns ``(state, effect)``.
Commands wrap these in ``CommandOutcome``; overlay and tab handlers call
them directly, so a palette entry and its key always do the same thing.
"""

import logging
from dataclasses import replace
from typing import Optional, Tuple

from jaskmoney.config.constants import DASHBOARD_MODES, SORT_COLUMNS
from jaskmoney.ui.command_palette.saved_filters import next_unique_filter_id

from .effects import Domain, Effect, Task
from .state import (
    TAB_ORDER,
    AppState,
    DetailState,
    ManagerMode,
    PickerState,
    SavedFilter,
    Tab,
)
from .text import FormState, TextField, move_bounded

logger = logging.getLogger(__name__)

Step = Tuple[AppState, Optional[Effect]]

BUDGET_UNAVAILABLE = "Budget tab is not available yet."
ACCOUNT_ACTIONS = ("Filter to account", "Clear transactions", "Delete account")


def switch_tab(state: AppState, tab: Tab) -> Step:
    if tab is Tab.BUDGET and not state.budget_available:
        return state.with_error(BUDGET_UNAVAILABLE), None
    return replace(state, active_tab=tab, jump_active=False).with_status(""), None


def cycle_tab(state: AppState, delta: int) -> Step:
    """Move to the next or previous tab, skipping an unavailable budget tab."""
    tabs = [t for t in TAB_ORDER if t is not Tab.BUDGET or state.budget_available]
    index = tabs.index(state.active_tab) if state.active_tab in tabs else 0
    return switch_tab(state, tabs[(index + delta) % len(tabs)])


def show_transactions(state: AppState) -> AppState:
    return replace(state, active_tab=Tab.MANAGER, manager_mode=ManagerMode.TRANSACTIONS)


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


def target_transactions(state: AppState) -> Tuple[int, ...]:
    """Selected rows, or the row under the cursor when nothing is selected."""
    if state.selected_transactions:
        return tuple(sorted(state.selected_transactions))
    if state.transaction_count > 0:
        return (state.txn_cursor,)
    return ()


def has_transactions(state: AppState) -> Tuple[bool, str]:
    if state.transaction_count <= 0:
        return False, "No transactions loaded."
    return True, ""


def move_transaction_cursor(state: AppState, delta: int) -> AppState:
    return replace(state, txn_cursor=move_bounded(state.txn_cursor, state.transaction_count, delta))


def toggle_transaction(state: AppState, index: int) -> AppState:
    selected = set(state.selected_transactions)
    selected.symmetric_difference_update({index})
    return replace(state, selected_transactions=frozenset(selected))


def extend_selection(state: AppState, delta: int) -> AppState:
    """Select the current row, move, and select the new row."""
    anchor = state.txn_cursor
    moved = move_transaction_cursor(state, delta)
    rows = {anchor, moved.txn_cursor}
    return replace(moved, selected_transactions=state.selected_transactions | frozenset(rows))


def cycle_sort(state: AppState) -> Step:
    column = (state.sort_column + 1) % len(SORT_COLUMNS)
    return replace(state, sort_column=column).with_status(f"Sort: {SORT_COLUMNS[column]}"), None


def toggle_sort_direction(state: AppState) -> Step:
    ascending = not state.sort_ascending
    label = "ascending" if ascending else "descending"
    return replace(state, sort_ascending=ascending).with_status(f"Sort {label}"), None


def open_detail(state: AppState) -> Step:
    return replace(state, detail=DetailState(transaction=state.txn_cursor)), None


def open_category_picker(state: AppState) -> Step:
    if not state.categories:
        return state.with_error("No categories defined."), None
    return replace(state, category_picker=PickerState(items=state.categories)), None


def open_tag_picker(state: AppState) -> Step:
    if not state.tags:
        return state.with_error("No tags defined."), None
    return replace(state, tag_picker=PickerState(items=state.tags)), None


def open_quick_offset(state: AppState) -> Step:
    if len(target_transactions(state)) != 1:
        return state.with_error("Select a single transaction to offset."), None
    return replace(state, quick_offset=TextField()), None


def assign_category(state: AppState, category: str, domain: Domain) -> Step:
    rows = target_transactions(state)
    task = Task("assign-category", lambda: domain.assign_category(rows, category))
    return replace(state, category_picker=None).with_status(f"Setting category {category!r}..."), task


def assign_tags(state: AppState, tags: Tuple[str, ...], domain: Domain) -> Step:
    rows = target_transactions(state)
    task = Task("assign-tags", lambda: domain.assign_tags(rows, tags))
    return replace(state, tag_picker=None).with_status("Updating tags..."), task


def allocate_offset(state: AppState, amount: str, domain: Domain) -> Step:
    amount = amount.strip()
    try:
        value = float(amount)
    except ValueError:
        return state.with_error("Offset must be a number."), None
    if value <= 0:
        return state.with_error("Offset must be greater than zero."), None
    (row,) = target_transactions(state)
    task = Task("allocate-offset", lambda: domain.allocate_offset(row, amount))
    return replace(state, quick_offset=None).with_status("Allocating offset..."), task


# ---------------------------------------------------------------------------
# Search and saved filters
# ---------------------------------------------------------------------------


def open_filter_input(state: AppState) -> Step:
    field = TextField.of(state.search_query)
    return replace(show_transactions(state), filter_input=field), None


def clear_filter(state: AppState) -> Step:
    if not state.has_active_filter and not state.selected_transactions:
        return state, None
    cleared = replace(
        state,
        search_query="",
        applied_filter_id="",
        selected_transactions=frozenset(),
        filter_input=None,
    )
    return cleared.with_status("Filter cleared."), None


def open_filter_save(state: AppState) -> Step:
    """Open the filter editor prefilled with the current search."""
    expression = state.filter_input.value if state.filter_input is not None else state.search_query
    if not expression.strip():
        return state.with_error("Nothing to save: type a filter first."), None
    form = FormState(fields=(TextField(), TextField.of(expression)))
    return replace(state, filter_input=None, filter_edit=form), None


def open_filter_editor(state: AppState, filter_id: str = "") -> Step:
    """Open the filter editor, for a new filter or an existing one."""
    saved = state.saved_filter(filter_id) if filter_id else None
    if saved is None:
        return replace(state, filter_edit=FormState(fields=(TextField(), TextField()))), None
    form = FormState(
        fields=(TextField.of(saved.name), TextField.of(saved.expression)),
        target=saved.id,
    )
    return replace(state, filter_edit=form), None


def save_filter_form(state: AppState, form: FormState) -> Step:
    name, expression = (value.strip() for value in form.values())
    if not name:
        return state.with_error("Filter name is required."), None
    if not expression:
        return state.with_error("Filter expression is required."), None

    if form.target:
        filters = tuple(
            replace(f, name=name, expression=expression) if f.id == form.target else f
            for f in state.saved_filters
        )
        saved_id = form.target
    else:
        saved_id = next_unique_filter_id((f.id for f in state.saved_filters), name)
        filters = state.saved_filters + (SavedFilter(id=saved_id, name=name, expression=expression),)

    logger.debug(f"Saved filter {saved_id}")
    next_state = replace(state, saved_filters=filters, filter_edit=None)
    return next_state.with_status(f"Saved filter {saved_id!r}."), None


def open_filter_apply_picker(state: AppState) -> Step:
    if not state.saved_filters:
        return state.with_error("No saved filters."), None
    picker = PickerState(items=tuple(f.id for f in state.saved_filters))
    return replace(state, filter_input=None, filter_apply_picker=picker), None


def apply_saved_filter(state: AppState, saved: SavedFilter, domain: Domain) -> Step:
    """Make ``saved`` the active transaction filter."""
    next_state = replace(
        show_transactions(state),
        applied_filter_id=saved.id,
        search_query=saved.expression,
        filter_input=None,
        filter_apply_picker=None,
        txn_cursor=0,
    )
    task = Task(f"filter:{saved.id}", lambda: domain.apply_saved_filter(saved.id, saved.expression))
    return next_state.with_status(f"Filter: {saved.name}"), task


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------


def open_file_picker(state: AppState) -> Step:
    if not state.db_ready:
        return state.with_error("Database is not ready."), None
    if not state.import_files:
        return state.with_error("No CSV files found."), None
    return replace(state, file_picker=PickerState(items=state.import_files)), None


def open_import_preview(state: AppState, path: str) -> Step:
    next_state = replace(
        state,
        file_picker=None,
        import_preview_open=True,
        import_path=path,
        import_preview_cursor=0,
    )
    return next_state.with_status(f"Previewing {path}"), None


def run_import(state: AppState, domain: Domain, skip_duplicates: bool) -> Step:
    path = state.import_path
    task = Task("import", lambda: domain.begin_import(path, skip_duplicates))
    next_state = replace(state, import_preview_open=False, import_path="")
    return next_state.with_status(f"Importing {path}..."), task


def cancel_import(state: AppState) -> Step:
    return replace(state, import_preview_open=False, import_path="").with_status("Import cancelled."), None


# ---------------------------------------------------------------------------
# Dashboard and budget
# ---------------------------------------------------------------------------


def cycle_dashboard_mode(state: AppState, delta: int) -> Step:
    if state.dash_focused_section < 0:
        return state.with_error("No focused dashboard pane."), None
    mode = (state.dash_mode + delta) % len(DASHBOARD_MODES)
    return replace(state, dash_mode=mode).with_status(f"Mode: {DASHBOARD_MODES[mode]}"), None


def drill_down(state: AppState) -> Step:
    mode = DASHBOARD_MODES[state.dash_mode]
    next_state = replace(show_transactions(state), dash_focused_section=-1, txn_cursor=0)
    return next_state.with_status(f"Showing transactions for {mode}"), None


def shift_budget_month(state: AppState, months: int) -> Step:
    offset = state.budget_month_offset + months
    return replace(state, budget_month_offset=offset).with_status(""), None


def budget_task(state: AppState, action: str, domain: Domain) -> Step:
    month, row = state.budget_month_offset, state.budget_cursor
    return state, Task(f"budget:{action}", lambda: domain.budget_action(action, month, row))
