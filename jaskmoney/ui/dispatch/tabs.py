"""
Tab-level key handling.

Reached only when no overlay owns the keyboard, no confirmation is armed and
the key was not bound to a command in the current scope. Each handler
returns None for keys it does not use; the fallback then honours ``quit``.
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, Dict, Optional

from jaskmoney.config.constants import (
    DASHBOARD_SECTION_COUNT,
    DASHBOARD_TIMEFRAMES,
    MAX_ROWS_PER_PAGE,
    MIN_ROWS_PER_PAGE,
    ROWS_PER_PAGE_STEP,
)
from jaskmoney.ui.keybindings.actions import Action
from jaskmoney.ui.keybindings.context import Scope
from jaskmoney.ui.keybindings.defaults import build_default_registry

from . import operations as ops
from .confirm import arm
from .contracts import horizontal_delta, vertical_delta
from .effects import Quit, Task
from .handlers import HandlerContext, cursor_aware, run_command
from .scope import tab_scope
from .state import (
    SETTINGS_SECTIONS,
    AppState,
    CommandUIKind,
    PickerState,
    ConfirmAction,
    SettingsEditMode,
    SettingsSection,
)
from .text import FormState, TextField, move_bounded

logger = logging.getLogger(__name__)

TabHandler = Callable[[HandlerContext, AppState, str], Optional[ops.Step]]

RESET_KEYBINDINGS_TASK = "keybindings:reset"
_CUSTOM_TIMEFRAME = len(DASHBOARD_TIMEFRAMES) - 1
_DATE_FORMAT = "%Y-%m-%d"


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------


def _dashboard(ctx: HandlerContext, state: AppState, key: str) -> Optional[ops.Step]:
    scope = Scope.DASHBOARD
    if vertical_delta(ctx.keys, scope, key) > 0:
        return replace(state, dash_focused_section=0), None
    if ctx.keys.is_action(key, scope, Action.DASHBOARD_TIMEFRAME):
        focused = replace(state, dash_timeframe_focus=True, dash_timeframe_cursor=state.dash_timeframe)
        return focused.with_status("Select a timeframe."), None
    return None


def _dashboard_focused(ctx: HandlerContext, state: AppState, key: str) -> Optional[ops.Step]:
    scope = Scope.DASHBOARD_FOCUSED
    if ctx.keys.is_action(key, scope, Action.CANCEL):
        return replace(state, dash_focused_section=-1), None
    delta = vertical_delta(ctx.keys, scope, key)
    if delta:
        section = state.dash_focused_section + delta
        if section < 0:
            return replace(state, dash_focused_section=-1), None
        return replace(state, dash_focused_section=min(section, DASHBOARD_SECTION_COUNT - 1)), None
    return None


def _start_custom_input(state: AppState) -> ops.Step:
    next_state = replace(state, dash_custom_input=TextField(), dash_custom_start="", dash_custom_end="")
    return next_state.with_status("Custom timeframe: enter start date (YYYY-MM-DD)."), None


def _dashboard_timeframe(ctx: HandlerContext, state: AppState, key: str) -> Optional[ops.Step]:
    scope = Scope.DASHBOARD_TIMEFRAME
    keys = ctx.keys
    if keys.is_action(key, scope, Action.CANCEL):
        unfocused = replace(state, dash_timeframe_focus=False, dash_focused_section=-1)
        return unfocused.with_status("Date range pane unfocused."), None
    if keys.is_action(key, scope, Action.DASHBOARD_CUSTOM_EDIT):
        return _start_custom_input(replace(state, dash_timeframe_cursor=_CUSTOM_TIMEFRAME))
    if keys.is_action(key, scope, Action.SELECT):
        if state.dash_timeframe_cursor == _CUSTOM_TIMEFRAME:
            return _start_custom_input(state)
        chosen = state.dash_timeframe_cursor
        applied = replace(state, dash_timeframe=chosen, dash_timeframe_focus=False)
        return applied.with_status(f"Dashboard timeframe: {DASHBOARD_TIMEFRAMES[chosen]}"), None
    delta = horizontal_delta(keys, scope, key) or vertical_delta(keys, scope, key)
    if delta:
        cursor = (state.dash_timeframe_cursor + delta) % len(DASHBOARD_TIMEFRAMES)
        return replace(state, dash_timeframe_cursor=cursor), None
    return None


def _parse_date(text: str) -> Optional[datetime]:
    try:
        return datetime.strptime(text.strip(), _DATE_FORMAT)
    except ValueError:
        return None


def _dashboard_custom_input(ctx: HandlerContext, state: AppState, key: str) -> Optional[ops.Step]:
    scope = Scope.DASHBOARD_CUSTOM_INPUT
    field = state.dash_custom_input
    if ctx.keys.is_action(key, scope, Action.CANCEL):
        cancelled = replace(state, dash_custom_input=None, dash_custom_start="", dash_custom_end="")
        return cancelled.with_status("Custom timeframe cancelled."), None
    if ctx.keys.is_action(key, scope, Action.CONFIRM):
        entered = _parse_date(field.value)
        if entered is None:
            return state.with_error("Invalid date. Use YYYY-MM-DD."), None
        if not state.dash_custom_start:
            next_state = replace(state, dash_custom_start=field.value.strip(), dash_custom_input=TextField())
            return next_state.with_status("Custom timeframe: enter end date (YYYY-MM-DD)."), None
        if entered < _parse_date(state.dash_custom_start):
            return state.with_error("End date must be on or after start date."), None
        end = field.value.strip()
        applied = replace(
            state,
            dash_custom_end=end,
            dash_custom_input=None,
            dash_timeframe=_CUSTOM_TIMEFRAME,
            dash_timeframe_cursor=_CUSTOM_TIMEFRAME,
            dash_timeframe_focus=False,
        )
        return applied.with_status(f"Dashboard timeframe: {state.dash_custom_start} to {end}"), None
    field, _ = field.handle_key(key, cursor_aware=cursor_aware(scope))
    return replace(state, dash_custom_input=field), None


# ---------------------------------------------------------------------------
# Budget and manager
# ---------------------------------------------------------------------------


def _budget(ctx: HandlerContext, state: AppState, key: str) -> Optional[ops.Step]:
    scope = Scope.BUDGET
    if ctx.keys.is_action(key, scope, Action.CANCEL):
        return state.with_status(""), None
    delta = vertical_delta(ctx.keys, scope, key)
    if delta:
        return replace(state, budget_cursor=max(state.budget_cursor + delta, 0)), None
    return None


def _transactions(ctx: HandlerContext, state: AppState, key: str) -> Optional[ops.Step]:
    scope = Scope.TRANSACTIONS
    if ctx.keys.is_action(key, Scope.MANAGER_TRANSACTIONS, Action.FOCUS_ACCOUNTS):
        return run_command(ctx, state, "focus:accounts", Scope.MANAGER_TRANSACTIONS)
    if ctx.keys.is_action(key, scope, Action.RANGE_HIGHLIGHT):
        return ops.extend_selection(state, -1 if key.endswith("up") else 1), None
    delta = vertical_delta(ctx.keys, scope, key)
    if delta:
        return ops.move_transaction_cursor(state, delta), None
    return None


def _manager(ctx: HandlerContext, state: AppState, key: str) -> Optional[ops.Step]:
    scope = Scope.MANAGER
    keys = ctx.keys
    delta = vertical_delta(keys, scope, key)
    if delta:
        return replace(state, account_cursor=move_bounded(state.account_cursor, len(state.accounts), delta)), None
    if horizontal_delta(keys, scope, key) > 0:
        return ops.show_transactions(state), None
    if keys.is_action(key, scope, Action.SEARCH):
        return ops.open_filter_input(state)
    if keys.is_action(key, scope, Action.ADD):
        form = FormState(fields=(TextField(), TextField.of("checking")), has_toggle=True)
        return replace(state, manager_modal=form), None

    account = state.accounts[state.account_cursor] if 0 <= state.account_cursor < len(state.accounts) else None
    if keys.is_action(key, scope, Action.TOGGLE_SELECT):
        if account is None:
            return state, None
        chosen = state.account_filter ^ {account}
        next_state = replace(state, account_filter=frozenset(chosen))
        return next_state.with_status(f"Filtering {len(chosen)} account(s)" if chosen else "All accounts"), None
    if keys.is_action(key, scope, Action.SELECT):
        if account is None:
            return state.with_error("No account selected."), None
        form = FormState(fields=(TextField.of(account), TextField()), has_toggle=True, target=account)
        return replace(state, manager_modal=form), None
    if keys.is_action(key, scope, Action.DELETE):
        if account is None:
            return state.with_error("No account selected."), None
        return replace(state, manager_action_picker=PickerState(items=ops.ACCOUNT_ACTIONS)), None
    return None


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


def _settings_nav(ctx: HandlerContext, state: AppState, key: str) -> Optional[ops.Step]:
    scope = Scope.SETTINGS_NAV
    if ctx.keys.is_action(key, scope, Action.ACTIVATE):
        return replace(state, settings_active=True, settings_cursor=0), None
    delta = vertical_delta(ctx.keys, scope, key) or horizontal_delta(ctx.keys, scope, key)
    if delta:
        index = SETTINGS_SECTIONS.index(state.settings_section)
        section = SETTINGS_SECTIONS[(index + delta) % len(SETTINGS_SECTIONS)]
        return replace(state, settings_section=section, settings_cursor=0), None
    return None


_LIST_EDIT_MODES = {
    SettingsSection.CATEGORIES: (SettingsEditMode.ADD_CATEGORY, SettingsEditMode.EDIT_CATEGORY),
    SettingsSection.TAGS: (SettingsEditMode.ADD_TAG, SettingsEditMode.EDIT_TAG),
}

_DELETE_CONFIRMS = {
    SettingsSection.CATEGORIES: ConfirmAction.DELETE_CATEGORY,
    SettingsSection.TAGS: ConfirmAction.DELETE_TAG,
    SettingsSection.RULES: ConfirmAction.DELETE_RULE,
    SettingsSection.FILTERS: ConfirmAction.DELETE_FILTER,
}


def _settings_list(scope: Scope) -> TabHandler:
    """Handler shared by the category, tag, rule and filter lists."""

    def handle(ctx: HandlerContext, state: AppState, key: str) -> Optional[ops.Step]:
        keys = ctx.keys
        section = state.settings_section
        current = state.current_settings_item()

        if keys.is_action(key, scope, Action.BACK):
            return replace(state, settings_active=False), None
        delta = vertical_delta(keys, scope, key)
        if delta:
            cursor = move_bounded(state.settings_cursor, len(state.settings_items()), delta)
            return replace(state, settings_cursor=cursor), None

        if keys.is_action(key, scope, Action.ADD):
            if section in _LIST_EDIT_MODES:
                mode = _LIST_EDIT_MODES[section][0]
                return replace(state, settings_edit_mode=mode, settings_edit_field=TextField(), settings_edit_target=""), None
            if section is SettingsSection.RULES:
                return replace(state, rule_editor=FormState(fields=(TextField(), TextField()), has_toggle=True)), None
            return ops.open_filter_editor(state)

        if keys.is_action(key, scope, Action.DELETE):
            if current is None:
                return state.with_error("Nothing to delete."), None
            return arm(state, _DELETE_CONFIRMS[section], current, keys)

        if current is None:
            return None
        if keys.is_action(key, scope, Action.SELECT):
            if section in _LIST_EDIT_MODES:
                mode = _LIST_EDIT_MODES[section][1]
                edit = replace(
                    state,
                    settings_edit_mode=mode,
                    settings_edit_field=TextField.of(current),
                    settings_edit_target=current,
                )
                return edit, None
            if section is SettingsSection.RULES:
                form = FormState(fields=(TextField.of(current), TextField()), has_toggle=True, target=current)
                return replace(state, rule_editor=form), None
            return ops.open_filter_editor(state, current)

        if section is SettingsSection.RULES:
            return _rule_list_key(ctx, state, key, current)
        return None

    return handle


def _rule_list_key(ctx: HandlerContext, state: AppState, key: str, rule: str) -> Optional[ops.Step]:
    scope = Scope.SETTINGS_ACTIVE_RULES
    keys = ctx.keys
    if keys.is_action(key, scope, Action.RULE_TOGGLE_ENABLED):
        task = Task("toggle-rule", lambda: ctx.domain.save_entity("rule", {"pattern": rule, "toggle": "enabled"}))
        return state.with_status(f"Toggling rule {rule!r}..."), task
    move = -1 if keys.is_action(key, scope, Action.RULE_MOVE_UP) else 1 if keys.is_action(key, scope, Action.RULE_MOVE_DOWN) else 0
    if move:
        index = state.settings_cursor
        other = index + move
        if not 0 <= other < len(state.rules):
            return state, None
        rules = list(state.rules)
        rules[index], rules[other] = rules[other], rules[index]
        return replace(state, rules=tuple(rules), settings_cursor=other), None
    return None


def _settings_chart(ctx: HandlerContext, state: AppState, key: str) -> Optional[ops.Step]:
    scope = Scope.SETTINGS_ACTIVE_CHART
    if ctx.keys.is_action(key, scope, Action.BACK):
        return replace(state, settings_active=False), None
    if horizontal_delta(ctx.keys, scope, key) or ctx.keys.is_action(key, scope, Action.CONFIRM):
        monday = not state.week_starts_monday
        label = "Monday" if monday else "Sunday"
        return replace(state, week_starts_monday=monday).with_status(f"Spending tracker week boundary: {label}"), None
    return None


def _settings_db_import(ctx: HandlerContext, state: AppState, key: str) -> Optional[ops.Step]:
    scope = Scope.SETTINGS_ACTIVE_DB_IMPORT
    keys = ctx.keys
    if keys.is_action(key, scope, Action.BACK):
        return replace(state, settings_active=False), None
    if keys.is_action(key, scope, Action.ROWS_PER_PAGE):
        step = -ROWS_PER_PAGE_STEP if key == "-" else ROWS_PER_PAGE_STEP
        rows = min(max(state.rows_per_page + step, MIN_ROWS_PER_PAGE), MAX_ROWS_PER_PAGE)
        return replace(state, rows_per_page=rows).with_status(f"Rows per page: {rows}"), None
    if keys.is_action(key, scope, Action.COMMAND_DEFAULT):
        kind = CommandUIKind.COLON if state.command_default is CommandUIKind.PALETTE else CommandUIKind.PALETTE
        label = "Colon" if kind is CommandUIKind.COLON else "Palette"
        return replace(state, command_default=kind).with_status(f"Command default: {label}"), None
    if keys.is_action(key, scope, Action.RESET_KEYBINDINGS):
        config = ctx.keybinding_config
        run = config.reset_to_defaults if config is not None else build_default_registry
        return state.with_status("Resetting keybindings..."), Task(RESET_KEYBINDINGS_TASK, run)
    return None


def _settings_import_history(ctx: HandlerContext, state: AppState, key: str) -> Optional[ops.Step]:
    if ctx.keys.is_action(key, Scope.SETTINGS_ACTIVE_IMPORT_HISTORY, Action.BACK):
        return replace(state, settings_active=False), None
    return None


def _settings_edit(scope: Scope) -> TabHandler:
    """Add/edit a category or tag name."""

    def handle(ctx: HandlerContext, state: AppState, key: str) -> Optional[ops.Step]:
        is_tag = scope is Scope.SETTINGS_MODE_TAG
        noun = "Tag" if is_tag else "Category"
        items = state.tags if is_tag else state.categories
        target = state.settings_edit_target
        closed = replace(state, settings_edit_mode=None, settings_edit_field=TextField(), settings_edit_target="")

        if ctx.keys.is_action(key, scope, Action.CLOSE):
            return closed, None
        if ctx.keys.is_action(key, scope, Action.SAVE):
            name = state.settings_edit_field.value.strip()
            if not name:
                return state.with_error("Name cannot be empty."), None
            if name.lower() != target.lower() and name.lower() in {i.lower() for i in items}:
                return state.with_error(f"{noun} {name!r} already exists."), None
            if target:
                updated = tuple(name if item == target else item for item in items)
            else:
                updated = items + (name,)
            values = {"name": name, "previous": target}
            kind = noun.lower()
            task = Task(f"save-{kind}", lambda: ctx.domain.save_entity(kind, values))
            saved = replace(closed, **{"tags" if is_tag else "categories": updated})
            return saved.with_status(f"Saving {kind} {name!r}..."), task
        if vertical_delta(ctx.keys, scope, key):
            return state, None
        field, _ = state.settings_edit_field.handle_key(key, cursor_aware=cursor_aware(scope))
        return replace(state, settings_edit_field=field), None

    return handle


_TAB_HANDLERS: Dict[Scope, TabHandler] = {
    Scope.DASHBOARD: _dashboard,
    Scope.DASHBOARD_FOCUSED: _dashboard_focused,
    Scope.DASHBOARD_TIMEFRAME: _dashboard_timeframe,
    Scope.DASHBOARD_CUSTOM_INPUT: _dashboard_custom_input,
    Scope.BUDGET: _budget,
    Scope.TRANSACTIONS: _transactions,
    Scope.MANAGER: _manager,
    Scope.SETTINGS_NAV: _settings_nav,
    Scope.SETTINGS_MODE_CAT: _settings_edit(Scope.SETTINGS_MODE_CAT),
    Scope.SETTINGS_MODE_TAG: _settings_edit(Scope.SETTINGS_MODE_TAG),
    Scope.SETTINGS_ACTIVE_CATEGORIES: _settings_list(Scope.SETTINGS_ACTIVE_CATEGORIES),
    Scope.SETTINGS_ACTIVE_TAGS: _settings_list(Scope.SETTINGS_ACTIVE_TAGS),
    Scope.SETTINGS_ACTIVE_RULES: _settings_list(Scope.SETTINGS_ACTIVE_RULES),
    Scope.SETTINGS_ACTIVE_FILTERS: _settings_list(Scope.SETTINGS_ACTIVE_FILTERS),
    Scope.SETTINGS_ACTIVE_CHART: _settings_chart,
    Scope.SETTINGS_ACTIVE_DB_IMPORT: _settings_db_import,
    Scope.SETTINGS_ACTIVE_IMPORT_HISTORY: _settings_import_history,
}


def handle_tab_key(ctx: HandlerContext, state: AppState, key: str) -> ops.Step:
    """Route a key to the active tab's handler, then fall back to quit."""
    scope = tab_scope(state)
    handler = _TAB_HANDLERS.get(scope)
    if handler is not None:
        result = handler(ctx, state, key)
        if result is not None:
            return result
    binding = ctx.keys.lookup(key, scope)
    if binding is not None and binding.action is Action.QUIT:
        return state, Quit()
    return state, None
