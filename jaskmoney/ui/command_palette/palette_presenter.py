"""
Presenter for the command palette and the colon command line.

Both UIs share one state (``CommandUIState``) and differ only in their key
scope and how they are drawn. Matches are recomputed from the registry on
demand, so enabling or disabling a command is reflected immediately.
"""

import logging
from dataclasses import replace
from typing import List, Optional, Tuple

from jaskmoney.exceptions import CommandError
from jaskmoney.ui.dispatch.effects import Effect
from jaskmoney.ui.dispatch.scope import tab_scope
from jaskmoney.ui.dispatch.state import AppState, CommandUIKind, CommandUIState
from jaskmoney.ui.dispatch.text import move_bounded
from jaskmoney.ui.keybindings.actions import Action
from jaskmoney.ui.keybindings.context import Scope
from jaskmoney.ui.keybindings.keys import is_printable_key, key_text
from jaskmoney.ui.keybindings.registry import KeyRegistry

from .palette_commands import CommandMatch, CommandOutcome, CommandRegistry

logger = logging.getLogger(__name__)


def command_ui_scope(kind: CommandUIKind) -> Scope:
    return Scope.COMMAND_PALETTE if kind is CommandUIKind.PALETTE else Scope.COMMAND_MODE


def can_open_command_ui(state: AppState) -> bool:
    """False while any other modal, search, edit mode or confirmation owns input."""
    if state.command_ui is not None or state.detail is not None or state.import_preview_open:
        return False
    if state.file_picker is not None or state.category_picker is not None or state.tag_picker is not None:
        return False
    if state.quick_offset is not None or state.filter_apply_picker is not None:
        return False
    if state.manager_action_picker is not None or state.manager_modal is not None:
        return False
    if state.filter_edit is not None or state.rule_editor is not None or state.dry_run_open:
        return False
    if state.filter_input is not None or state.jump_active:
        return False
    if state.settings_edit_mode is not None or state.confirm is not None:
        return False
    if state.dash_timeframe_focus or state.dash_custom_input is not None:
        return False
    return True


def open_command_ui(state: AppState, kind: CommandUIKind) -> CommandOutcome:
    if not can_open_command_ui(state):
        return CommandOutcome(state, error="Close the current view first.")
    ui = CommandUIState(kind=kind, scope=tab_scope(state).value)
    return CommandOutcome(replace(state, command_ui=ui).with_status(""))


def close_command_ui(state: AppState) -> AppState:
    return replace(state, command_ui=None)


def matches(commands: CommandRegistry, state: AppState) -> List[CommandMatch]:
    """Ranked matches for the open command UI's query."""
    ui = state.command_ui
    if ui is None:
        return []
    return commands.search(ui.query, ui.scope, state, state.last_command_id)


def _first_executable(results: List[CommandMatch], cursor: int) -> Optional[CommandMatch]:
    if 0 <= cursor < len(results) and results[cursor].enabled:
        return results[cursor]
    for match in results:
        if match.enabled:
            return match
    return None


def execute_selected(commands: CommandRegistry, state: AppState) -> Tuple[AppState, Optional[Effect]]:
    """
    Run the highlighted command, or the first enabled match.

    On failure the UI stays open with an error status. On success the UI
    closes and the command becomes the most recently used.
    """
    ui = state.command_ui
    if ui is None:
        return state, None
    results = matches(commands, state)
    match = _first_executable(results, ui.cursor)
    if match is None:
        if not results:
            return state.with_error("No matching command."), None
        if results[0].disabled_reason.strip():
            return state.with_error(results[0].disabled_reason), None
        return state.with_error("No executable command in results."), None

    # Commands run against the state underneath the UI
    underneath = close_command_ui(state)
    try:
        outcome = commands.execute_by_id(match.command.id, ui.scope, underneath)
    except CommandError as e:
        return state.with_error(f"Command failed: {e.message}"), None
    if outcome.error:
        return state.with_error(f"Command failed: {outcome.error}"), None

    logger.debug(f"Palette ran {match.command.id}")
    next_state = replace(outcome.state, last_command_id=match.command.id)
    return next_state, outcome.effect


def handle_key(
    commands: CommandRegistry, keys: KeyRegistry, state: AppState, key: str
) -> Tuple[AppState, Optional[Effect]]:
    """Key handler for the open palette or colon line."""
    ui = state.command_ui
    if ui is None:
        return state, None
    scope = command_ui_scope(ui.kind)

    if keys.is_action(key, scope, Action.CLOSE):
        return close_command_ui(state), None
    if keys.is_action(key, scope, Action.SELECT):
        return execute_selected(commands, state)
    if key == "backspace":
        return _with_query(state, ui, ui.query[:-1]), None
    if keys.is_action(key, scope, Action.UP) or keys.is_action(key, scope, Action.DOWN):
        delta = -1 if keys.is_action(key, scope, Action.UP) else 1
        count = len(matches(commands, state))
        return replace(state, command_ui=replace(ui, cursor=move_bounded(ui.cursor, count, delta))), None
    if is_printable_key(key):
        return _with_query(state, ui, ui.query + key_text(key)), None
    return state, None


def _with_query(state: AppState, ui: CommandUIState, query: str) -> AppState:
    return replace(state, command_ui=replace(ui, query=query, cursor=0))
