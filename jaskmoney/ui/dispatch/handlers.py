"""
Key handlers for overlays.

Every handler has the signature ``(ctx, state, key) -> (state, effect)`` and
owns the key outright: the overlay table only calls a handler while its
overlay is in the foreground, and nothing else sees the key afterwards.
Keys bound to a command in the overlay's own scope run that command.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional

from jaskmoney.exceptions import CommandError
from jaskmoney.ui.command_palette import palette_presenter
from jaskmoney.ui.command_palette.palette_commands import CommandRegistry
from jaskmoney.ui.keybindings.actions import Action
from jaskmoney.ui.keybindings.config import KeybindingConfig
from jaskmoney.ui.keybindings.context import Scope
from jaskmoney.ui.keybindings.keys import is_printable_key, is_single_letter, key_text
from jaskmoney.ui.keybindings.registry import KeyRegistry, ScopeName, scope_name

from . import operations as ops
from .contracts import text_behavior, vertical_delta
from .effects import Domain, Task
from .state import JUMP_KEYS, AppState, PickerState
from .text import FormState, TextField, move_bounded

logger = logging.getLogger(__name__)


@dataclass
class HandlerContext:
    """Collaborators shared by every handler."""

    keys: KeyRegistry
    commands: CommandRegistry
    domain: Domain
    keybinding_config: Optional[KeybindingConfig] = None


def run_command(ctx: HandlerContext, state: AppState, command_id: str, scope: ScopeName) -> ops.Step:
    """Execute a command by id; registry and outcome errors become an error status."""
    try:
        outcome = ctx.commands.execute_by_id(command_id, scope_name(scope), state)
    except CommandError as e:
        logger.debug(f"Command {command_id} refused: {e}")
        return state.with_error(e.message), None
    if outcome.error:
        return outcome.state.with_error(outcome.error), None
    return outcome.state, outcome.effect


def run_scoped_command(ctx: HandlerContext, state: AppState, key: str, scope: Scope) -> Optional[ops.Step]:
    """Run the command bound to ``key`` in ``scope`` itself (no global fallback)."""
    binding = ctx.keys.lookup(key, scope)
    if binding is None or binding.scope != scope.value or not binding.command_id:
        return None
    return run_command(ctx, state, binding.command_id, scope)


def cursor_aware(scope: Scope) -> bool:
    behavior = text_behavior(scope)
    return behavior is None or behavior.cursor_aware


def _picker_key(ctx: HandlerContext, scope: Scope, picker: PickerState, key: str) -> Optional[PickerState]:
    """Cursor movement and type-to-filter shared by the list pickers."""
    delta = vertical_delta(ctx.keys, scope, key)
    if delta:
        return replace(picker, cursor=move_bounded(picker.cursor, len(picker.visible()), delta))
    if key == "backspace":
        return replace(picker, query=picker.query[:-1], cursor=0)
    if is_printable_key(key) and key != "space":
        return replace(picker, query=picker.query + key_text(key), cursor=0)
    return None


# ---------------------------------------------------------------------------
# Jump and command entry
# ---------------------------------------------------------------------------


def handle_jump(ctx: HandlerContext, state: AppState, key: str) -> ops.Step:
    closed = replace(state, jump_active=False)
    if ctx.keys.is_action(key, Scope.JUMP_OVERLAY, Action.JUMP_CANCEL):
        return closed.with_status("Jump mode cancelled"), None
    if is_single_letter(key):
        tab = JUMP_KEYS.get(key.lower())
        if tab is None:
            return closed.with_status("No tab mapped to that key"), None
        return ops.switch_tab(closed, tab)
    return closed.with_status("Jump mode cancelled"), None


def handle_command_ui(ctx: HandlerContext, state: AppState, key: str) -> ops.Step:
    return palette_presenter.handle_key(ctx.commands, ctx.keys, state, key)


# ---------------------------------------------------------------------------
# Transaction overlays
# ---------------------------------------------------------------------------


def handle_detail(ctx: HandlerContext, state: AppState, key: str) -> ops.Step:
    scope = Scope.DETAIL_MODAL
    detail = state.detail
    keys = ctx.keys

    if detail.notes is not None:
        if keys.is_action(key, scope, Action.CLOSE):
            return replace(state, detail=replace(detail, notes=None)).with_status("Notes unchanged."), None
        if keys.is_action(key, scope, Action.SELECT):
            row, notes = detail.transaction, detail.notes.value
            task = Task("save-notes", lambda: ctx.domain.save_notes(row, notes))
            return replace(state, detail=replace(detail, notes=None)).with_status("Saving notes..."), task
        field, _ = detail.notes.handle_key(key, cursor_aware=cursor_aware(scope))
        return replace(state, detail=replace(detail, notes=field)), None

    if keys.is_action(key, scope, Action.EDIT):
        return replace(state, detail=replace(detail, notes=TextField())).with_status("Editing notes"), None
    if keys.is_action(key, scope, Action.CLOSE) or keys.is_action(key, scope, Action.QUIT):
        return replace(state, detail=None), None
    delta = vertical_delta(keys, scope, key)
    if delta:
        return replace(state, detail=replace(detail, scroll=max(detail.scroll + delta, 0))), None
    return state, None


def handle_category_picker(ctx: HandlerContext, state: AppState, key: str) -> ops.Step:
    scope = Scope.CATEGORY_PICKER
    picker = state.category_picker
    if ctx.keys.is_action(key, scope, Action.CLOSE):
        return replace(state, category_picker=None), None
    if ctx.keys.is_action(key, scope, Action.SELECT):
        if picker.current is None:
            return state.with_error("No matching category."), None
        return ops.assign_category(state, picker.current, ctx.domain)
    moved = _picker_key(ctx, scope, picker, key)
    if moved is not None:
        return replace(state, category_picker=moved), None
    return state, None


def handle_tag_picker(ctx: HandlerContext, state: AppState, key: str) -> ops.Step:
    scope = Scope.TAG_PICKER
    picker = state.tag_picker
    if ctx.keys.is_action(key, scope, Action.CLOSE):
        return replace(state, tag_picker=None), None
    if ctx.keys.is_action(key, scope, Action.TOGGLE_SELECT):
        if picker.current is None:
            return state, None
        selected = picker.selected ^ {picker.current}
        return replace(state, tag_picker=replace(picker, selected=frozenset(selected))), None
    if ctx.keys.is_action(key, scope, Action.SELECT):
        tags = tuple(sorted(picker.selected)) or ((picker.current,) if picker.current else ())
        if not tags:
            return state.with_error("No tags selected."), None
        return ops.assign_tags(state, tags, ctx.domain)
    moved = _picker_key(ctx, scope, picker, key)
    if moved is not None:
        return replace(state, tag_picker=moved), None
    return state, None


def handle_quick_offset(ctx: HandlerContext, state: AppState, key: str) -> ops.Step:
    scope = Scope.QUICK_OFFSET
    if ctx.keys.is_action(key, scope, Action.CLOSE):
        return replace(state, quick_offset=None), None
    if ctx.keys.is_action(key, scope, Action.CONFIRM):
        return ops.allocate_offset(state, state.quick_offset.value, ctx.domain)
    field, _ = state.quick_offset.handle_key(key, cursor_aware=cursor_aware(scope))
    return replace(state, quick_offset=field), None


def handle_filter_apply_picker(ctx: HandlerContext, state: AppState, key: str) -> ops.Step:
    scope = Scope.FILTER_APPLY_PICKER
    picker = state.filter_apply_picker
    if ctx.keys.is_action(key, scope, Action.CLOSE):
        return replace(state, filter_apply_picker=None), None
    if ctx.keys.is_action(key, scope, Action.SELECT):
        saved = state.saved_filter(picker.current or "")
        if saved is None:
            return state.with_error("No matching filter."), None
        return ops.apply_saved_filter(state, saved, ctx.domain)
    moved = _picker_key(ctx, scope, picker, key)
    if moved is not None:
        return replace(state, filter_apply_picker=moved), None
    return state, None


def handle_filter_input(ctx: HandlerContext, state: AppState, key: str) -> ops.Step:
    scope = Scope.FILTER_INPUT
    field = state.filter_input
    if ctx.keys.is_action(key, scope, Action.CLEAR_SEARCH):
        cleared = replace(state, filter_input=None, search_query="", applied_filter_id="")
        return cleared.with_status("Filter cleared."), None
    if ctx.keys.is_action(key, scope, Action.CONFIRM):
        query = field.value.strip()
        next_state = replace(state, filter_input=None, search_query=query, txn_cursor=0)
        if query != state.search_query:
            next_state = replace(next_state, applied_filter_id="")
        return next_state.with_status(f"Filter: {query}" if query else "Filter cleared."), None
    if not is_printable_key(key):
        ran = run_scoped_command(ctx, state, key, scope)
        if ran is not None:
            return ran
    field, _ = field.handle_key(key, cursor_aware=cursor_aware(scope))
    return replace(state, filter_input=field), None


# ---------------------------------------------------------------------------
# Import overlays
# ---------------------------------------------------------------------------


def handle_file_picker(ctx: HandlerContext, state: AppState, key: str) -> ops.Step:
    scope = Scope.FILE_PICKER
    picker = state.file_picker
    if ctx.keys.is_action(key, scope, Action.CLOSE) or ctx.keys.is_action(key, scope, Action.QUIT):
        return replace(state, file_picker=None).with_status("Import cancelled."), None
    if ctx.keys.is_action(key, scope, Action.SELECT):
        if picker.current is None:
            return state.with_error("No file selected."), None
        return ops.open_import_preview(state, picker.current)
    moved = _picker_key(ctx, scope, picker, key)
    if moved is not None:
        return replace(state, file_picker=moved), None
    return state, None


def handle_import_preview(ctx: HandlerContext, state: AppState, key: str) -> ops.Step:
    scope = Scope.IMPORT_PREVIEW
    delta = vertical_delta(ctx.keys, scope, key)
    if delta:
        return replace(state, import_preview_cursor=max(state.import_preview_cursor + delta, 0)), None
    ran = run_scoped_command(ctx, state, key, scope)
    if ran is not None:
        return ran
    return state, None


# ---------------------------------------------------------------------------
# Forms
# ---------------------------------------------------------------------------


def _form_key(ctx: HandlerContext, scope: Scope, form: FormState, key: str) -> FormState:
    """Focus cycling, the toggle slot and text entry for a modal form."""
    form, changed = form.handle_nav(key, vertical_delta(ctx.keys, scope, key))
    if changed:
        return form
    if form.on_toggle:
        if ctx.keys.is_action(key, scope, Action.TOGGLE_SELECT):
            return replace(form, toggle=not form.toggle)
        return form
    field = form.focused_field
    if field is None:
        return form
    field, consumed = field.handle_key(key, cursor_aware=cursor_aware(scope))
    return form.with_field(field) if consumed else form


def handle_filter_edit(ctx: HandlerContext, state: AppState, key: str) -> ops.Step:
    scope = Scope.FILTER_EDIT
    if ctx.keys.is_action(key, scope, Action.CLOSE):
        return replace(state, filter_edit=None), None
    if ctx.keys.is_action(key, scope, Action.SAVE):
        return ops.save_filter_form(state, state.filter_edit)
    return replace(state, filter_edit=_form_key(ctx, scope, state.filter_edit, key)), None


def handle_manager_modal(ctx: HandlerContext, state: AppState, key: str) -> ops.Step:
    scope = Scope.MANAGER_MODAL
    form = state.manager_modal
    if ctx.keys.is_action(key, scope, Action.CLOSE):
        return replace(state, manager_modal=None), None
    if ctx.keys.is_action(key, scope, Action.CONFIRM):
        name, kind = (value.strip() for value in form.values())
        if not name:
            return state.with_error("Account name is required."), None
        if form.target:
            accounts = tuple(name if a == form.target else a for a in state.accounts)
        elif name in state.accounts:
            return state.with_error(f"Account {name!r} already exists."), None
        else:
            accounts = state.accounts + (name,)
        values = {"name": name, "type": kind, "active": "yes" if form.toggle else "no", "previous": form.target}
        task = Task("save-account", lambda: ctx.domain.save_entity("account", values))
        next_state = replace(state, manager_modal=None, accounts=accounts)
        return next_state.with_status(f"Saving account {name!r}..."), task
    return replace(state, manager_modal=_form_key(ctx, scope, form, key)), None


def handle_manager_action_picker(ctx: HandlerContext, state: AppState, key: str) -> ops.Step:
    scope = Scope.MANAGER_ACCOUNT_ACTION
    picker = state.manager_action_picker
    if ctx.keys.is_action(key, scope, Action.CLOSE):
        return replace(state, manager_action_picker=None), None
    if ctx.keys.is_action(key, scope, Action.SELECT):
        closed = replace(state, manager_action_picker=None)
        if not state.accounts or picker.current is None:
            return closed.with_error("No account selected."), None
        account = state.accounts[min(state.account_cursor, len(state.accounts) - 1)]
        if picker.current == ops.ACCOUNT_ACTIONS[0]:
            filtered = replace(closed, account_filter=frozenset({account}))
            return filtered.with_status(f"Showing {account} only"), None
        action = picker.current
        task = Task("account-action", lambda: ctx.domain.account_action(action, account))
        return closed.with_status(f"{action}: {account}..."), task
    delta = vertical_delta(ctx.keys, scope, key)
    if delta:
        cursor = move_bounded(picker.cursor, len(picker.items), delta)
        return replace(state, manager_action_picker=replace(picker, cursor=cursor)), None
    return state, None


def handle_dry_run(ctx: HandlerContext, state: AppState, key: str) -> ops.Step:
    if ctx.keys.is_action(key, Scope.DRY_RUN_MODAL, Action.CLOSE):
        return replace(state, dry_run_open=False), None
    return state, None


def handle_rule_editor(ctx: HandlerContext, state: AppState, key: str) -> ops.Step:
    scope = Scope.RULE_EDITOR
    form = state.rule_editor
    if ctx.keys.is_action(key, scope, Action.CLOSE):
        return replace(state, rule_editor=None), None
    if ctx.keys.is_action(key, scope, Action.SELECT):
        pattern, category = (value.strip() for value in form.values())
        if not pattern:
            return state.with_error("Rule pattern is required."), None
        if form.target:
            rules = tuple(pattern if r == form.target else r for r in state.rules)
        else:
            rules = state.rules + (pattern,)
        values = {
            "pattern": pattern,
            "category": category,
            "enabled": "yes" if form.toggle else "no",
            "previous": form.target,
        }
        task = Task("save-rule", lambda: ctx.domain.save_entity("rule", values))
        return replace(state, rule_editor=None, rules=rules).with_status("Saving rule..."), task
    return replace(state, rule_editor=_form_key(ctx, scope, form, key)), None
