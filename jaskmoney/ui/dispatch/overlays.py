"""
Overlay precedence table.

Several overlays can be open at once. The first entry whose guard matches
owns the keyboard, supplies the footer scope and, when flagged, the scope
used for command lookups. Adding an overlay means adding one row here.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from jaskmoney.ui.command_palette.palette_presenter import command_ui_scope
from jaskmoney.ui.keybindings.context import Scope

from . import handlers
from .effects import Effect
from .handlers import HandlerContext
from .state import AppState

logger = logging.getLogger(__name__)

Guard = Callable[[AppState], bool]
OverlayHandler = Callable[[HandlerContext, AppState, str], Tuple[AppState, Optional[Effect]]]


@dataclass(frozen=True)
class OverlayEntry:
    name: str
    guard: Guard
    scope: Callable[[AppState], Scope]
    handler: OverlayHandler
    for_footer: bool = True
    for_command_scope: bool = True


def _fixed(scope: Scope) -> Callable[[AppState], Scope]:
    return lambda state: scope


OVERLAY_ENTRIES: Tuple[OverlayEntry, ...] = (
    OverlayEntry("jump", lambda s: s.jump_active, _fixed(Scope.JUMP_OVERLAY), handlers.handle_jump),
    OverlayEntry(
        "command",
        lambda s: s.command_ui is not None,
        lambda s: command_ui_scope(s.command_ui.kind),
        handlers.handle_command_ui,
        for_command_scope=False,
    ),
    OverlayEntry("detail", lambda s: s.detail is not None, _fixed(Scope.DETAIL_MODAL), handlers.handle_detail),
    OverlayEntry(
        "importPreview", lambda s: s.import_preview_open, _fixed(Scope.IMPORT_PREVIEW), handlers.handle_import_preview
    ),
    OverlayEntry(
        "filePicker", lambda s: s.file_picker is not None, _fixed(Scope.FILE_PICKER), handlers.handle_file_picker
    ),
    OverlayEntry(
        "catPicker",
        lambda s: s.category_picker is not None,
        _fixed(Scope.CATEGORY_PICKER),
        handlers.handle_category_picker,
    ),
    OverlayEntry("tagPicker", lambda s: s.tag_picker is not None, _fixed(Scope.TAG_PICKER), handlers.handle_tag_picker),
    OverlayEntry(
        "quickOffset", lambda s: s.quick_offset is not None, _fixed(Scope.QUICK_OFFSET), handlers.handle_quick_offset
    ),
    OverlayEntry(
        "filterApplyPicker",
        lambda s: s.filter_apply_picker is not None,
        _fixed(Scope.FILTER_APPLY_PICKER),
        handlers.handle_filter_apply_picker,
    ),
    OverlayEntry(
        "managerActionPicker",
        lambda s: s.manager_action_picker is not None,
        _fixed(Scope.MANAGER_ACCOUNT_ACTION),
        handlers.handle_manager_action_picker,
    ),
    OverlayEntry("filterEdit", lambda s: s.filter_edit is not None, _fixed(Scope.FILTER_EDIT), handlers.handle_filter_edit),
    OverlayEntry(
        "managerModal",
        lambda s: s.manager_modal is not None,
        _fixed(Scope.MANAGER_MODAL),
        handlers.handle_manager_modal,
    ),
    OverlayEntry("dryRun", lambda s: s.dry_run_open, _fixed(Scope.DRY_RUN_MODAL), handlers.handle_dry_run),
    OverlayEntry("ruleEditor", lambda s: s.rule_editor is not None, _fixed(Scope.RULE_EDITOR), handlers.handle_rule_editor),
    OverlayEntry(
        "filterInput", lambda s: s.filter_input is not None, _fixed(Scope.FILTER_INPUT), handlers.handle_filter_input
    ),
)


def active_entry(state: AppState, for_footer: bool = False, for_command_scope: bool = False) -> Optional[OverlayEntry]:
    """First overlay whose guard matches, optionally restricted by flag."""
    for entry in OVERLAY_ENTRIES:
        if for_footer and not entry.for_footer:
            continue
        if for_command_scope and not entry.for_command_scope:
            continue
        if entry.guard(state):
            return entry
    return None


def active_scope(state: AppState, for_footer: bool = False) -> Optional[Scope]:
    entry = active_entry(state, for_footer=for_footer)
    return entry.scope(state) if entry is not None else None


def command_scope(state: AppState) -> Optional[Scope]:
    """Overlay scope used for command lookups, skipping the command UI itself."""
    entry = active_entry(state, for_command_scope=True)
    return entry.scope(state) if entry is not None else None


def dispatch_key(ctx: HandlerContext, state: AppState, key: str) -> Tuple[AppState, Optional[Effect], bool]:
    """
    Give ``key`` to the highest-precedence open overlay.

    Returns:
        (state, effect, handled); handled is False when no overlay is open
    """
    entry = active_entry(state)
    if entry is None:
        return state, None, False
    logger.debug(f"Overlay {entry.name} handles {key!r}")
    next_state, effect = entry.handler(ctx, state, key)
    return next_state, effect, True
