"""
Interaction contracts.

Each reachable scope declares the semantic intents it supports and which of
them appear in the footer. The footer, key lookup and the handler tests all
read these tables, so a scope's hints cannot drift from its bindings: a hint
whose action has no key in the scope is simply not rendered.

A second table declares how text-entry scopes treat printable keys.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from jaskmoney.ui.keybindings.actions import Action
from jaskmoney.ui.keybindings.context import Scope
from jaskmoney.ui.keybindings.registry import KeyRegistry, ScopeName, scope_name


class Intent(str, Enum):
    MOVE_PREV = "move_prev"
    MOVE_NEXT = "move_next"
    SELECT = "select"
    TOGGLE = "toggle"
    EDIT = "edit"
    CONFIRM = "confirm"
    SAVE = "save"
    CANCEL = "cancel"
    DELETE = "delete"
    APPLY = "apply"


class ContextKind(str, Enum):
    LIST = "list"
    FORM = "form"
    VIEWER = "viewer"
    WORKFLOW = "workflow"
    INLINE_EDIT = "inline_edit"


# Action a hint resolves to when it does not pin one
DEFAULT_INTENT_ACTIONS: Dict[Intent, Action] = {
    Intent.MOVE_PREV: Action.UP,
    Intent.MOVE_NEXT: Action.DOWN,
    Intent.SELECT: Action.CONFIRM,
    Intent.TOGGLE: Action.TOGGLE_SELECT,
    Intent.EDIT: Action.EDIT,
    Intent.CONFIRM: Action.CONFIRM,
    Intent.SAVE: Action.SAVE,
    Intent.CANCEL: Action.CANCEL,
    Intent.DELETE: Action.DELETE,
    Intent.APPLY: Action.APPLY_ALL,
}


@dataclass(frozen=True)
class Hint:
    intent: Intent
    action: Optional[Action] = None
    label: str = ""
    omit: bool = False


@dataclass(frozen=True)
class InteractionContract:
    scope: str
    kind: ContextKind
    hints: Tuple[Hint, ...] = ()


def show_hint(intent: Intent, action: Optional[Action], label: str) -> Hint:
    return Hint(intent=intent, action=action, label=label)


def hide_hint(intent: Intent, action: Optional[Action] = None) -> Hint:
    return Hint(intent=intent, action=action, omit=True)


def _contract(scope: Scope, kind: ContextKind, *hints: Hint) -> InteractionContract:
    return InteractionContract(scope=scope.value, kind=kind, hints=hints)


_LIST_NAV = (hide_hint(Intent.MOVE_PREV, Action.UP), hide_hint(Intent.MOVE_NEXT, Action.DOWN))
_TEXT_CARET = (hide_hint(Intent.EDIT, Action.LEFT), hide_hint(Intent.EDIT, Action.RIGHT))


def _settings_list(scope: Scope, *extra: Hint) -> InteractionContract:
    return _contract(
        scope,
        ContextKind.LIST,
        *_LIST_NAV,
        hide_hint(Intent.SELECT, Action.SELECT),
        hide_hint(Intent.CANCEL, Action.BACK),
        show_hint(Intent.EDIT, Action.ADD, "add"),
        show_hint(Intent.DELETE, Action.DELETE, "delete"),
        *extra,
    )


_CONTRACTS: Tuple[InteractionContract, ...] = (
    _contract(Scope.JUMP_OVERLAY, ContextKind.WORKFLOW, show_hint(Intent.CANCEL, Action.JUMP_CANCEL, "cancel")),
    _contract(
        Scope.COMMAND_PALETTE,
        ContextKind.LIST,
        *_LIST_NAV,
        show_hint(Intent.SELECT, Action.SELECT, "run"),
        show_hint(Intent.CANCEL, Action.CLOSE, "close"),
    ),
    _contract(
        Scope.COMMAND_MODE,
        ContextKind.LIST,
        *_LIST_NAV,
        show_hint(Intent.SELECT, Action.SELECT, "run"),
        show_hint(Intent.CANCEL, Action.CLOSE, "close"),
    ),
    _contract(
        Scope.DETAIL_MODAL,
        ContextKind.VIEWER,
        *_LIST_NAV,
        hide_hint(Intent.SELECT, Action.SELECT),
        show_hint(Intent.EDIT, Action.EDIT, "notes"),
        show_hint(Intent.CANCEL, Action.QUIT, "quit"),
    ),
    _contract(
        Scope.IMPORT_PREVIEW,
        ContextKind.WORKFLOW,
        *_LIST_NAV,
        hide_hint(Intent.CANCEL, Action.CLOSE),
        show_hint(Intent.APPLY, Action.IMPORT_ALL, "all"),
        show_hint(Intent.APPLY, Action.SKIP_DUPES, "skip"),
        show_hint(Intent.TOGGLE, Action.IMPORT_PREVIEW_TOGGLE, "preview"),
        show_hint(Intent.APPLY, Action.IMPORT_RAW_VIEW, "rules"),
    ),
    _contract(
        Scope.FILE_PICKER,
        ContextKind.LIST,
        *_LIST_NAV,
        hide_hint(Intent.SELECT, Action.SELECT),
        hide_hint(Intent.CANCEL, Action.CLOSE),
        show_hint(Intent.CANCEL, Action.QUIT, "quit"),
    ),
    _contract(
        Scope.CATEGORY_PICKER,
        ContextKind.LIST,
        *_LIST_NAV,
        hide_hint(Intent.SELECT, Action.SELECT),
        hide_hint(Intent.CANCEL, Action.CLOSE),
        hide_hint(Intent.APPLY, Action.SELECT),
    ),
    _contract(
        Scope.TAG_PICKER,
        ContextKind.LIST,
        *_LIST_NAV,
        hide_hint(Intent.TOGGLE, Action.TOGGLE_SELECT),
        hide_hint(Intent.SELECT, Action.SELECT),
        hide_hint(Intent.CANCEL, Action.CLOSE),
        hide_hint(Intent.APPLY, Action.SELECT),
    ),
    _contract(
        Scope.QUICK_OFFSET,
        ContextKind.INLINE_EDIT,
        *_TEXT_CARET,
        show_hint(Intent.APPLY, Action.CONFIRM, "apply"),
        show_hint(Intent.CANCEL, Action.CLOSE, "cancel"),
    ),
    _contract(
        Scope.FILTER_APPLY_PICKER,
        ContextKind.LIST,
        *_LIST_NAV,
        hide_hint(Intent.SELECT, Action.SELECT),
        hide_hint(Intent.CANCEL, Action.CLOSE),
        hide_hint(Intent.APPLY, Action.SELECT),
    ),
    _contract(
        Scope.MANAGER_ACCOUNT_ACTION,
        ContextKind.LIST,
        *_LIST_NAV,
        hide_hint(Intent.SELECT, Action.SELECT),
        hide_hint(Intent.CANCEL, Action.CLOSE),
    ),
    _contract(
        Scope.FILTER_EDIT,
        ContextKind.FORM,
        *_LIST_NAV,
        *_TEXT_CARET,
        hide_hint(Intent.SAVE, Action.SAVE),
        hide_hint(Intent.CANCEL, Action.CLOSE),
    ),
    _contract(
        Scope.MANAGER_MODAL,
        ContextKind.FORM,
        *_LIST_NAV,
        hide_hint(Intent.TOGGLE, Action.TOGGLE_SELECT),
        hide_hint(Intent.SAVE, Action.CONFIRM),
        hide_hint(Intent.CANCEL, Action.CLOSE),
    ),
    _contract(Scope.DRY_RUN_MODAL, ContextKind.VIEWER, *_LIST_NAV, hide_hint(Intent.CANCEL, Action.CLOSE)),
    _contract(
        Scope.RULE_EDITOR,
        ContextKind.FORM,
        *_LIST_NAV,
        hide_hint(Intent.TOGGLE, Action.TOGGLE_SELECT),
        hide_hint(Intent.CONFIRM, Action.SELECT),
        hide_hint(Intent.SAVE, Action.SELECT),
        hide_hint(Intent.CANCEL, Action.CLOSE),
    ),
    _contract(
        Scope.FILTER_INPUT,
        ContextKind.INLINE_EDIT,
        *_TEXT_CARET,
        hide_hint(Intent.CANCEL, Action.CLEAR_SEARCH),
        show_hint(Intent.SAVE, Action.FILTER_SAVE, "save"),
        show_hint(Intent.APPLY, Action.FILTER_LOAD, "load"),
    ),
    _contract(
        Scope.DASHBOARD,
        ContextKind.WORKFLOW,
        hide_hint(Intent.MOVE_NEXT, Action.DOWN),
        show_hint(Intent.EDIT, Action.DASHBOARD_TIMEFRAME, "timeframe"),
    ),
    _contract(
        Scope.DASHBOARD_TIMEFRAME,
        ContextKind.FORM,
        hide_hint(Intent.MOVE_PREV, Action.LEFT),
        hide_hint(Intent.MOVE_NEXT, Action.RIGHT),
        show_hint(Intent.EDIT, Action.DASHBOARD_CUSTOM_EDIT, "custom"),
        show_hint(Intent.CONFIRM, Action.SELECT, "apply"),
        show_hint(Intent.CANCEL, Action.CANCEL, "done"),
    ),
    _contract(
        Scope.DASHBOARD_CUSTOM_INPUT,
        ContextKind.INLINE_EDIT,
        hide_hint(Intent.APPLY, Action.CONFIRM),
        hide_hint(Intent.CANCEL, Action.CANCEL),
    ),
    _contract(
        Scope.DASHBOARD_FOCUSED,
        ContextKind.WORKFLOW,
        show_hint(Intent.MOVE_NEXT, Action.DASHBOARD_MODE_NEXT, "next"),
        show_hint(Intent.MOVE_PREV, Action.DASHBOARD_MODE_PREV, "prev"),
        show_hint(Intent.SELECT, Action.DASHBOARD_DRILL_DOWN, "drill"),
        hide_hint(Intent.CANCEL, Action.CANCEL),
    ),
    _contract(
        Scope.TRANSACTIONS,
        ContextKind.LIST,
        *_LIST_NAV,
        hide_hint(Intent.SELECT, Action.SELECT),
        hide_hint(Intent.CANCEL, Action.CLEAR_SEARCH),
        show_hint(Intent.EDIT, Action.SEARCH, "filter"),
        show_hint(Intent.SAVE, Action.FILTER_SAVE, "save"),
        show_hint(Intent.APPLY, Action.FILTER_LOAD, "load"),
        show_hint(Intent.EDIT, Action.SORT, "sort"),
        show_hint(Intent.TOGGLE, Action.SORT_DIRECTION, "reverse"),
        show_hint(Intent.APPLY, Action.QUICK_CATEGORY, "cat"),
        show_hint(Intent.APPLY, Action.QUICK_TAG, "tag"),
        show_hint(Intent.EDIT, Action.QUICK_OFFSET, "offset"),
        show_hint(Intent.CANCEL, Action.COMMAND_CLEAR_SELECTION, "clear"),
        show_hint(Intent.MOVE_PREV, Action.JUMP_TOP, "top"),
        show_hint(Intent.MOVE_NEXT, Action.JUMP_BOTTOM, "bottom"),
    ),
    _contract(
        Scope.MANAGER,
        ContextKind.WORKFLOW,
        show_hint(Intent.EDIT, Action.SEARCH, "filter"),
        show_hint(Intent.APPLY, Action.FILTER_LOAD, "load"),
        show_hint(Intent.EDIT, Action.ADD, "add"),
        show_hint(Intent.DELETE, Action.DELETE, "actions"),
        show_hint(Intent.CANCEL, Action.QUIT, "quit"),
    ),
    _contract(
        Scope.MANAGER_TRANSACTIONS,
        ContextKind.WORKFLOW,
        show_hint(Intent.APPLY, Action.FOCUS_ACCOUNTS, "accounts"),
    ),
    _contract(
        Scope.BUDGET,
        ContextKind.WORKFLOW,
        show_hint(Intent.MOVE_PREV, Action.BUDGET_PREV_MONTH, "prev month"),
        show_hint(Intent.MOVE_NEXT, Action.BUDGET_NEXT_MONTH, "next month"),
        show_hint(Intent.TOGGLE, Action.BUDGET_TOGGLE_VIEW, "view"),
        show_hint(Intent.EDIT, Action.BUDGET_EDIT, "edit"),
        show_hint(Intent.EDIT, Action.BUDGET_ADD_TARGET, "add"),
        show_hint(Intent.DELETE, Action.BUDGET_DELETE_TARGET, "delete"),
        show_hint(Intent.APPLY, Action.BUDGET_RESET_OVERRIDE, "reset"),
    ),
    _contract(
        Scope.SETTINGS_NAV,
        ContextKind.LIST,
        *_LIST_NAV,
        hide_hint(Intent.SELECT, Action.ACTIVATE),
        hide_hint(Intent.CANCEL, Action.QUIT),
        show_hint(Intent.APPLY, Action.IMPORT, "import"),
    ),
    _contract(
        Scope.SETTINGS_MODE_CAT,
        ContextKind.FORM,
        *_LIST_NAV,
        hide_hint(Intent.SAVE, Action.SAVE),
        hide_hint(Intent.CANCEL, Action.CLOSE),
    ),
    _contract(
        Scope.SETTINGS_MODE_TAG,
        ContextKind.FORM,
        *_LIST_NAV,
        hide_hint(Intent.SAVE, Action.SAVE),
        hide_hint(Intent.CANCEL, Action.CLOSE),
    ),
    _settings_list(Scope.SETTINGS_ACTIVE_CATEGORIES),
    _settings_list(Scope.SETTINGS_ACTIVE_TAGS),
    _settings_list(
        Scope.SETTINGS_ACTIVE_RULES,
        show_hint(Intent.MOVE_PREV, Action.RULE_MOVE_UP, "move up"),
        show_hint(Intent.MOVE_NEXT, Action.RULE_MOVE_DOWN, "move down"),
        show_hint(Intent.APPLY, Action.APPLY_ALL, "apply all"),
        show_hint(Intent.APPLY, Action.RULE_DRY_RUN, "dry run"),
    ),
    _settings_list(Scope.SETTINGS_ACTIVE_FILTERS),
    _contract(
        Scope.SETTINGS_ACTIVE_CHART,
        ContextKind.WORKFLOW,
        show_hint(Intent.MOVE_PREV, Action.LEFT, "week"),
        show_hint(Intent.MOVE_NEXT, Action.RIGHT, "week"),
        hide_hint(Intent.CONFIRM, Action.CONFIRM),
        hide_hint(Intent.CANCEL, Action.BACK),
    ),
    _contract(
        Scope.SETTINGS_ACTIVE_DB_IMPORT,
        ContextKind.WORKFLOW,
        *_LIST_NAV,
        hide_hint(Intent.CANCEL, Action.BACK),
        show_hint(Intent.EDIT, Action.ROWS_PER_PAGE, "rows"),
        show_hint(Intent.APPLY, Action.COMMAND_DEFAULT, "default"),
        show_hint(Intent.DELETE, Action.CLEAR_DB, "clear"),
        show_hint(Intent.APPLY, Action.IMPORT, "import"),
        show_hint(Intent.APPLY, Action.RESET_KEYBINDINGS, "reset"),
    ),
    _contract(
        Scope.SETTINGS_ACTIVE_IMPORT_HISTORY,
        ContextKind.LIST,
        *_LIST_NAV,
        hide_hint(Intent.CANCEL, Action.BACK),
        hide_hint(Intent.SELECT, Action.SELECT),
    ),
    _contract(
        Scope.GLOBAL,
        ContextKind.WORKFLOW,
        show_hint(Intent.APPLY, Action.COMMAND_GO_DASHBOARD, "dashboard"),
        show_hint(Intent.APPLY, Action.COMMAND_GO_BUDGET, "budget"),
        show_hint(Intent.APPLY, Action.COMMAND_GO_TRANSACTIONS, "manager"),
        show_hint(Intent.APPLY, Action.COMMAND_GO_SETTINGS, "settings"),
        show_hint(Intent.APPLY, Action.JUMP_MODE, "jump"),
        show_hint(Intent.APPLY, Action.COMMAND_PALETTE, "commands"),
        show_hint(Intent.APPLY, Action.COMMAND_MODE, "command"),
        show_hint(Intent.CANCEL, Action.QUIT, "quit"),
    ),
)

INTERACTION_CONTRACTS: Dict[str, InteractionContract] = {c.scope: c for c in _CONTRACTS}


def has_contract(scope: ScopeName) -> bool:
    return scope_name(scope) in INTERACTION_CONTRACTS


def contract_for_scope(scope: ScopeName) -> InteractionContract:
    """Registered contract for ``scope``, or an empty workflow contract."""
    name = scope_name(scope)
    contract = INTERACTION_CONTRACTS.get(name)
    if contract is None:
        return InteractionContract(scope=name, kind=ContextKind.WORKFLOW)
    return contract


def contract_has_intent(contract: InteractionContract, intent: Intent) -> bool:
    return any(hint.intent is intent for hint in contract.hints)


def settings_confirm_contract(scope: ScopeName, action: Action) -> InteractionContract:
    """Footer shown while a destructive settings action waits for its second press."""
    return InteractionContract(
        scope=scope_name(scope),
        kind=ContextKind.WORKFLOW,
        hints=(
            show_hint(Intent.CONFIRM, action, "confirm"),
            show_hint(Intent.CANCEL, Action.BACK, "cancel"),
        ),
    )


def action_for_hint(hint: Hint) -> Action:
    if hint.action is not None:
        return hint.action
    return DEFAULT_INTENT_ACTIONS[hint.intent]


def render_footer(contract: InteractionContract, keys: KeyRegistry) -> List[Tuple[str, str]]:
    """
    Resolve a contract into ``(key, label)`` pairs.

    Omitted and unlabelled hints are skipped. A hint is shown with the first
    key of the first binding for its action in the contract's own scope and
    is dropped when that scope has no such binding.
    """
    if not contract.scope.strip():
        return []
    out: List[Tuple[str, str]] = []
    for hint in contract.hints:
        if hint.omit or not hint.label.strip():
            continue
        key = keys.primary_key(contract.scope, action_for_hint(hint))
        if not key or not key.strip():
            continue
        out.append((key, hint.label))
    return out


# ---------------------------------------------------------------------------
# Text input behaviour
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TextBehavior:
    cursor_aware: bool  # Insert at the caret (True) or append (False)
    printable_first: bool  # Printable keys are text, never shortcuts
    vim_nav_suppressed: bool  # h/j/k/l are not navigation here


TEXT_CONTRACTS: Dict[str, TextBehavior] = {
    Scope.RULE_EDITOR.value: TextBehavior(True, True, True),
    Scope.FILTER_EDIT.value: TextBehavior(True, True, True),
    Scope.SETTINGS_MODE_CAT.value: TextBehavior(True, True, True),
    Scope.SETTINGS_MODE_TAG.value: TextBehavior(True, True, True),
    Scope.QUICK_OFFSET.value: TextBehavior(True, True, True),
    Scope.MANAGER_MODAL.value: TextBehavior(True, True, True),
    # j/k still scroll the detail view while notes are not being edited
    Scope.DETAIL_MODAL.value: TextBehavior(True, True, False),
    Scope.FILTER_INPUT.value: TextBehavior(True, True, False),
    Scope.DASHBOARD_CUSTOM_INPUT.value: TextBehavior(False, True, False),
}


def has_text_contract(scope: ScopeName) -> bool:
    return scope_name(scope) in TEXT_CONTRACTS


def text_behavior(scope: ScopeName) -> Optional[TextBehavior]:
    return TEXT_CONTRACTS.get(scope_name(scope))


def is_text_input_scope(scope: ScopeName) -> bool:
    """True when letter navigation keys must be treated as text in ``scope``."""
    behavior = text_behavior(scope)
    return behavior is not None and behavior.vim_nav_suppressed


def is_printable_first(scope: ScopeName) -> bool:
    behavior = text_behavior(scope)
    return behavior is not None and behavior.printable_first


_VIM_KEYS = frozenset({"h", "j", "k", "l"})


def _resolves_to(keys: KeyRegistry, scope: ScopeName, key: str, action: Action) -> bool:
    if is_text_input_scope(scope) and key in _VIM_KEYS:
        return False
    return keys.is_action(key, scope, action)


def vertical_delta(keys: KeyRegistry, scope: ScopeName, key: str) -> int:
    """-1 for up, +1 for down, 0 otherwise."""
    if _resolves_to(keys, scope, key, Action.UP):
        return -1
    if _resolves_to(keys, scope, key, Action.DOWN):
        return 1
    return 0


def horizontal_delta(keys: KeyRegistry, scope: ScopeName, key: str) -> int:
    """-1 for left, +1 for right, 0 otherwise."""
    if _resolves_to(keys, scope, key, Action.LEFT):
        return -1
    if _resolves_to(keys, scope, key, Action.RIGHT):
        return 1
    return 0
