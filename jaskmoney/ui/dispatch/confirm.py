"""
Two-press confirmation for destructive settings actions.

The machine is either idle (``state.confirm is None``) or ``Armed``. Arming
bumps ``confirm_seq`` and schedules ``ConfirmExpired(token)``. While armed,
the next key either matches the action's own binding and runs the effect,
or cancels. Whichever of that key and the timer arrives first returns the
machine to idle; a timer whose token no longer matches is ignored.
"""

import logging
import time
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional, Tuple

from jaskmoney.config.constants import CONFIRM_TIMEOUT_SECONDS
from jaskmoney.ui.keybindings.actions import Action
from jaskmoney.ui.keybindings.context import Scope
from jaskmoney.ui.keybindings.registry import KeyRegistry

from .effects import ConfirmExpired, Domain, Effect, Schedule, Task
from .state import AppState, Armed, ConfirmAction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfirmProfile:
    action: ConfirmAction
    scope: Scope  # Scope whose binding confirms, and whose footer is replaced
    key_action: Action
    noun: str  # Entity kind passed to Domain.delete_entity


CONFIRM_PROFILES: Dict[ConfirmAction, ConfirmProfile] = {
    ConfirmAction.DELETE_CATEGORY: ConfirmProfile(
        ConfirmAction.DELETE_CATEGORY, Scope.SETTINGS_ACTIVE_CATEGORIES, Action.DELETE, "category"
    ),
    ConfirmAction.DELETE_TAG: ConfirmProfile(
        ConfirmAction.DELETE_TAG, Scope.SETTINGS_ACTIVE_TAGS, Action.DELETE, "tag"
    ),
    ConfirmAction.DELETE_RULE: ConfirmProfile(
        ConfirmAction.DELETE_RULE, Scope.SETTINGS_ACTIVE_RULES, Action.DELETE, "rule"
    ),
    ConfirmAction.DELETE_FILTER: ConfirmProfile(
        ConfirmAction.DELETE_FILTER, Scope.SETTINGS_ACTIVE_FILTERS, Action.DELETE, "filter"
    ),
    ConfirmAction.CLEAR_DB: ConfirmProfile(
        ConfirmAction.CLEAR_DB, Scope.SETTINGS_ACTIVE_DB_IMPORT, Action.CLEAR_DB, "database"
    ),
}


def confirm_profile(state: AppState) -> Optional[ConfirmProfile]:
    """Profile of the armed action, if any."""
    if state.confirm is None:
        return None
    return CONFIRM_PROFILES.get(state.confirm.action)


def arm(
    state: AppState,
    action: ConfirmAction,
    target: str,
    keys: KeyRegistry,
    clock: Callable[[], float] = time.monotonic,
) -> Tuple[AppState, Effect]:
    """Arm ``action`` against ``target`` and schedule its expiry."""
    profile = CONFIRM_PROFILES[action]
    token = state.confirm_seq + 1
    armed = Armed(
        action=action,
        target=target,
        deadline=clock() + CONFIRM_TIMEOUT_SECONDS,
        token=token,
    )
    key = keys.primary_key(profile.scope, profile.key_action) or profile.key_action.value
    if action is ConfirmAction.CLEAR_DB:
        prompt = f"Press {key} again to clear all data"
    else:
        prompt = f"Press {key} again to delete {profile.noun} {target!r}"
    logger.debug(f"Armed {action.value} for {target!r} (token {token})")
    next_state = replace(state, confirm=armed, confirm_seq=token).with_status(prompt)
    return next_state, Schedule(CONFIRM_TIMEOUT_SECONDS, ConfirmExpired(token))


def disarm(state: AppState) -> AppState:
    return replace(state, confirm=None)


def handle_key(
    state: AppState, key: str, keys: KeyRegistry, domain: Domain
) -> Optional[Tuple[AppState, Optional[Effect]]]:
    """
    Resolve a key against an armed confirmation.

    Returns None when nothing is armed. Otherwise the key is consumed: it
    either runs the armed action or cancels it.
    """
    armed = state.confirm
    if armed is None:
        return None
    profile = CONFIRM_PROFILES[armed.action]
    if not keys.is_action(key, profile.scope, profile.key_action):
        return disarm(state).with_status("Cancelled."), None
    return _run(disarm(state), profile, armed.target, domain)


def handle_expired(state: AppState, message: ConfirmExpired) -> AppState:
    """Disarm on a current timeout; ignore a stale one."""
    if state.confirm is None or state.confirm.token != message.token:
        return state
    logger.debug(f"Confirmation {state.confirm.action.value} expired")
    return disarm(state).with_status("")


def _run(state: AppState, profile: ConfirmProfile, target: str, domain: Domain) -> Tuple[AppState, Optional[Effect]]:
    if profile.action is ConfirmAction.CLEAR_DB:
        return state.with_status("Clearing database..."), Task("clear-db", domain.clear_database)

    if profile.action is ConfirmAction.DELETE_FILTER:
        remaining = tuple(f for f in state.saved_filters if f.id != target)
        if len(remaining) == len(state.saved_filters):
            return state.with_error(f"Delete filter failed: no filter {target!r}."), None
        applied = "" if state.applied_filter_id == target else state.applied_filter_id
        next_state = replace(state, saved_filters=remaining, applied_filter_id=applied)
        return _clamp_cursor(next_state).with_status(f"Deleted filter {target!r}."), None

    field_name = {
        ConfirmAction.DELETE_CATEGORY: "categories",
        ConfirmAction.DELETE_TAG: "tags",
        ConfirmAction.DELETE_RULE: "rules",
    }[profile.action]
    items = tuple(item for item in getattr(state, field_name) if item != target)
    next_state = _clamp_cursor(replace(state, **{field_name: items}))
    task = Task(f"delete-{profile.noun}", lambda: domain.delete_entity(profile.noun, target))
    return next_state.with_status(f"Deleting {profile.noun} {target!r}..."), task


def _clamp_cursor(state: AppState) -> AppState:
    count = len(state.settings_items())
    cursor = min(state.settings_cursor, max(count - 1, 0))
    return replace(state, settings_cursor=cursor)
