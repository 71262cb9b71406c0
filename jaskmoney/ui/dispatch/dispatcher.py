"""
Single entry point for keys and asynchronous messages.

A key is offered, in order, to: the open overlay with the highest
precedence, an armed confirmation, the command bound in the current context
scope, and finally the active tab. Messages (task results, confirmation
timeouts) arrive through ``handle_message``. Both return a new state plus
the effects the host must carry out.
"""

import logging
from typing import Iterable, List, NamedTuple, Optional, Tuple

from jaskmoney.config.constants import FILTER_COMMAND_PREFIX, RELOAD_KEYBINDINGS_TASK
from jaskmoney.ui.command_palette.default_commands import build_command_registry, saved_filter_commands
from jaskmoney.ui.command_palette.palette_commands import CommandRegistry
from jaskmoney.ui.keybindings.config import KeybindingConfig, LoadReport
from jaskmoney.ui.keybindings.context import Scope
from jaskmoney.ui.keybindings.defaults import build_default_registry
from jaskmoney.ui.keybindings.keys import is_printable_key, normalize_key_name
from jaskmoney.ui.keybindings.registry import KeyRegistry

from . import confirm, overlays
from .contracts import contract_for_scope, is_printable_first, render_footer, settings_confirm_contract
from .effects import ConfirmExpired, Domain, Effect, LoggingDomain, Message, TaskResult
from .handlers import HandlerContext, run_command
from .scope import tab_scope
from .state import AppState, SavedFilter
from .tabs import RESET_KEYBINDINGS_TASK, handle_tab_key

logger = logging.getLogger(__name__)


class DispatchResult(NamedTuple):
    state: AppState
    effects: Tuple[Effect, ...] = ()


class Dispatcher:
    """
    Routes keys and messages to handlers.

    Usage:
        dispatcher = Dispatcher.create(domain)
        result = dispatcher.handle_key(state, "ctrl+k")
        state = result.state
        for effect in result.effects:
            ...  # host runs timers and tasks
    """

    def __init__(
        self,
        keys: KeyRegistry,
        commands: Optional[CommandRegistry] = None,
        domain: Optional[Domain] = None,
        keybinding_config: Optional[KeybindingConfig] = None,
        saved_filters: Iterable[SavedFilter] = (),
    ):
        self.keys = keys
        self.domain = domain if domain is not None else LoggingDomain()
        self.keybinding_config = keybinding_config
        self._saved_filters: Tuple[SavedFilter, ...] = tuple(saved_filters)
        self.commands = commands or build_command_registry(self.domain, keys, self._saved_filters)

    @classmethod
    def create(
        cls,
        domain: Optional[Domain] = None,
        keybinding_config: Optional[KeybindingConfig] = None,
        saved_filters: Iterable[SavedFilter] = (),
    ) -> "Dispatcher":
        """Dispatcher with default bindings plus the user's file when one is given."""
        keys = build_default_registry()
        if keybinding_config is not None:
            keybinding_config.load_into(keys)
        return cls(keys, domain=domain, keybinding_config=keybinding_config, saved_filters=saved_filters)

    @property
    def context(self) -> HandlerContext:
        return HandlerContext(self.keys, self.commands, self.domain, self.keybinding_config)

    def command_context_scope(self, state: AppState) -> Scope:
        """Scope used to resolve command bindings; the command UI is skipped."""
        return overlays.command_scope(state) or tab_scope(state)

    def handle_key(self, state: AppState, key: str) -> DispatchResult:
        key = normalize_key_name(key)
        next_state, effect = self._route_key(state, key)
        self._sync_saved_filters(next_state)
        return DispatchResult(next_state, (effect,) if effect is not None else ())

    def _route_key(self, state: AppState, key: str) -> Tuple[AppState, Optional[Effect]]:
        ctx = self.context

        next_state, effect, handled = overlays.dispatch_key(ctx, state, key)
        if handled:
            return next_state, effect

        armed = confirm.handle_key(state, key, self.keys, self.domain)
        if armed is not None:
            return armed

        scope = self.command_context_scope(state)
        if not (is_printable_first(scope) and is_printable_key(key)):
            binding = self.keys.lookup(key, scope)
            if binding is not None and binding.command_id:
                logger.debug(f"{key!r} in {scope.value} runs {binding.command_id}")
                return run_command(ctx, state, binding.command_id, scope)

        return handle_tab_key(ctx, state, key)

    def handle_message(self, state: AppState, message: Message) -> DispatchResult:
        """Fold an asynchronous result back into the state."""
        if isinstance(message, ConfirmExpired):
            return DispatchResult(confirm.handle_expired(state, message))
        if isinstance(message, TaskResult):
            return DispatchResult(self._task_finished(state, message))
        logger.warning(f"Ignoring unknown message {message!r}")
        return DispatchResult(state)

    def _task_finished(self, state: AppState, result: TaskResult) -> AppState:
        if result.error is not None:
            return state.with_error(f"{result.label} failed: {result.error}")
        if result.label == RESET_KEYBINDINGS_TASK:
            self.keys = build_default_registry()
            self._rebuild_commands()
            return state.with_status("Keybindings reset to defaults.")
        if result.label == RELOAD_KEYBINDINGS_TASK:
            return self._keybindings_reloaded(state)
        if isinstance(result.value, str) and result.value:
            return state.with_status(result.value)
        return state

    def footer(self, state: AppState) -> List[Tuple[str, str]]:
        """(key, label) hints for whatever currently owns the keyboard."""
        scope = overlays.active_scope(state, for_footer=True)
        if scope is None:
            profile = confirm.confirm_profile(state)
            if profile is not None:
                return render_footer(settings_confirm_contract(profile.scope, profile.key_action), self.keys)
            scope = tab_scope(state)
        return render_footer(contract_for_scope(scope), self.keys)

    def reload_keybindings(self) -> Optional[LoadReport]:
        """
        Re-read the keybinding file into a fresh default registry.

        A rejected file leaves the current bindings in place.
        """
        if self.keybinding_config is None:
            return None
        registry = build_default_registry()
        report = self.keybinding_config.load_into(registry)
        if report.rejected:
            return report
        self.keys = registry
        self._rebuild_commands()
        return report

    def _keybindings_reloaded(self, state: AppState) -> AppState:
        report = self.reload_keybindings()
        if report is None:
            return state.with_error("No keybindings file in use.")
        if report.rejected:
            return state.with_error(f"Keybindings file rejected: {report.error}")
        return state.with_status(f"Keybindings reloaded ({report.applied} overrides).")

    def _rebuild_commands(self) -> None:
        self.commands = build_command_registry(self.domain, self.keys, self._saved_filters)

    def _sync_saved_filters(self, state: AppState) -> None:
        if state.saved_filters == self._saved_filters:
            return
        self._saved_filters = state.saved_filters
        self.commands.replace_generated(FILTER_COMMAND_PREFIX, saved_filter_commands(state.saved_filters, self.domain))
        logger.debug(f"Regenerated {len(state.saved_filters)} saved filter commands")
