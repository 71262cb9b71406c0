"""
Textual host for the input router.

The app owns no behaviour of its own: it turns Textual key events into key
names, feeds them to the ``Dispatcher``, runs the returned effects and
redraws a plain text view of the resulting state.
"""

import asyncio
import logging
from functools import partial
from typing import List, Optional

from textual import events
from textual.app import App, ComposeResult
from textual.containers import Vertical
from textual.widgets import Static

from jaskmoney.ui.command_palette.palette_presenter import matches
from jaskmoney.ui.dispatch import overlays
from jaskmoney.ui.dispatch.dispatcher import DispatchResult, Dispatcher
from jaskmoney.ui.dispatch.effects import Effect, Message, Quit, Schedule, Task
from jaskmoney.ui.dispatch.scope import tab_scope
from jaskmoney.ui.dispatch.state import TAB_ORDER, AppState
from jaskmoney.ui.keybindings.keys import normalize_key_name

logger = logging.getLogger(__name__)

# Textual key names that differ from ours
_KEY_ALIASES = {
    "escape": "esc",
    "delete": "del",
    "back_tab": "shift+tab",
}

_MAX_VISIBLE_MATCHES = 8


def textual_key_name(event: events.Key) -> str:
    """Normalized key name for a Textual key event."""
    if event.key in _KEY_ALIASES:
        return _KEY_ALIASES[event.key]
    if event.key == "space":
        return "space"
    if event.is_printable and event.character and len(event.character) == 1:
        return normalize_key_name(event.character)
    return normalize_key_name(event.key)


def render_body(state: AppState, dispatcher: Dispatcher) -> str:
    """Plain text summary of what owns the keyboard."""
    lines: List[str] = []
    tabs = "  ".join(
        f"[{tab.value}]" if tab is state.active_tab else tab.value for tab in TAB_ORDER
    )
    lines.append(tabs)

    entry = overlays.active_entry(state)
    scope = entry.scope(state) if entry is not None else tab_scope(state)
    lines.append(f"scope: {scope.value}")

    if state.command_ui is not None:
        ui = state.command_ui
        prefix = ":" if ui.kind.value == "colon" else "> "
        lines.append(f"{prefix}{ui.query}")
        for i, match in enumerate(matches(dispatcher.commands, state)[:_MAX_VISIBLE_MATCHES]):
            marker = ">" if i == ui.cursor else " "
            suffix = "" if match.enabled else f"  ({match.disabled_reason})"
            lines.append(f"{marker} {match.command.label}{suffix}")
    elif state.filter_input is not None:
        lines.append(f"/{state.filter_input.render()}")
    return "\n".join(lines)


def render_footer_text(hints) -> str:
    return "  ".join(f"{key} {label}" for key, label in hints)


class RouterApp(App):
    """Minimal shell around the dispatcher."""

    ENABLE_COMMAND_PALETTE = False

    CSS = """
    #body {
        height: 1fr;
        padding: 0 1;
    }

    #status {
        height: 1;
        padding: 0 1;
    }

    #status.error {
        color: $error;
    }

    #footer {
        height: 1;
        background: $primary;
        color: $text;
        padding: 0 1;
    }
    """

    def __init__(self, dispatcher: Optional[Dispatcher] = None, state: Optional[AppState] = None):
        super().__init__()
        self.dispatcher = dispatcher or Dispatcher.create()
        self.state = state or AppState()

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static(id="body", markup=False)
            yield Static(id="status", markup=False)
            yield Static(id="footer", markup=False)

    def on_mount(self) -> None:
        self.refresh_view()

    def on_key(self, event: events.Key) -> None:
        key = textual_key_name(event)
        if not key:
            return
        event.stop()
        event.prevent_default()
        self.apply_result(self.dispatcher.handle_key(self.state, key))

    def apply_result(self, result: DispatchResult) -> None:
        self.state = result.state
        for effect in result.effects:
            self.run_effect(effect)
        self.refresh_view()

    def run_effect(self, effect: Effect) -> None:
        if isinstance(effect, Quit):
            self.exit()
        elif isinstance(effect, Schedule):
            self.set_timer(effect.delay, partial(self.deliver, effect.message))
        elif isinstance(effect, Task):
            self.run_worker(self._run_task(effect), group="tasks", exclusive=False)
        else:
            logger.warning(f"Unknown effect {effect!r}")

    async def _run_task(self, task: Task) -> None:
        result = await asyncio.to_thread(task.execute)
        self.deliver(result)

    def deliver(self, message: Message) -> None:
        """Feed an asynchronous message back through the dispatcher."""
        self.apply_result(self.dispatcher.handle_message(self.state, message))

    def refresh_view(self) -> None:
        self.query_one("#body", Static).update(render_body(self.state, self.dispatcher))
        status = self.query_one("#status", Static)
        status.update(self.state.status)
        status.set_class(self.state.status_error, "error")
        self.query_one("#footer", Static).update(render_footer_text(self.dispatcher.footer(self.state)))


def run_router_app(dispatcher: Optional[Dispatcher] = None, state: Optional[AppState] = None) -> None:
    RouterApp(dispatcher, state).run()
