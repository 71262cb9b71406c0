"""
Input dispatch for the jaskmoney TUI.

Modules, leaves first:

- ``text``: immutable text field and form focus helpers
- ``state``: the ``AppState`` snapshot every handler works on
- ``effects``: effects, messages and the ``Domain`` protocol
- ``contracts``: footer hints and text-input behaviour per scope
- ``scope``: tab and sub-state scope resolution
- ``confirm``: the destructive-action confirmation state machine
- ``overlays``: the overlay precedence table
- ``dispatcher``: ``Dispatcher.handle_key`` / ``handle_message``
"""

from .effects import ConfirmExpired, Quit, Schedule, Task, TaskResult
from .state import AppState

__all__ = [
    "AppState",
    "ConfirmExpired",
    "Quit",
    "Schedule",
    "Task",
    "TaskResult",
]
