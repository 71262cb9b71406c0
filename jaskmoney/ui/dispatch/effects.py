"""
Effects and messages exchanged between the dispatcher and its host.

Handlers never perform I/O. They return an effect describing what should
happen and the host runtime carries it out:

- ``Quit`` ends the application.
- ``Schedule(delay, message)`` posts ``message`` back after ``delay`` seconds.
- ``Task(label, run)`` calls ``run()`` off the event loop and posts a
  ``TaskResult`` with its return value or error.

Domain work (rules, imports, deletions) is reached through the ``Domain``
protocol and only ever runs inside a ``Task``.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Protocol, Sequence, Union, runtime_checkable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Quit:
    """Exit the application."""


@dataclass(frozen=True)
class ConfirmExpired:
    """An armed confirmation timed out. Ignored when ``token`` is stale."""

    token: int


@dataclass(frozen=True)
class TaskResult:
    """Outcome of a ``Task``; ``error`` is set when ``run`` raised."""

    label: str
    value: Any = None
    error: Optional[str] = None


Message = Union[ConfirmExpired, TaskResult]


@dataclass(frozen=True)
class Schedule:
    """Deliver ``message`` to the dispatcher after ``delay`` seconds."""

    delay: float
    message: Message


@dataclass(frozen=True)
class Task:
    """Blocking work to run off the event loop."""

    label: str
    run: Callable[[], Any]

    def execute(self) -> TaskResult:
        """Run the task, capturing any failure as a result."""
        try:
            return TaskResult(self.label, value=self.run())
        except Exception as e:
            logger.error(f"Task {self.label} failed: {e}", exc_info=True)
            return TaskResult(self.label, error=str(e))


Effect = Union[Quit, Schedule, Task]


@runtime_checkable
class Domain(Protocol):
    """
    Business operations the router can trigger.

    Every method returns a short human-readable summary that becomes the
    status line once the task completes.
    """

    def apply_category_rules(self) -> str: ...

    def apply_tag_rules(self) -> str: ...

    def begin_import(self, path: str, skip_duplicates: bool) -> str: ...

    def delete_entity(self, kind: str, target: str) -> str: ...

    def clear_database(self) -> str: ...

    def apply_saved_filter(self, filter_id: str, expression: str) -> str: ...

    def assign_category(self, transactions: Sequence[int], category: str) -> str: ...

    def assign_tags(self, transactions: Sequence[int], tags: Sequence[str]) -> str: ...

    def allocate_offset(self, transaction: int, amount: str) -> str: ...

    def save_notes(self, transaction: int, notes: str) -> str: ...

    def budget_action(self, action: str, month_offset: int, row: int) -> str: ...

    def save_entity(self, kind: str, values: Dict[str, str]) -> str: ...

    def account_action(self, action: str, account: str) -> str: ...


class LoggingDomain:
    """
    Domain stand-in that records each call and reports what it would do.

    Used by the standalone TUI and by tests that only care about routing.
    """

    def __init__(self) -> None:
        self.calls: list = []

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name,) + args)
        logger.info(f"domain.{name}{args}")

    def apply_category_rules(self) -> str:
        self._record("apply_category_rules")
        return "Category rules applied."

    def apply_tag_rules(self) -> str:
        self._record("apply_tag_rules")
        return "Tag rules applied."

    def begin_import(self, path: str, skip_duplicates: bool) -> str:
        self._record("begin_import", path, skip_duplicates)
        mode = "skipping duplicates" if skip_duplicates else "including duplicates"
        return f"Imported {path} ({mode})."

    def delete_entity(self, kind: str, target: str) -> str:
        self._record("delete_entity", kind, target)
        return f"Deleted {kind} {target!r}."

    def clear_database(self) -> str:
        self._record("clear_database")
        return "Database cleared."

    def apply_saved_filter(self, filter_id: str, expression: str) -> str:
        self._record("apply_saved_filter", filter_id, expression)
        return f"Applied filter {filter_id}."

    def assign_category(self, transactions: Sequence[int], category: str) -> str:
        self._record("assign_category", tuple(transactions), category)
        return f"Set category {category!r} on {len(transactions)} transaction(s)."

    def assign_tags(self, transactions: Sequence[int], tags: Sequence[str]) -> str:
        self._record("assign_tags", tuple(transactions), tuple(tags))
        return f"Tagged {len(transactions)} transaction(s)."

    def allocate_offset(self, transaction: int, amount: str) -> str:
        self._record("allocate_offset", transaction, amount)
        return f"Allocated {amount} against transaction {transaction}."

    def save_notes(self, transaction: int, notes: str) -> str:
        self._record("save_notes", transaction, notes)
        return "Notes saved."

    def budget_action(self, action: str, month_offset: int, row: int) -> str:
        self._record("budget_action", action, month_offset, row)
        return f"Budget {action.replace('-', ' ')} done."

    def save_entity(self, kind: str, values: Dict[str, str]) -> str:
        self._record("save_entity", kind, dict(values))
        return f"Saved {kind}."

    def account_action(self, action: str, account: str) -> str:
        self._record("account_action", action, account)
        return f"Account {account}: {action}."
