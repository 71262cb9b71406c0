"""
Command registry for the command palette and key-bound commands.

A command is a named operation with an enabled predicate and an ``execute``
function ``state -> CommandOutcome``. The registry is an ordinary value:
build one with ``build_command_registry`` (or by hand in tests) and pass it
to the dispatcher.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, NamedTuple

from jaskmoney.config.constants import EXACT_MATCH_BONUS
from jaskmoney.exceptions import (
    CommandDisabledError,
    CommandRegistrationError,
    CommandScopeError,
    UnknownCommandError,
)

from .fuzzy import fuzzy_match_score

logger = logging.getLogger(__name__)

GLOBAL_SCOPE = "global"


class CommandOutcome(NamedTuple):
    """Result of running a command: the next state, an optional effect, an optional error."""

    state: Any
    effect: Any = None
    error: str | None = None


EnabledFn = Callable[[Any], tuple[bool, str]]
ExecuteFn = Callable[[Any], CommandOutcome]


def always_enabled(state: Any) -> tuple[bool, str]:
    return True, ""


@dataclass(frozen=True)
class Command:
    """A searchable, conditionally-enabled operation."""

    id: str  # Unique identifier, e.g., "nav:budget"
    label: str  # Display name: "Go to Budget"
    execute: ExecuteFn
    description: str = ""
    category: str = "General"  # For grouping in UI
    hidden: bool = False  # Excluded from search, still executable by id
    scopes: frozenset[str] = frozenset()  # Empty or containing "global" = everywhere
    enabled: EnabledFn = always_enabled

    def available_in(self, scope: str) -> bool:
        """Whether the command may be used from ``scope``."""
        if not self.scopes or GLOBAL_SCOPE in self.scopes:
            return True
        return scope in self.scopes

    def check_enabled(self, state: Any) -> tuple[bool, str]:
        return self.enabled(state)


@dataclass(frozen=True)
class CommandMatch:
    """One ranked search result."""

    command: Command
    score: int
    enabled: bool
    disabled_reason: str = ""


def command_match_score(command: Command, query: str) -> tuple[bool, int]:
    """Best fuzzy score across label, id and description."""
    query = query.strip()
    if not query:
        return True, 0
    best = -1
    for text in (command.label, command.id, command.description):
        matched, score = fuzzy_match_score(text, query)
        if not matched:
            continue
        if text.lower() == query.lower():
            score += EXACT_MATCH_BONUS
        best = max(best, score)
    if best < 0:
        return False, 0
    return True, best


class CommandRegistry:
    """Registry of commands, keyed by id and kept in registration order."""

    def __init__(self, commands: Iterable[Command] = ()):
        self._commands: dict[str, Command] = {}
        for command in commands:
            self.register(command)

    def __len__(self) -> int:
        return len(self._commands)

    def __contains__(self, command_id: str) -> bool:
        return command_id in self._commands

    def register(self, command: Command) -> None:
        """Register a command. Ids must be unique."""
        if command.id in self._commands:
            raise CommandRegistrationError("Command already registered", command_id=command.id)
        self._commands[command.id] = command
        logger.debug(f"Registered command: {command.id}")

    def replace_generated(self, prefix: str, commands: Iterable[Command]) -> int:
        """
        Swap out every command whose id starts with ``prefix``.

        Used for per-entity commands: rebuilding from the current entity list
        drops ids for entities that were renamed or removed.

        Returns:
            Number of commands registered under the prefix
        """
        fresh = list(commands)
        for command in fresh:
            if not command.id.startswith(prefix):
                raise CommandRegistrationError(
                    f"Generated command id must start with {prefix!r}", command_id=command.id
                )
        if len({c.id for c in fresh}) != len(fresh):
            raise CommandRegistrationError(f"Duplicate generated ids under {prefix!r}")

        kept = {cid: c for cid, c in self._commands.items() if not cid.startswith(prefix)}
        for command in fresh:
            if command.id in kept:
                raise CommandRegistrationError("Command already registered", command_id=command.id)
            kept[command.id] = command
        self._commands = kept
        logger.debug(f"Regenerated {len(fresh)} commands under {prefix}")
        return len(fresh)

    def get(self, command_id: str) -> Command | None:
        """Get a command by ID."""
        return self._commands.get(command_id)

    def get_all(self, scope: str | None = None) -> list[Command]:
        """Get all commands, optionally filtered by scope availability."""
        commands = list(self._commands.values())
        if scope is not None:
            commands = [c for c in commands if c.available_in(scope)]
        return sorted(commands, key=lambda c: (c.category, c.label.lower(), c.id))

    def search(self, query: str, scope: str, state: Any, last_used_id: str = "") -> list[CommandMatch]:
        """
        Rank visible commands against ``query``.

        Hidden and out-of-scope commands are excluded. Disabled commands stay
        in the results with their reason. Sort order: enabled first, then the
        most recently used command, then score, label and id.
        """
        matches: list[CommandMatch] = []
        for command in self._commands.values():
            if command.hidden or not command.available_in(scope):
                continue
            matched, score = command_match_score(command, query)
            if not matched:
                continue
            enabled, reason = command.check_enabled(state)
            matches.append(CommandMatch(command, score, enabled, "" if enabled else reason))

        def sort_key(match: CommandMatch) -> tuple:
            is_mru = bool(last_used_id) and match.command.id == last_used_id
            return (
                not match.enabled,
                not is_mru,
                -match.score,
                match.command.label.lower(),
                match.command.id,
            )

        matches.sort(key=sort_key)
        return matches

    def execute_by_id(self, command_id: str, scope: str, state: Any) -> CommandOutcome:
        """
        Run a command after checking it exists, fits the scope and is enabled.

        The command's outcome is returned unmodified, including any error.

        Raises:
            UnknownCommandError, CommandScopeError, CommandDisabledError
        """
        command = self._commands.get(command_id)
        if command is None:
            raise UnknownCommandError(f"Unknown command: {command_id}", command_id=command_id)
        if not command.available_in(scope):
            raise CommandScopeError(
                f"Command {command_id} is not available here", command_id=command_id, scope=scope
            )
        enabled, reason = command.check_enabled(state)
        if not enabled:
            raise CommandDisabledError(reason or f"{command.label} is unavailable.", command_id=command_id)
        logger.debug(f"Executing command {command_id} in {scope}")
        return command.execute(state)
