"""
Scoped keybinding registry.

Each scope owns an ordered list of bindings plus a key index. Lookups try
the requested scope first and fall back to ``global``.

Registration order matters: the first binding to claim a key in a scope
keeps it, and a later binding that shares *any* key with the scope is
skipped as a whole. ``register`` reports the skip through its return value
and a debug log line instead of silently dropping it.
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from jaskmoney.config.constants import SEARCH_TRIGGER_KEY
from jaskmoney.exceptions import KeybindingConfigError

from .actions import Action, resolve_action
from .context import Scope
from .keys import is_single_letter, normalize_key_list, normalize_key_name

logger = logging.getLogger(__name__)

ScopeName = Union[Scope, str]


def scope_name(scope: ScopeName) -> str:
    """Plain string name of a scope."""
    if isinstance(scope, Scope):
        return scope.value
    return str(scope).strip()


class ConflictType(Enum):
    """Types of keybinding conflicts."""

    SAME_SCOPE = "same_scope"  # One key bound to two actions in one scope
    SHADOWS_GLOBAL = "shadows_global"  # Scope binding hides a different global action


class ConflictSeverity(Enum):
    """Severity levels for conflicts."""

    CRITICAL = "critical"  # Ambiguous dispatch
    INFO = "info"  # Intentional override, just informational


@dataclass(frozen=True)
class Binding:
    """A key set mapped to an action (and optionally a command) in one scope."""

    action: Action
    keys: Tuple[str, ...]
    scope: str
    command_id: Optional[str] = None
    help: str = ""

    @property
    def primary_key(self) -> Optional[str]:
        return self.keys[0] if self.keys else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "scope": self.scope,
            "action": self.action.value,
            "keys": list(self.keys),
            "command": self.command_id,
            "help": self.help,
        }


@dataclass(frozen=True)
class KeybindingOverride:
    """User-supplied replacement key list for one (scope, action) pair."""

    scope: str
    action: str
    keys: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"scope": self.scope, "action": self.action, "keys": list(self.keys)}


@dataclass
class ConflictReport:
    """Describes a keybinding conflict."""

    key: str
    scope: str
    first: Binding
    second: Binding
    conflict_type: ConflictType
    severity: ConflictSeverity = ConflictSeverity.CRITICAL

    def to_string(self) -> str:
        """Format conflict for logging/display."""
        return (
            f"[{self.severity.value.upper()}] Key '{self.key}' in {self.scope}:\n"
            f"  {self.first.scope}.{self.first.action.value}\n"
            f"  {self.second.scope}.{self.second.action.value}\n"
            f"  Type: {self.conflict_type.value}"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "key": self.key,
            "scope": self.scope,
            "severity": self.severity.value,
            "type": self.conflict_type.value,
            "first": self.first.to_dict(),
            "second": self.second.to_dict(),
        }


def make_binding(
    scope: ScopeName,
    action: Action,
    keys: Sequence[str],
    command_id: Optional[str] = None,
    help: str = "",
) -> Binding:
    """Build a binding with a normalized key tuple."""
    return Binding(
        action=action,
        keys=tuple(normalize_key_list(keys)),
        scope=scope_name(scope),
        command_id=command_id or None,
        help=help,
    )


@dataclass
class KeyRegistry:
    """
    Scoped key -> binding index with global fallback.

    Usage:
        registry = KeyRegistry()
        registry.register(make_binding(Scope.GLOBAL, Action.QUIT, ["q", "ctrl+c"], help="quit"))
        registry.register(make_binding(Scope.TRANSACTIONS, Action.SEARCH, ["/"], "filter:open"))

        binding = registry.lookup("q", Scope.TRANSACTIONS)  # global fallback
        assert binding.action is Action.QUIT
    """

    # Bindings per scope, in registration order
    by_scope: Dict[str, List[Binding]] = field(default_factory=dict)

    # Normalized key -> binding, per scope
    index: Dict[str, Dict[str, Binding]] = field(default_factory=dict)

    def register(self, binding: Binding) -> bool:
        """
        Register a binding in its scope.

        Returns:
            True if registered, False if the scope already owns one of its keys
            (or the binding has no usable keys)
        """
        scope = scope_name(binding.scope)
        keys = normalize_key_list(binding.keys)
        if not scope or not keys:
            return False

        scope_index = self.index.setdefault(scope, {})
        self.by_scope.setdefault(scope, [])

        taken = [k for k in keys if k in scope_index]
        if taken:
            owner = scope_index[taken[0]]
            logger.debug(
                f"Skipped {binding.action.value} in {scope}: key '{taken[0]}' "
                f"already bound to {owner.action.value}"
            )
            return False

        stored = replace(binding, scope=scope, keys=tuple(keys))
        self.by_scope[scope].append(stored)
        for key in stored.keys:
            scope_index[key] = stored
        return True

    def lookup(self, key: str, scope: ScopeName) -> Optional[Binding]:
        """Resolve a key in a scope, falling back to the global scope."""
        if not key:
            return None
        name = normalize_key_name(key)
        scope = scope_name(scope)
        binding = self._lookup_in_scope(name, scope)
        if binding is not None:
            return binding
        if scope != Scope.GLOBAL.value:
            return self._lookup_in_scope(name, Scope.GLOBAL.value)
        return None

    def _lookup_in_scope(self, key: str, scope: str) -> Optional[Binding]:
        scope_index = self.index.get(scope)
        if not scope_index:
            return None
        binding = scope_index.get(key)
        if binding is not None:
            return binding
        # Terminals disagree on shift/caps-lock for single letters
        if is_single_letter(key):
            return scope_index.get(key.swapcase())
        return None

    def is_action(self, key: str, scope: ScopeName, action: Action) -> bool:
        """True when the key resolves to the given action in the scope."""
        binding = self.lookup(key, scope)
        return binding is not None and binding.action is action

    def bindings_for_scope(self, scope: ScopeName) -> List[Binding]:
        return list(self.by_scope.get(scope_name(scope), []))

    def scopes(self) -> List[str]:
        return sorted(self.by_scope)

    def has_scope(self, scope: ScopeName) -> bool:
        return bool(self.by_scope.get(scope_name(scope)))

    def primary_key(self, scope: ScopeName, action: Action, fallback: Optional[str] = None) -> Optional[str]:
        """First key of the first binding for the action, in this scope only."""
        for binding in self.by_scope.get(scope_name(scope), []):
            if binding.action is action and binding.keys:
                return binding.keys[0]
        return fallback

    def help_bindings(self, scope: ScopeName) -> List[Tuple[str, str]]:
        """(key, help) pairs for bindings that carry help text."""
        return [
            (binding.keys[0], binding.help)
            for binding in self.by_scope.get(scope_name(scope), [])
            if binding.keys and binding.help.strip()
        ]

    def copy(self) -> "KeyRegistry":
        """Independent copy; bindings are immutable so only containers are copied."""
        return KeyRegistry(
            by_scope={scope: list(items) for scope, items in self.by_scope.items()},
            index={scope: dict(items) for scope, items in self.index.items()},
        )

    def apply_keybinding_config(self, overrides: Iterable[KeybindingOverride]) -> int:
        """
        Replace key lists for existing (scope, action) pairs.

        Validation runs against a working copy; the live table is swapped only
        after every override is accepted and no scope ends up with one key bound
        to two actions.

        Returns:
            Number of overrides applied

        Raises:
            KeybindingConfigError: on the first invalid or conflicting override
        """
        working = {scope: list(items) for scope, items in self.by_scope.items()}
        seen_pairs = set()
        applied = 0

        for override in overrides:
            scope = scope_name(override.scope)
            if not scope:
                raise KeybindingConfigError("Keybinding override: scope is required")
            raw_action = str(override.action).strip()
            if not raw_action:
                raise KeybindingConfigError("Keybinding override: action is required", scope=scope)
            keys = normalize_key_list(override.keys)
            if not keys:
                raise KeybindingConfigError(
                    "Keybinding override: keys are required", scope=scope, action=raw_action
                )

            bindings = working.get(scope)
            if not bindings:
                raise KeybindingConfigError(
                    "Keybinding override: unknown scope", scope=scope, action=raw_action
                )

            action = resolve_action(raw_action)
            position = None
            if action is not None:
                for i, binding in enumerate(bindings):
                    if binding.action is action:
                        position = i
                        break
            if position is None:
                raise KeybindingConfigError(
                    "Keybinding override: unknown action in scope", scope=scope, action=raw_action
                )

            if (scope, action) in seen_pairs:
                raise KeybindingConfigError(
                    "Keybinding override: duplicated override entry", scope=scope, action=action.value
                )
            seen_pairs.add((scope, action))

            if action is Action.SEARCH and SEARCH_TRIGGER_KEY not in keys:
                keys = [SEARCH_TRIGGER_KEY] + keys

            bindings[position] = replace(bindings[position], keys=tuple(keys))
            applied += 1

        index = _build_index(working)
        self.by_scope = working
        self.index = index
        logger.info(f"Applied {applied} keybinding overrides")
        return applied

    def export(self) -> List[KeybindingOverride]:
        """Current key lists as overrides, sorted by (scope, action)."""
        out = [
            KeybindingOverride(scope=scope, action=binding.action.value, keys=binding.keys)
            for scope, bindings in self.by_scope.items()
            for binding in bindings
        ]
        out.sort(key=lambda o: (o.scope, o.action))
        return out

    def detect_conflicts(self) -> List[ConflictReport]:
        """
        Report keys that mean different things depending on where you stand.

        Same-scope duplicates cannot survive registration or an applied
        override, so in practice this lists scope bindings that shadow a
        different global action.
        """
        conflicts: List[ConflictReport] = []
        global_index = self.index.get(Scope.GLOBAL.value, {})

        for scope in sorted(self.by_scope):
            seen: Dict[str, Binding] = {}
            for binding in self.by_scope[scope]:
                for key in binding.keys:
                    previous = seen.get(key)
                    if previous is not None and previous.action is not binding.action:
                        conflicts.append(
                            ConflictReport(
                                key=key,
                                scope=scope,
                                first=previous,
                                second=binding,
                                conflict_type=ConflictType.SAME_SCOPE,
                            )
                        )
                    seen.setdefault(key, binding)

                    if scope == Scope.GLOBAL.value:
                        continue
                    shadowed = global_index.get(key)
                    if shadowed is not None and shadowed.action is not binding.action:
                        conflicts.append(
                            ConflictReport(
                                key=key,
                                scope=scope,
                                first=shadowed,
                                second=binding,
                                conflict_type=ConflictType.SHADOWS_GLOBAL,
                                severity=ConflictSeverity.INFO,
                            )
                        )

        severity_order = {ConflictSeverity.CRITICAL: 0, ConflictSeverity.INFO: 1}
        conflicts.sort(key=lambda c: severity_order[c.severity])
        return conflicts

    def summary(self) -> Dict[str, Any]:
        """Get a summary of registry state."""
        total = sum(len(items) for items in self.by_scope.values())
        keys = sum(len(items) for items in self.index.values())
        return {
            "total_bindings": total,
            "scopes": len(self.by_scope),
            "bound_keys": keys,
            "command_bindings": sum(
                1 for items in self.by_scope.values() for b in items if b.command_id
            ),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert registry to dictionary for serialization."""
        return {
            "summary": self.summary(),
            "bindings": {
                scope: [b.to_dict() for b in self.by_scope[scope]] for scope in sorted(self.by_scope)
            },
            "conflicts": [c.to_dict() for c in self.detect_conflicts()],
        }


def _build_index(by_scope: Dict[str, List[Binding]]) -> Dict[str, Dict[str, Binding]]:
    """Rebuild key indexes, refusing any scope where a key maps to two actions."""
    index: Dict[str, Dict[str, Binding]] = {}
    for scope, bindings in by_scope.items():
        scope_index: Dict[str, Binding] = {}
        for binding in bindings:
            for key in binding.keys:
                previous = scope_index.get(key)
                if previous is not None:
                    if previous.action is not binding.action:
                        raise KeybindingConfigError(
                            f"Keybinding conflict: key '{key}' used by both "
                            f"'{previous.action.value}' and '{binding.action.value}'",
                            scope=scope,
                            key=key,
                        )
                    continue
                scope_index[key] = binding
        index[scope] = scope_index
    return index
