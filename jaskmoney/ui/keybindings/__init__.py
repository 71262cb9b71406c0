"""
jaskmoney keybinding system.

Scoped registry with global fallback, the ordered default table and the
user's YAML overrides.

Usage:
    from jaskmoney.ui.keybindings import KeybindingConfig, Scope, build_default_registry

    # At app startup
    registry = build_default_registry()
    report = KeybindingConfig().load_into(registry)

    binding = registry.lookup("/", Scope.TRANSACTIONS)
"""

from .actions import Action, resolve_action
from .config import KeybindingConfig, LoadReport, get_config_path, parse_keybindings_document
from .context import Scope
from .defaults import DEFAULT_BINDINGS, build_default_registry
from .keys import is_printable_key, normalize_key_list, normalize_key_name
from .registry import (
    Binding,
    ConflictReport,
    ConflictSeverity,
    ConflictType,
    KeybindingOverride,
    KeyRegistry,
    make_binding,
    scope_name,
)

__all__ = [
    "Action",
    "Binding",
    "ConflictReport",
    "ConflictSeverity",
    "ConflictType",
    "DEFAULT_BINDINGS",
    "KeyRegistry",
    "KeybindingConfig",
    "KeybindingOverride",
    "LoadReport",
    "Scope",
    "build_default_registry",
    "get_config_path",
    "is_printable_key",
    "make_binding",
    "normalize_key_list",
    "normalize_key_name",
    "parse_keybindings_document",
    "resolve_action",
    "scope_name",
]
