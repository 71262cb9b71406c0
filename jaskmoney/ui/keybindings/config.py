"""
Keybinding configuration file.

Loads user keybinding customizations from ~/.config/jaskmoney/keybindings.yaml.

The current format (version 2) maps scope -> action -> key list:

    version: 2
    bindings:
      transactions:
        search: ["/", "ctrl+f"]

The legacy format is a flat list with one key per entry:

    overrides:
      - key: "ctrl+f"
        action: "search"
        context: "transactions"

Legacy files are migrated and rewritten in the current format. A file that
fails validation is moved aside to ``keybindings.yaml.rejected`` and a fresh
template is generated from the defaults, so a bad edit never half-applies.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from jaskmoney.config.constants import (
    JASKMONEY_CONFIG_DIR,
    KEYBINDINGS_FILENAME,
    KEYBINDINGS_FORMAT_VERSION,
    LEGACY_KEYBINDINGS_FORMAT_VERSION,
    REJECTED_SUFFIX,
)
from jaskmoney.exceptions import KeybindingConfigError

from .actions import Action, resolve_action
from .defaults import build_default_registry
from .keys import normalize_key_list
from .registry import KeybindingOverride, KeyRegistry

logger = logging.getLogger(__name__)

# Default config path
DEFAULT_CONFIG_PATH = JASKMONEY_CONFIG_DIR / KEYBINDINGS_FILENAME

TEMPLATE_HEADER = """# jaskmoney keybinding configuration
#
# Each scope lists its actions and the keys that trigger them. The first key
# of each list is the one shown in the footer.
#
#   version: 2
#   bindings:
#     transactions:
#       search: ["/", "ctrl+f"]
#
# The search action always keeps "/". Run `jaskmoney keybindings scopes` for
# the list of scopes and `jaskmoney keybindings check` to validate edits.
# Delete this file (or run `jaskmoney keybindings reset`) to restore defaults.

"""

# Action names from older releases and what they mean now
LEGACY_ACTION_ALIASES: Dict[str, Action] = {
    "confirm_repeat": Action.CONFIRM,
    "cancel_any": Action.CANCEL,
    "select": Action.SELECT,
    "activate": Action.ACTIVATE,
    "next": Action.NEXT,
    "close": Action.CLOSE,
    "back": Action.BACK,
    "clear_search": Action.CLEAR_SEARCH,
    "navigate": Action.DOWN,
    "column": Action.RIGHT,
}

_SUGGESTION_HINTS = (
    ("confirm", Action.CONFIRM),
    ("cancel", Action.CANCEL),
    ("close", Action.CLOSE),
    ("move", Action.DOWN),
    ("sort", Action.SORT),
    ("filter", Action.SEARCH),
)


def get_config_path() -> Path:
    """Get the path to the keybindings config file."""
    return DEFAULT_CONFIG_PATH


def canonical_action(name: str, *, where: str = "keybindings") -> Tuple[Action, bool]:
    """
    Resolve an action name from a config file.

    Returns:
        The action and whether a legacy alias had to be translated

    Raises:
        KeybindingConfigError: for unknown names, with a suggestion when one fits
    """
    cleaned = str(name).strip().lower()
    legacy = LEGACY_ACTION_ALIASES.get(cleaned)
    if legacy is not None:
        return legacy, cleaned != legacy.value

    action = resolve_action(cleaned)
    if action is not None:
        return action, False

    for fragment, suggestion in _SUGGESTION_HINTS:
        if fragment in cleaned:
            raise KeybindingConfigError(
                f"{where}: unknown action {name!r} (did you mean {suggestion.value!r}?)",
                action=cleaned,
            )
    raise KeybindingConfigError(
        f"{where}: unknown action {name!r} (run `jaskmoney keybindings --list` for valid actions)",
        action=cleaned,
    )


def _parse_v2(bindings: Any) -> Tuple[List[KeybindingOverride], bool]:
    if bindings is None:
        return [], False
    if not isinstance(bindings, dict):
        raise KeybindingConfigError("keybindings: 'bindings' must be a mapping of scopes")

    overrides: List[KeybindingOverride] = []
    migrated = False
    for scope, actions in bindings.items():
        scope = str(scope).strip()
        if not isinstance(actions, dict):
            raise KeybindingConfigError(
                "keybindings: scope entry must map actions to key lists", scope=scope
            )
        for raw_action, raw_keys in actions.items():
            action, translated = canonical_action(raw_action, where=f"keybindings scope={scope!r}")
            migrated = migrated or translated
            if isinstance(raw_keys, str):
                raw_keys = [raw_keys]
            if not isinstance(raw_keys, list):
                raise KeybindingConfigError(
                    "keybindings: keys must be a list", scope=scope, action=action.value
                )
            keys = normalize_key_list(str(k) for k in raw_keys)
            if not keys:
                raise KeybindingConfigError(
                    "keybindings: keys are required", scope=scope, action=action.value
                )
            overrides.append(KeybindingOverride(scope=scope, action=action.value, keys=tuple(keys)))
    return overrides, migrated


def _parse_legacy(entries: Any) -> List[KeybindingOverride]:
    if entries is None:
        return []
    if not isinstance(entries, list):
        raise KeybindingConfigError("keybindings: 'overrides' must be a list")

    grouped: Dict[Tuple[str, str], List[str]] = {}
    for entry in entries:
        if not isinstance(entry, dict):
            raise KeybindingConfigError("keybindings: each legacy override must be a mapping")
        try:
            raw_key = entry["key"]
            raw_action = entry["action"]
        except KeyError as e:
            raise KeybindingConfigError(f"keybindings: legacy override missing field {e}") from e
        scope = str(entry.get("scope") or entry.get("context") or "global").strip()
        action, _ = canonical_action(raw_action, where=f"keybindings scope={scope!r}")
        grouped.setdefault((scope, action.value), []).append(str(raw_key))

    return [
        KeybindingOverride(scope=scope, action=action, keys=tuple(normalize_key_list(keys)))
        for (scope, action), keys in grouped.items()
    ]


def parse_keybindings_document(document: Any) -> Tuple[List[KeybindingOverride], bool]:
    """
    Turn a loaded YAML document into overrides.

    Returns:
        (overrides, migrated) where migrated means the file should be rewritten

    Raises:
        KeybindingConfigError: for malformed documents or unknown actions
    """
    if document is None:
        return [], False
    if not isinstance(document, dict):
        raise KeybindingConfigError("keybindings: top level must be a mapping")

    version = document.get("version")
    if version is None:
        version = (
            LEGACY_KEYBINDINGS_FORMAT_VERSION if "overrides" in document else KEYBINDINGS_FORMAT_VERSION
        )
    if version == KEYBINDINGS_FORMAT_VERSION:
        return _parse_v2(document.get("bindings"))
    if version == LEGACY_KEYBINDINGS_FORMAT_VERSION:
        return _parse_legacy(document.get("overrides")), True
    raise KeybindingConfigError(f"keybindings: unsupported version {version!r}")


def render_template(overrides: List[KeybindingOverride]) -> str:
    """Serialize overrides as a version 2 document with the explanatory header."""
    bindings: Dict[str, Dict[str, List[str]]] = {}
    for override in sorted(overrides, key=lambda o: (o.scope, o.action)):
        bindings.setdefault(override.scope, {})[override.action] = list(override.keys)
    body = yaml.safe_dump(
        {"version": KEYBINDINGS_FORMAT_VERSION, "bindings": bindings},
        sort_keys=False,
        default_flow_style=None,
        allow_unicode=True,
    )
    return TEMPLATE_HEADER + body


@dataclass
class LoadReport:
    """Outcome of loading the keybindings file."""

    path: Path
    applied: int = 0
    created: bool = False
    migrated: bool = False
    rejected: bool = False
    error: Optional[str] = None


class KeybindingConfig:
    """
    Reads, validates and (re)writes the keybindings file.

    Usage:
        registry = build_default_registry()
        report = KeybindingConfig().load_into(registry)
        if report.rejected:
            logger.warning(report.error)
    """

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or get_config_path()

    @property
    def rejected_path(self) -> Path:
        return self.config_path.with_name(self.config_path.name + REJECTED_SUFFIX)

    def read(self) -> Tuple[List[KeybindingOverride], bool]:
        """Parse the file without applying it."""
        try:
            document = yaml.safe_load(self.config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise KeybindingConfigError(f"keybindings: invalid YAML: {e}") from e
        return parse_keybindings_document(document)

    def write(self, registry: KeyRegistry) -> Path:
        """Write the registry's current bindings as the config file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        self.config_path.write_text(render_template(registry.export()), encoding="utf-8")
        return self.config_path

    def load_into(self, registry: KeyRegistry) -> LoadReport:
        """
        Apply the user's file to ``registry``.

        A missing file is created from the registry's current bindings. A file
        that fails parsing or validation leaves ``registry`` untouched.
        """
        report = LoadReport(path=self.config_path)

        if not self.config_path.exists():
            self.write(registry)
            report.created = True
            logger.info(f"Created keybindings config at {self.config_path}")
            return report

        try:
            overrides, migrated = self.read()
            report.applied = registry.apply_keybinding_config(overrides)
        except KeybindingConfigError as e:
            report.rejected = True
            report.error = str(e)
            logger.warning(f"Rejected keybindings config {self.config_path}: {e}")
            self._reject()
            return report

        if migrated:
            self.write(registry)
            report.migrated = True
            logger.info(f"Migrated keybindings config at {self.config_path} to version 2")
        return report

    def check(self) -> KeyRegistry:
        """Validate the file against fresh defaults and return the resulting registry."""
        registry = build_default_registry()
        overrides, _ = self.read()
        registry.apply_keybinding_config(overrides)
        return registry

    def reset_to_defaults(self) -> Path:
        """Overwrite the file with the default bindings."""
        path = self.write(build_default_registry())
        logger.info(f"Reset keybindings config at {path}")
        return path

    def _reject(self) -> None:
        self.config_path.replace(self.rejected_path)
        self.write(build_default_registry())
