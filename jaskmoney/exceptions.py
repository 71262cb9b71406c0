"""Custom exception hierarchy for jaskmoney.

Every failure in the input-dispatch core is recoverable: configuration errors
are raised before anything is applied, and command errors are turned into a
status line by the dispatcher.

Exception Hierarchy:
    JaskmoneyError (base)
    ├── ConfigurationError - Settings/configuration issues
    │   └── KeybindingConfigError - Invalid or conflicting keybinding overrides
    └── CommandError - Command lookup and execution
        ├── UnknownCommandError
        ├── CommandScopeError
        ├── CommandDisabledError
        └── CommandRegistrationError

Usage:
    from jaskmoney.exceptions import KeybindingConfigError

    try:
        registry.apply_keybinding_config(overrides)
    except KeybindingConfigError as e:
        logger.warning(f"Rejected keybindings: {e}")
"""

from typing import Any, Optional


class JaskmoneyError(Exception):
    """Base exception for all jaskmoney errors.

    Attributes:
        message: Human-readable error description
        context: Additional context about the error (e.g., scope, action)
    """

    def __init__(self, message: str, **context: Any) -> None:
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context."""
        if self.context:
            context_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(JaskmoneyError):
    """Invalid configuration or settings."""

    def __init__(
        self,
        message: str,
        *,
        setting: Optional[str] = None,
        **context: Any,
    ) -> None:
        if setting is not None:
            context["setting"] = setting
        super().__init__(message, **context)
        self.setting = setting


class KeybindingConfigError(ConfigurationError):
    """A keybinding override set was rejected.

    Raised before any binding is changed, so the previous table stays live.
    """

    def __init__(
        self,
        message: str,
        *,
        scope: Optional[str] = None,
        action: Optional[str] = None,
        key: Optional[str] = None,
        **context: Any,
    ) -> None:
        if scope is not None:
            context["scope"] = scope
        if action is not None:
            context["action"] = action
        if key is not None:
            context["key"] = key
        super().__init__(message, **context)
        self.scope = scope
        self.action = action
        self.key = key


# =============================================================================
# Command Errors
# =============================================================================


class CommandError(JaskmoneyError):
    """Base for command registry failures."""

    def __init__(self, message: str, *, command_id: Optional[str] = None, **context: Any) -> None:
        if command_id is not None:
            context["command_id"] = command_id
        super().__init__(message, **context)
        self.command_id = command_id


class UnknownCommandError(CommandError):
    """No command is registered under the requested id."""


class CommandScopeError(CommandError):
    """The command does not declare the caller's scope."""


class CommandDisabledError(CommandError):
    """The command's enabled predicate returned false.

    The predicate's reason is the error message, so it can be shown as-is.
    """

    def __init__(self, reason: str, *, command_id: Optional[str] = None) -> None:
        super().__init__(reason, command_id=command_id)
        self.reason = reason

    def _format_message(self) -> str:
        return self.message


class CommandRegistrationError(CommandError):
    """A command with the same id is already registered."""
