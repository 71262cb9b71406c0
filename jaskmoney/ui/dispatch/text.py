"""
Small immutable building blocks for text entry and modal forms.

Each helper returns a new value rather than mutating, so overlay handlers
can build the next application state with ``dataclasses.replace``.
"""

from dataclasses import dataclass, replace
from typing import Tuple

from jaskmoney.ui.keybindings.keys import is_printable_key, key_text


@dataclass(frozen=True)
class TextField:
    """A string value plus caret position."""

    value: str = ""
    cursor: int = 0

    @classmethod
    def of(cls, value: str) -> "TextField":
        """Field holding ``value`` with the caret at the end."""
        return cls(value=value, cursor=len(value))

    def handle_key(self, key: str, cursor_aware: bool = True) -> Tuple["TextField", bool]:
        """
        Apply one key.

        Returns:
            (field, consumed) where consumed is False for keys a text field
            does not understand
        """
        cursor = min(max(self.cursor, 0), len(self.value))
        if key == "backspace":
            if not cursor_aware:
                return TextField.of(self.value[:-1]), True
            if cursor == 0:
                return self, True
            return TextField(self.value[: cursor - 1] + self.value[cursor:], cursor - 1), True
        if key in ("left", "right") and cursor_aware:
            step = -1 if key == "left" else 1
            return replace(self, cursor=min(max(cursor + step, 0), len(self.value))), True
        if is_printable_key(key):
            text = key_text(key)
            if not cursor_aware:
                return TextField.of(self.value + text), True
            return TextField(self.value[:cursor] + text + self.value[cursor:], cursor + 1), True
        return self, False

    def render(self, marker: str = "|") -> str:
        """Value with a caret marker at the cursor position."""
        cursor = min(max(self.cursor, 0), len(self.value))
        return self.value[:cursor] + marker + self.value[cursor:]


@dataclass(frozen=True)
class FormState:
    """Fixed set of text fields plus a focus index and an on/off toggle."""

    fields: Tuple[TextField, ...]
    focus: int = 0
    toggle: bool = True
    has_toggle: bool = False
    target: str = ""  # Id of the entity being edited; empty for a new one

    @property
    def slot_count(self) -> int:
        """Focusable slots: every text field, plus the toggle when present."""
        return len(self.fields) + (1 if self.has_toggle else 0)

    @property
    def on_toggle(self) -> bool:
        return self.has_toggle and self.focus == len(self.fields)

    @property
    def focused_field(self) -> "TextField | None":
        if 0 <= self.focus < len(self.fields):
            return self.fields[self.focus]
        return None

    def values(self) -> Tuple[str, ...]:
        return tuple(f.value for f in self.fields)

    def with_field(self, field: TextField) -> "FormState":
        fields = list(self.fields)
        fields[self.focus] = field
        return replace(self, fields=tuple(fields))

    def move_focus(self, delta: int) -> "FormState":
        """Cycle focus forward or backward, wrapping at both ends."""
        if self.slot_count == 0 or delta == 0:
            return self
        step = 1 if delta > 0 else -1
        return replace(self, focus=(self.focus + step) % self.slot_count)

    def handle_nav(self, key: str, vertical: int) -> Tuple["FormState", bool]:
        """
        Focus cycling for up/down (as resolved by the caller) and tab/shift+tab.

        Returns:
            (form, changed)
        """
        if vertical:
            return self.move_focus(vertical), True
        if key == "tab":
            return self.move_focus(1), True
        if key == "shift+tab":
            return self.move_focus(-1), True
        return self, False


def move_bounded(cursor: int, count: int, delta: int) -> int:
    """Move a list cursor by ``delta`` without leaving ``[0, count)``."""
    if count <= 0:
        return 0
    return min(max(cursor + delta, 0), count - 1)
