"""Key name normalization.

Key names arrive from the terminal runtime, the defaults table and the
user's config file in slightly different spellings. Everything is funnelled
through ``normalize_key_name`` before it is stored or looked up.
"""

from typing import Iterable, List

_PRINTABLE_MIN = 32
_PRINTABLE_MAX = 126


def normalize_key_name(key: str) -> str:
    """Return the canonical spelling of a key name.

    A lone uppercase letter is kept as-is so ``G`` and ``g`` can be bound to
    different actions in the same scope. Everything else is lower-cased with
    spaces removed and the common aliases unified.
    """
    if key == " ":
        return "space"
    trimmed = key.strip()
    if not trimmed:
        return ""
    if len(trimmed) == 1 and "A" <= trimmed <= "Z":
        return trimmed
    name = trimmed.lower().replace(" ", "")
    name = name.replace("control+", "ctrl+")
    name = name.replace("ctl+", "ctrl+")
    name = name.replace("return", "enter")
    name = name.replace("spacebar", "space")
    if name == "delete":
        name = "del"
    return name


def normalize_key_list(keys: Iterable[str]) -> List[str]:
    """Normalize keys, dropping blanks and duplicates while keeping order."""
    out: List[str] = []
    seen = set()
    for key in keys:
        name = normalize_key_name(key)
        if not name or name in seen:
            continue
        seen.add(name)
        out.append(name)
    return out


def is_printable_key(key: str) -> bool:
    """True for a single printable ASCII character (or the space key)."""
    if key == "space":
        return True
    return len(key) == 1 and _PRINTABLE_MIN <= ord(key) <= _PRINTABLE_MAX


def key_text(key: str) -> str:
    """The literal text a printable key inserts."""
    return " " if key == "space" else key


def is_single_letter(key: str) -> bool:
    return len(key) == 1 and key.isascii() and key.isalpha()
