"""Stable identifiers for saved filters."""

import re
from typing import Iterable

from jaskmoney.config.constants import DEFAULT_FILTER_ID, MAX_FILTER_ID_LENGTH

_ALNUM = re.compile(r"[a-z0-9]")


def slugify_filter_id(raw: str) -> str:
    """
    Turn a user-entered name into a filter id.

    Lower-case ``[a-z0-9]`` runs are kept; ``_`` and ``-`` are kept unless a
    separator was just written; anything else becomes ``-``. The result never
    starts with a separator and is at most 63 characters long.
    """
    raw = raw.strip().lower()
    if not raw:
        return DEFAULT_FILTER_ID

    out = []
    last_separator = False
    for ch in raw:
        if _ALNUM.fullmatch(ch):
            out.append(ch)
            last_separator = False
        elif out and not last_separator:
            out.append(ch if ch in "_-" else "-")
            last_separator = True

    slug = "".join(out).strip("-_") or DEFAULT_FILTER_ID
    slug = slug[:MAX_FILTER_ID_LENGTH]
    if not _ALNUM.fullmatch(slug[0]):
        slug = ("f-" + slug)[:MAX_FILTER_ID_LENGTH]
    return slug


def next_unique_filter_id(existing: Iterable[str], base: str) -> str:
    """Slugify ``base`` and add ``-2``, ``-3``, ... until it is not in ``existing``."""
    candidate = slugify_filter_id(base)
    taken = {item.strip().lower() for item in existing}
    if candidate not in taken:
        return candidate

    i = 2
    while True:
        suffix = f"-{i}"
        trimmed = candidate[: MAX_FILTER_ID_LENGTH - len(suffix)]
        proposal = f"{trimmed}{suffix}" if trimmed else f"f{suffix}"
        if proposal not in taken:
            return proposal
        i += 1
