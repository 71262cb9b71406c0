"""
Command palette for jaskmoney.

Provides a searchable registry of commands that can be run from the
``ctrl+k`` palette, the ``:`` command line, or directly from a key binding.
"""

from .fuzzy import fuzzy_match_score
from .palette_commands import Command, CommandMatch, CommandOutcome, CommandRegistry
from .saved_filters import next_unique_filter_id, slugify_filter_id

__all__ = [
    "Command",
    "CommandMatch",
    "CommandOutcome",
    "CommandRegistry",
    "fuzzy_match_score",
    "next_unique_filter_id",
    "slugify_filter_id",
]
