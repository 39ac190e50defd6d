"""Substitute recognized spoken variants with their domain spellings.

Matching is a case-insensitive substring search, not word-bounded: Japanese
transcripts have no word separators, and short readings are expected to fire
inside longer strings. Entries are applied one after another in dictionary
order, so a later entry sees the output of earlier ones. When one entry's
normalized form contains another entry's spoken form the substitutions
cascade (the built-in "いもち" -> "いもち病" re-matches on a second pass).
"""

from __future__ import annotations

import logging
import re

from agrivoice.dictionary.models import TermEntry
from agrivoice.dictionary.terms import TermDictionary

logger = logging.getLogger(__name__)


class TermNormalizer:
    """Rewrite transcripts using a TermDictionary.

    Usage:
        normalizer = TermNormalizer(default_dictionary())
        normalizer.normalize("いね はしゅ 5きろ")  # "稲 播種 5kg"
    """

    def __init__(self, dictionary: TermDictionary) -> None:
        self.dictionary = dictionary
        # Spoken forms are literal text, never patterns
        self._patterns: list[tuple[re.Pattern[str], TermEntry]] = [
            (re.compile(re.escape(entry.spoken), re.IGNORECASE), entry)
            for entry in dictionary
        ]

    def normalize(self, text: str) -> str:
        """Replace every occurrence of every spoken form, in dictionary order."""
        if not text:
            return text

        result = text
        for pattern, entry in self._patterns:
            # Function replacement keeps backslashes in normalized forms literal
            result = pattern.sub(lambda _m, repl=entry.normalized: repl, result)

        if result != text:
            logger.debug(f"Normalized transcript: {text!r} -> {result!r}")
        return result

    def matched_entries(self, text: str) -> list[TermEntry]:
        """Entries whose spoken form occurs in the (un-normalized) text."""
        if not text:
            return []
        return [entry for pattern, entry in self._patterns if pattern.search(text)]
