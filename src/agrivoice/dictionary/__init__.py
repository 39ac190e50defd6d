"""Agricultural vocabulary and transcript normalization.

This module provides:
- TermEntry: one spoken variant -> normalized spelling mapping
- TermDictionary: ordered, validated collection of entries
- TermNormalizer: substitutes spoken variants in raw transcripts
"""

from agrivoice.dictionary.models import TermCategory, TermEntry
from agrivoice.dictionary.normalizer import TermNormalizer
from agrivoice.dictionary.terms import BUILTIN_TERMS, TermDictionary, default_dictionary

__all__ = [
    "BUILTIN_TERMS",
    "TermCategory",
    "TermDictionary",
    "TermEntry",
    "TermNormalizer",
    "default_dictionary",
]
