"""Built-in agricultural vocabulary for transcript normalization.

Speech recognizers running in Japanese mode tend to return farm terms in
hiragana ("いね", "はしゅ") rather than the kanji or katakana spellings the
record form expects ("稲", "播種"). This table maps those readings to the
spellings that the inference rules look for.

Declaration order matters: the normalizer applies entries top to bottom.
"""

from collections.abc import Iterable, Iterator

from agrivoice.dictionary.models import TermCategory, TermEntry


def _terms(category: TermCategory, pairs: list[tuple[str, str]]) -> list[TermEntry]:
    return [TermEntry(spoken=spoken, normalized=normalized, category=category)
            for spoken, normalized in pairs]


CROP_TERMS = _terms("crop", [
    ("いね", "稲"),
    ("こめ", "稲"),
    ("むぎ", "麦"),
    ("とうもろこし", "トウモロコシ"),
    ("だいず", "大豆"),
    ("じゃがいも", "ジャガイモ"),
    ("とまと", "トマト"),
    ("きゃべつ", "キャベツ"),
    ("れたす", "レタス"),
])

WORK_TERMS = _terms("work", [
    ("はしゅ", "播種"),
    ("たねまき", "播種"),
    ("うえつけ", "植付"),
    ("しひ", "施肥"),
    ("ひりょう", "施肥"),
    ("のうやく", "農薬散布"),
    ("さんぷ", "農薬散布"),
    ("じょそう", "除草"),
    ("くさとり", "除草"),
    ("しゅうかく", "収穫"),
    ("かり", "収穫"),
    ("てんけん", "点検"),
])

PEST_AND_DISEASE_TERMS = [
    TermEntry(spoken="いもち", normalized="いもち病", category="disease"),
    TermEntry(spoken="あぶらむし", normalized="アブラムシ", category="pest"),
    TermEntry(spoken="うどんこ", normalized="うどんこ病", category="disease"),
    TermEntry(spoken="あかだに", normalized="ハダニ", category="pest"),
]

UNIT_TERMS = _terms("unit", [
    ("きろ", "kg"),
    ("キロ", "kg"),
    ("へくたーる", "ha"),
    ("アール", "a"),
    ("たん", "反"),
    ("つぼ", "坪"),
])

BUILTIN_TERMS: tuple[TermEntry, ...] = tuple(
    CROP_TERMS + WORK_TERMS + PEST_AND_DISEASE_TERMS + UNIT_TERMS
)


class TermDictionary:
    """Immutable, ordered collection of term entries.

    Rejects two entries in the same category that share a spoken form but
    disagree on the normalized form. Exact duplicates are allowed.
    """

    def __init__(self, entries: Iterable[TermEntry]) -> None:
        self._entries: tuple[TermEntry, ...] = tuple(entries)
        self._validate()

    def _validate(self) -> None:
        seen: dict[tuple[str, str], str] = {}
        for entry in self._entries:
            key = (entry.category, entry.spoken)
            existing = seen.setdefault(key, entry.normalized)
            if existing != entry.normalized:
                raise ValueError(
                    f"Conflicting {entry.category} term '{entry.spoken}': "
                    f"'{existing}' vs '{entry.normalized}'"
                )

    @property
    def entries(self) -> tuple[TermEntry, ...]:
        return self._entries

    def by_category(self, category: TermCategory) -> list[TermEntry]:
        """Entries of one category, in declaration order."""
        return [e for e in self._entries if e.category == category]

    def __iter__(self) -> Iterator[TermEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


def default_dictionary(extra: Iterable[TermEntry] = ()) -> TermDictionary:
    """Built-in vocabulary followed by any user-supplied entries."""
    return TermDictionary(BUILTIN_TERMS + tuple(extra))
