"""Rule-based extraction of record fields from normalized transcripts.

Four independent passes run over the same text:
- Work type: ordered keyword rules, first match wins
- Crop type: ordered keyword rules, first match wins
- Field identifier: "<digits>号圃場" style markers -> "Field <N>"
- Quantity: "<number><unit>" copied verbatim (no unit conversion)

Keywords are written in the normalized vocabulary produced by
TermNormalizer, so the engine expects normalized input.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from collections.abc import Sequence
from typing import TypeVar

from agrivoice.inference.models import CropType, InferredFields, WorkType

logger = logging.getLogger(__name__)

T = TypeVar("T")

# (keywords, value) pairs; order is significant
WORK_TYPE_RULES: tuple[tuple[tuple[str, ...], WorkType], ...] = (
    (("播種", "種まき"), "seeding"),
    (("植付", "植え付け"), "planting"),
    (("施肥", "肥料"), "fertilizing"),
    (("農薬", "散布"), "pesticide"),
    (("除草", "草取り"), "weeding"),
    (("収穫", "刈り"), "harvesting"),
    (("点検", "確認"), "inspection"),
)

CROP_TYPE_RULES: tuple[tuple[tuple[str, ...], CropType], ...] = (
    (("稲", "米"), "rice"),
    (("麦",), "wheat"),
    (("トウモロコシ",), "corn"),
    (("大豆",), "soybean"),
    (("ジャガイモ",), "potato"),
    (("トマト",), "tomato"),
    (("キャベツ",), "cabbage"),
    (("レタス",), "lettuce"),
)

FIELD_PATTERN = re.compile(r"(\d+)(号圃場|号|圃場)")
QUANTITY_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*(kg|キロ|ha|ヘクタール|a|アール|反|坪)")

DEFAULT_FIELD_NAME_TEMPLATE = "Field {number}"


def first_match(text: str, rules: Sequence[tuple[Sequence[str], T]]) -> T | None:
    """Value of the first rule with any keyword in text; later rules are not tested."""
    for keywords, value in rules:
        if any(keyword in text for keyword in keywords):
            return value
    return None


class FieldInferenceEngine:
    """Derive InferredFields from a normalized transcript.

    The engine holds no per-utterance state and never raises for missing
    information; a field that is not found is simply left unset.
    """

    def __init__(
        self,
        work_rules: Sequence[tuple[Sequence[str], WorkType]] = WORK_TYPE_RULES,
        crop_rules: Sequence[tuple[Sequence[str], CropType]] = CROP_TYPE_RULES,
        field_name_template: str = DEFAULT_FIELD_NAME_TEMPLATE,
    ) -> None:
        if "{number}" not in field_name_template:
            raise ValueError(
                f"field_name_template must contain '{{number}}': {field_name_template!r}"
            )
        self.work_rules = tuple(work_rules)
        self.crop_rules = tuple(crop_rules)
        self.field_name_template = field_name_template

    def infer(self, normalized_text: str, raw_text: str | None = None) -> InferredFields:
        """Run all extraction passes over normalized_text.

        Args:
            normalized_text: Transcript after TermNormalizer
            raw_text: Transcript before normalization; defaults to normalized_text

        Returns:
            InferredFields with every member that could be found
        """
        lowered = normalized_text.lower()
        fields = InferredFields(
            work_type=first_match(lowered, self.work_rules),
            crop_type=first_match(lowered, self.crop_rules),
            field_name=self.extract_field_name(normalized_text),
            quantity=self.extract_quantity(normalized_text),
            raw_text=normalized_text if raw_text is None else raw_text,
            normalized_text=normalized_text,
        )
        logger.debug(f"Inferred {fields.matched()} from {normalized_text!r}")
        return fields

    def extract_field_name(self, text: str) -> str | None:
        match = FIELD_PATTERN.search(text)
        if not match:
            return None
        # Fold full-width digits ("３号") to ASCII; int() rejects very long runs
        digits = "".join(str(unicodedata.digit(c)) for c in match.group(1))
        return self.field_name_template.format(number=digits.lstrip("0") or "0")

    def extract_quantity(self, text: str) -> str | None:
        match = QUANTITY_PATTERN.search(text)
        if not match:
            return None
        return f"{match.group(1)}{match.group(2)}"
