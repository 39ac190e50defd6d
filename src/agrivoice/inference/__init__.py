"""Structured field inference from normalized transcripts."""

from agrivoice.inference.draft import apply_field_suggestion, apply_inferred
from agrivoice.inference.engine import (
    CROP_TYPE_RULES,
    WORK_TYPE_RULES,
    FieldInferenceEngine,
    first_match,
)
from agrivoice.inference.models import (
    CROP_TYPE_LABELS,
    WORK_TYPE_LABELS,
    CropType,
    InferredFields,
    RecordDraft,
    WorkType,
)

__all__ = [
    "CROP_TYPE_LABELS",
    "CROP_TYPE_RULES",
    "CropType",
    "FieldInferenceEngine",
    "InferredFields",
    "RecordDraft",
    "WORK_TYPE_LABELS",
    "WORK_TYPE_RULES",
    "WorkType",
    "apply_field_suggestion",
    "apply_inferred",
    "first_match",
]
