"""Pydantic models for inferred work-record fields."""

from typing import Literal

from pydantic import BaseModel, Field


WorkType = Literal[
    "seeding", "planting", "fertilizing", "pesticide", "weeding", "harvesting", "inspection",
]
CropType = Literal[
    "rice", "wheat", "corn", "soybean", "potato", "tomato", "cabbage", "lettuce",
]

# Display labels used by the record form
WORK_TYPE_LABELS: dict[str, str] = {
    "seeding": "播種",
    "planting": "植付",
    "fertilizing": "施肥",
    "pesticide": "農薬散布",
    "weeding": "除草",
    "harvesting": "収穫",
    "inspection": "点検",
}

CROP_TYPE_LABELS: dict[str, str] = {
    "rice": "稲",
    "wheat": "麦",
    "corn": "トウモロコシ",
    "soybean": "大豆",
    "potato": "ジャガイモ",
    "tomato": "トマト",
    "cabbage": "キャベツ",
    "lettuce": "レタス",
}


class InferredFields(BaseModel):
    """Fields extracted from one finalized utterance.

    Members the engine could not find stay None. A value is built fresh for
    every utterance; nothing carries over from a previous one.
    """

    work_type: WorkType | None = Field(default=None, description="Inferred kind of work")
    crop_type: CropType | None = Field(default=None, description="Inferred crop")
    field_name: str | None = Field(default=None, description="Synthesized field name, e.g. 'Field 3'")
    quantity: str | None = Field(default=None, description="Number and unit, verbatim (e.g. '3.5kg')")
    raw_text: str = Field(description="Transcript before normalization")
    normalized_text: str = Field(description="Transcript after normalization")

    def matched(self) -> dict[str, str]:
        """Only the members that were found."""
        return {
            key: value
            for key, value in self.model_dump(
                include={"work_type", "crop_type", "field_name", "quantity"}
            ).items()
            if value is not None
        }


class RecordDraft(BaseModel):
    """The work-record form as held by the collaborator."""

    work_type: WorkType | None = None
    crop_type: CropType | None = None
    field_name: str | None = None
    work_details: str = ""
    quantity: str | None = None
