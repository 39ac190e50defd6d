"""Pydantic v2 models for the agricultural term dictionary."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


# Type definitions
TermCategory = Literal["crop", "work", "disease", "pest", "unit"]


class TermEntry(BaseModel):
    """A spoken variant and the domain spelling that replaces it.

    Attributes:
        spoken: The form the recognizer tends to produce (usually hiragana)
        normalized: The canonical domain spelling substituted for it
        category: Which vocabulary the term belongs to
    """

    model_config = ConfigDict(frozen=True)

    spoken: str = Field(..., min_length=1, description="Spoken variant as transcribed")
    normalized: str = Field(..., description="Canonical domain spelling")
    category: TermCategory = Field(..., description="Vocabulary category")
