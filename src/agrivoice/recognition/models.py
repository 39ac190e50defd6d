"""Pydantic models for the speech fragment stream."""

from typing import Literal

from pydantic import BaseModel, Field, model_validator

SessionState = Literal["idle", "listening"]
SpeechEventType = Literal["started", "fragment", "error", "stopped"]


class Fragment(BaseModel):
    """One chunk of transcribed speech, interim or final."""

    text: str
    is_final: bool = False


class SpeechEvent(BaseModel):
    """A signal from the speech-acquisition collaborator."""

    type: SpeechEventType
    fragment: Fragment | None = None
    error: str | None = Field(default=None, description="Engine error code, e.g. 'no-speech'")

    @model_validator(mode="after")
    def validate_payload(self) -> "SpeechEvent":
        """Fragment events carry a fragment; error events carry a code."""
        if self.type == "fragment" and self.fragment is None:
            raise ValueError("fragment event requires a fragment")
        if self.type == "error" and not self.error:
            raise ValueError("error event requires an error code")
        return self

    @classmethod
    def started(cls) -> "SpeechEvent":
        return cls(type="started")

    @classmethod
    def stopped(cls) -> "SpeechEvent":
        return cls(type="stopped")

    @classmethod
    def of_fragment(cls, text: str, is_final: bool) -> "SpeechEvent":
        return cls(type="fragment", fragment=Fragment(text=text, is_final=is_final))

    @classmethod
    def of_error(cls, code: str) -> "SpeechEvent":
        return cls(type="error", error=code)
