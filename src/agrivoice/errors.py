"""Error taxonomy and user-facing failure notices.

None of these are fatal. The orchestrator turns each one into a
FailureNotice for the notification layer and carries on.
"""

from typing import Literal

from pydantic import BaseModel

Capability = Literal["voice", "location"]
RecognitionErrorKind = Literal["no_speech", "audio_capture", "permission_denied", "network", "other"]
LocationErrorKind = Literal["permission_denied", "position_unavailable", "timeout"]
FailureCategory = Literal["unsupported", "recognition", "location"]

# Error codes reported by speech recognition engines
_RECOGNITION_CODES: dict[str, RecognitionErrorKind] = {
    "no-speech": "no_speech",
    "audio-capture": "audio_capture",
    "not-allowed": "permission_denied",
    "network": "network",
}

# W3C geolocation error codes
_LOCATION_CODES: dict[int, LocationErrorKind] = {
    1: "permission_denied",
    2: "position_unavailable",
    3: "timeout",
}

_UNSUPPORTED_MESSAGES: dict[str, str] = {
    "voice": "この環境では音声認識がサポートされていません。",
    "location": "位置情報がサポートされていません。",
}

_RECOGNITION_MESSAGES: dict[str, str] = {
    "no_speech": "音声が検出されませんでした。",
    "audio_capture": "マイクへのアクセスができませんでした。",
    "permission_denied": "マイクの使用が許可されていません。",
    "network": "ネットワークエラーが発生しました。",
}

_LOCATION_MESSAGES: dict[str, str] = {
    "permission_denied": "位置情報の使用が許可されていません。",
    "position_unavailable": "位置情報が利用できません。",
    "timeout": "位置情報の取得がタイムアウトしました。",
}


class AgriVoiceError(Exception):
    """Base class for AgriVoice errors."""


class UnsupportedCapabilityError(AgriVoiceError):
    """Speech or location acquisition is not available on this host."""

    def __init__(self, capability: Capability) -> None:
        self.capability = capability
        super().__init__(f"{capability} input is not supported on this host")


class RecognitionFailure(AgriVoiceError):
    """A recognition session ended with an engine-reported error."""

    def __init__(self, kind: RecognitionErrorKind, detail: str | None = None) -> None:
        self.kind = kind
        self.detail = detail
        super().__init__(f"recognition failed: {kind}" + (f" ({detail})" if detail else ""))

    @classmethod
    def from_code(cls, code: str) -> "RecognitionFailure":
        return cls(recognition_kind(code), detail=code)


class LocationFailure(AgriVoiceError):
    """A coordinate request failed."""

    def __init__(self, kind: LocationErrorKind, detail: str | None = None) -> None:
        self.kind = kind
        self.detail = detail
        super().__init__(f"location failed: {kind}" + (f" ({detail})" if detail else ""))

    @classmethod
    def from_code(cls, code: int) -> "LocationFailure":
        return cls(location_kind(code), detail=str(code))


def recognition_kind(code: str) -> RecognitionErrorKind:
    """Map an engine error code ("no-speech", "not-allowed", ...) to a kind."""
    return _RECOGNITION_CODES.get(code, "other")


def location_kind(code: int) -> LocationErrorKind:
    """Map a geolocation error code (1, 2, 3) to a kind.

    Unknown codes are reported as position_unavailable.
    """
    return _LOCATION_CODES.get(code, "position_unavailable")


class FailureNotice(BaseModel):
    """A categorized, user-displayable failure."""

    category: FailureCategory
    kind: str
    message: str


def notice_for(error: AgriVoiceError) -> FailureNotice:
    """Build the notice the notification layer should show for error."""
    if isinstance(error, UnsupportedCapabilityError):
        return FailureNotice(
            category="unsupported",
            kind=error.capability,
            message=_UNSUPPORTED_MESSAGES[error.capability],
        )
    if isinstance(error, RecognitionFailure):
        reason = _RECOGNITION_MESSAGES.get(error.kind, error.detail or error.kind)
        return FailureNotice(
            category="recognition",
            kind=error.kind,
            message=f"音声認識エラーが発生しました: {reason}",
        )
    if isinstance(error, LocationFailure):
        return FailureNotice(
            category="location",
            kind=error.kind,
            message=f"位置情報の取得に失敗しました: {_LOCATION_MESSAGES[error.kind]}",
        )
    raise TypeError(f"No notice defined for {type(error).__name__}")
