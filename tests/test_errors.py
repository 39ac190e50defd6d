"""Tests for error classification and failure notices."""

import pytest

from agrivoice.errors import (
    AgriVoiceError,
    LocationFailure,
    RecognitionFailure,
    UnsupportedCapabilityError,
    location_kind,
    notice_for,
    recognition_kind,
)


@pytest.mark.parametrize("code,kind", [
    ("no-speech", "no_speech"),
    ("audio-capture", "audio_capture"),
    ("not-allowed", "permission_denied"),
    ("network", "network"),
    ("aborted", "other"),
    ("", "other"),
])
def test_recognition_kind(code, kind):
    assert recognition_kind(code) == kind


@pytest.mark.parametrize("code,kind", [
    (1, "permission_denied"),
    (2, "position_unavailable"),
    (3, "timeout"),
    (0, "position_unavailable"),
    (99, "position_unavailable"),
])
def test_location_kind(code, kind):
    assert location_kind(code) == kind


def test_errors_share_base_class():
    for error in (
        UnsupportedCapabilityError("voice"),
        RecognitionFailure("network"),
        LocationFailure("timeout"),
    ):
        assert isinstance(error, AgriVoiceError)


def test_recognition_failure_keeps_code():
    failure = RecognitionFailure.from_code("not-allowed")
    assert failure.kind == "permission_denied"
    assert failure.detail == "not-allowed"
    assert "permission_denied" in str(failure)


class TestNotices:
    def test_unsupported(self):
        notice = notice_for(UnsupportedCapabilityError("location"))
        assert notice.category == "unsupported"
        assert notice.kind == "location"
        assert notice.message == "位置情報がサポートされていません。"

    @pytest.mark.parametrize("code,reason", [
        ("no-speech", "音声が検出されませんでした。"),
        ("audio-capture", "マイクへのアクセスができませんでした。"),
        ("not-allowed", "マイクの使用が許可されていません。"),
        ("network", "ネットワークエラーが発生しました。"),
        ("service-not-allowed", "service-not-allowed"),
    ])
    def test_recognition(self, code, reason):
        notice = notice_for(RecognitionFailure.from_code(code))
        assert notice.category == "recognition"
        assert notice.message == f"音声認識エラーが発生しました: {reason}"

    def test_location(self):
        notice = notice_for(LocationFailure.from_code(3))
        assert notice.category == "location"
        assert notice.kind == "timeout"
        assert notice.message == "位置情報の取得に失敗しました: 位置情報の取得がタイムアウトしました。"

    def test_unknown_error_type(self):
        with pytest.raises(TypeError):
            notice_for(AgriVoiceError("boom"))
