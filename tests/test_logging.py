"""Tests for session logging and log analysis."""

import json

from agrivoice.inference import InferredFields
from agrivoice.logging import SessionLogger, analyze_logs


def _events(session_logger):
    return [
        json.loads(line)
        for line in session_logger.log_file.read_text(encoding="utf-8").splitlines()
    ]


def test_session_start_is_written_immediately(tmp_path):
    session_logger = SessionLogger(logs_dir=tmp_path)
    assert session_logger.log_file.name.startswith("session_")
    assert [e["event"] for e in _events(session_logger)] == ["session_start"]


def test_non_critical_events_are_buffered(tmp_path):
    session_logger = SessionLogger(logs_dir=tmp_path)
    session_logger.log_final_fragment("いね")
    assert len(_events(session_logger)) == 1
    session_logger.finalize()
    assert [e["event"] for e in _events(session_logger)] == [
        "session_start", "fragment_final", "session_complete",
    ]


def test_long_text_is_truncated(tmp_path):
    session_logger = SessionLogger(logs_dir=tmp_path)
    session_logger.log_final_fragment("あ" * 150)
    session_logger.finalize()
    preview = _events(session_logger)[1]["text_preview"]
    assert preview == "あ" * 100 + "..."


def test_fields_inferred_lists_missing_members(tmp_path):
    session_logger = SessionLogger(logs_dir=tmp_path)
    session_logger.log_fields_inferred(
        InferredFields(crop_type="rice", raw_text="いね", normalized_text="稲")
    )
    session_logger.finalize()
    event = _events(session_logger)[1]
    assert event["matched"] == {"crop_type": "rice"}
    assert event["missing"] == ["work_type", "field_name", "quantity"]


def test_empty_session_summary(tmp_path):
    summary = SessionLogger(logs_dir=tmp_path).finalize()
    assert summary["utterances"] == 0
    assert set(summary["fill_rates"].values()) == {None}


def test_analyze_logs(tmp_path):
    first = SessionLogger(logs_dir=tmp_path, session_id="20240501_090000_000000")
    first.log_final_fragment("いね はしゅ")
    first.log_fields_inferred(InferredFields(
        work_type="seeding", crop_type="rice", raw_text="いね はしゅ", normalized_text="稲 播種",
    ))
    first.log_recognition_error("no_speech", "no-speech")
    first.finalize()

    second = SessionLogger(logs_dir=tmp_path, session_id="20240501_100000_000000")
    second.log_final_fragment("5きろ")
    second.log_fields_inferred(InferredFields(
        quantity="5kg", raw_text="5きろ", normalized_text="5kg",
    ))
    second.log_recognition_error("no_speech", "no-speech")
    second.log_recognition_error("network", "network")
    second.finalize()

    report = analyze_logs(tmp_path)
    assert report["sessions_analyzed"] == 2
    assert report["sessions_completed"] == 2
    assert report["total_utterances"] == 2
    assert report["fill_rates"]["work_type"] == 50.0
    assert report["fill_rates"]["quantity"] == 50.0
    assert report["fill_rates"]["field_name"] == 0.0
    assert report["common_errors"] == [("no_speech", 2), ("network", 1)]


def test_analyze_logs_limit(tmp_path):
    for hour in range(3):
        SessionLogger(logs_dir=tmp_path, session_id=f"20240501_0{hour}0000_000000").finalize()
    assert analyze_logs(tmp_path, limit=2)["sessions_analyzed"] == 2


def test_analyze_logs_skips_garbage_lines(tmp_path):
    SessionLogger(logs_dir=tmp_path, session_id="a").finalize()
    with open(tmp_path / "session_a.jsonl", "a", encoding="utf-8") as f:
        f.write("not json\n\n")
    assert analyze_logs(tmp_path)["sessions_completed"] == 1


def test_analyze_logs_without_logs(tmp_path):
    assert "error" in analyze_logs(tmp_path / "missing")
    assert "error" in analyze_logs(tmp_path)
