"""Structured logging for voice recording sessions.

Logs recognition sessions to ~/.agrivoice/logs/ in JSON-lines format for
analysis of how often utterances yield usable record fields, which
recognition errors occur, and how often location suggestions hit.

Example usage:
    from agrivoice.logging import SessionLogger

    logger = SessionLogger(logs_dir=config.logs_dir)
    logger.log_final_fragment(text="いね はしゅ")
    logger.log_fields_inferred(fields)
    logger.log_recognition_error(kind="no_speech", code="no-speech")
    logger.finalize()
"""

from __future__ import annotations

import json
import sys
import threading
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from agrivoice.config import CONFIG_DIR

if TYPE_CHECKING:
    from agrivoice.inference.models import InferredFields

LOGS_DIR = CONFIG_DIR / "logs"

INFERRED_MEMBERS = ("work_type", "crop_type", "field_name", "quantity")


@dataclass
class SessionMetrics:
    """Aggregated metrics for a recording session."""

    utterances: int = 0
    interim_fragments: int = 0
    fields_filled: dict[str, int] = field(
        default_factory=lambda: {member: 0 for member in INFERRED_MEMBERS}
    )
    terms_normalized: int = 0
    recognition_errors: int = 0
    suggestions_requested: int = 0
    suggestions_made: int = 0


@dataclass
class SessionLogger:
    """Session-based logger for recognition pipeline events."""

    logs_dir: Path = LOGS_DIR
    session_id: str = field(default_factory=lambda: datetime.now().strftime("%Y%m%d_%H%M%S_%f"))
    log_file: Path = field(init=False)
    metrics: SessionMetrics = field(default_factory=SessionMetrics)
    _started: datetime = field(default_factory=datetime.now)
    # Buffer log events to reduce file I/O
    _log_buffer: list[dict[str, Any]] = field(default_factory=list)
    _BUFFER_SIZE: int = field(default=10, repr=False)
    _buffer_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def __post_init__(self):
        self.logs_dir.mkdir(parents=True, exist_ok=True)
        self.log_file = self.logs_dir / f"session_{self.session_id}.jsonl"
        self._write_event("session_start", {
            "timestamp": self._started.isoformat(),
        })

    def log_interim_fragment(self) -> None:
        """Count an interim fragment; the text itself is not kept."""
        self.metrics.interim_fragments += 1

    def log_final_fragment(self, text: str) -> None:
        self.metrics.utterances += 1
        self._write_event("fragment_final", {
            "text_preview": text[:100] + "..." if len(text) > 100 else text,
        })

    def log_terms_normalized(self, original: str, normalized: str, terms: list[str]) -> None:
        """Log vocabulary substitutions for one utterance."""
        self.metrics.terms_normalized += len(terms)
        self._write_event("terms_normalized", {
            "original": original,
            "normalized": normalized,
            "terms": terms,
        })

    def log_fields_inferred(self, fields: InferredFields) -> None:
        matched = fields.matched()
        for member in matched:
            self.metrics.fields_filled[member] = self.metrics.fields_filled.get(member, 0) + 1
        self._write_event("fields_inferred", {
            "matched": matched,
            "missing": [m for m in INFERRED_MEMBERS if m not in matched],
        })

    def log_recognition_error(self, kind: str, code: str | None = None) -> None:
        self.metrics.recognition_errors += 1
        self._write_event("recognition_error", {
            "kind": kind,
            "code": code,
        })

    def log_field_suggested(self, suggestion: str | None, distance_km: float | None = None) -> None:
        self.metrics.suggestions_requested += 1
        if suggestion is not None:
            self.metrics.suggestions_made += 1
        self._write_event("field_suggested", {
            "suggestion": suggestion,
            "distance_km": round(distance_km, 4) if distance_km is not None else None,
        })

    def finalize(self) -> dict:
        """Finalize session and write summary.

        Returns:
            Summary metrics dict
        """
        elapsed = (datetime.now() - self._started).total_seconds()
        utterances = self.metrics.utterances
        fill_rates = {
            member: round(count / utterances * 100, 1) if utterances > 0 else None
            for member, count in self.metrics.fields_filled.items()
        }

        summary = {
            "duration_seconds": round(elapsed, 2),
            "utterances": utterances,
            "interim_fragments": self.metrics.interim_fragments,
            "fields_filled": dict(self.metrics.fields_filled),
            "fill_rates": fill_rates,
            "terms_normalized": self.metrics.terms_normalized,
            "recognition_errors": self.metrics.recognition_errors,
            "suggestions_requested": self.metrics.suggestions_requested,
            "suggestions_made": self.metrics.suggestions_made,
        }

        self._write_event("session_complete", summary)
        self._flush_logs()
        return summary

    def _write_event(self, event_type: str, data: dict) -> None:
        """Buffer a JSON event and flush when buffer is full."""
        event = {
            "event": event_type,
            "ts": datetime.now().isoformat(),
            **data,
        }

        with self._buffer_lock:
            self._log_buffer.append(event)
            critical_events = {"session_start", "session_complete", "recognition_error"}
            should_flush = (
                len(self._log_buffer) >= self._BUFFER_SIZE or event_type in critical_events
            )

        # Flush outside the lock to avoid holding lock during I/O
        if should_flush:
            self._flush_logs()

    def _flush_logs(self) -> None:
        """Flush buffered log events to disk."""
        with self._buffer_lock:
            if not self._log_buffer:
                return
            events_to_write = self._log_buffer.copy()

        try:
            with open(self.log_file, "a", encoding="utf-8") as f:
                for event in events_to_write:
                    f.write(json.dumps(event, ensure_ascii=False, default=str) + "\n")

            with self._buffer_lock:
                # Keep events added while we were writing
                self._log_buffer = self._log_buffer[len(events_to_write):]

        except OSError as e:
            # Keep buffer intact for retry
            print(f"Warning: Failed to flush logs to {self.log_file}: {e}", file=sys.stderr)


def analyze_logs(logs_dir: Path = LOGS_DIR, limit: int = 10) -> dict[str, Any]:
    """Analyze recent session logs.

    Returns aggregated insights across sessions.
    """
    if not logs_dir.exists():
        return {"error": "No logs directory found"}

    log_files = sorted(logs_dir.glob("session_*.jsonl"), reverse=True)[:limit]
    if not log_files:
        return {"error": "No log files found"}

    summaries: list[dict] = []
    error_counts: dict[str, int] = {}

    for log_file in log_files:
        try:
            file_content = log_file.read_text(encoding="utf-8")
        except OSError:
            continue

        for line in file_content.splitlines():
            if not line.strip():
                continue
            try:
                event = json.loads(line)
            except json.JSONDecodeError:
                continue

            if event.get("event") == "recognition_error":
                kind = event.get("kind", "other")
                error_counts[kind] = error_counts.get(kind, 0) + 1
            elif event.get("event") == "session_complete":
                summaries.append(event)

    total_utterances = sum(s.get("utterances", 0) for s in summaries)
    filled: dict[str, int] = {member: 0 for member in INFERRED_MEMBERS}
    for s in summaries:
        for member, count in s.get("fields_filled", {}).items():
            filled[member] = filled.get(member, 0) + count

    fill_rates = {
        member: round(count / total_utterances * 100, 1) if total_utterances > 0 else None
        for member, count in filled.items()
    }

    return {
        "sessions_analyzed": len(log_files),
        "sessions_completed": len(summaries),
        "total_utterances": total_utterances,
        "fill_rates": fill_rates,
        "common_errors": sorted(error_counts.items(), key=lambda x: -x[1]),
    }
