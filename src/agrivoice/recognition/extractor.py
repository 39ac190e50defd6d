"""Orchestrate a voice recording session into inferred record fields.

State machine:
    idle --started--> listening --stopped/error--> idle

While listening, interim fragments only update the live display text.
Each final fragment runs TermNormalizer then FieldInferenceEngine and the
result is handed to the collaborator. Engine errors end the session and
are reported as FailureNotices; nothing here raises for them.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from agrivoice.dictionary.normalizer import TermNormalizer
from agrivoice.errors import (
    AgriVoiceError,
    FailureNotice,
    LocationFailure,
    RecognitionFailure,
    UnsupportedCapabilityError,
    notice_for,
)
from agrivoice.inference.engine import FieldInferenceEngine
from agrivoice.inference.models import InferredFields
from agrivoice.location.history import LocationHistory
from agrivoice.location.matcher import LocationProximityMatcher
from agrivoice.location.models import Coordinate, KnownField
from agrivoice.location.provider import LocationProvider
from agrivoice.location.registry import FieldRegistry
from agrivoice.logging import SessionLogger
from agrivoice.recognition.base import SpeechSource
from agrivoice.recognition.models import Fragment, SessionState, SpeechEvent

logger = logging.getLogger(__name__)


class VoiceRecordExtractor:
    """Turn a speech event stream into InferredFields, one per utterance.

    All components are passed in; the extractor creates none of its own.

    Usage:
        extractor = VoiceRecordExtractor(
            normalizer=TermNormalizer(default_dictionary()),
            engine=FieldInferenceEngine(),
            registry=FieldRegistry(config.fields_file),
            matcher=LocationProximityMatcher(),
            speech_source=source,
            on_fields=form.apply,
        )
        extractor.start()
        results = extractor.listen()
    """

    def __init__(
        self,
        normalizer: TermNormalizer,
        engine: FieldInferenceEngine,
        registry: FieldRegistry,
        matcher: LocationProximityMatcher,
        speech_source: SpeechSource | None = None,
        location_provider: LocationProvider | None = None,
        session_logger: SessionLogger | None = None,
        history: LocationHistory | None = None,
        on_fields: Callable[[InferredFields], None] | None = None,
        on_interim: Callable[[str], None] | None = None,
        on_failure: Callable[[FailureNotice], None] | None = None,
        location_timeout_seconds: float = 10.0,
    ) -> None:
        self.normalizer = normalizer
        self.engine = engine
        self.registry = registry
        self.matcher = matcher
        self.speech_source = speech_source
        self.location_provider = location_provider
        self.session_logger = session_logger
        self.history = history
        self.on_fields = on_fields
        self.on_interim = on_interim
        self.on_failure = on_failure
        self.location_timeout_seconds = location_timeout_seconds

        self.state: SessionState = "idle"
        self.live_text = ""
        self.current_text = ""
        self.voice_enabled = True
        self.location_enabled = True
        self._check_capabilities()

    # -------------------------------------------------------------------------
    # Capabilities and failures
    # -------------------------------------------------------------------------

    def _check_capabilities(self) -> None:
        """Disable features whose collaborator is unavailable, reporting each once."""
        if self.speech_source is not None and not self.speech_source.is_available():
            self.voice_enabled = False
            self._report(UnsupportedCapabilityError("voice"))
        if self.location_provider is not None and not self.location_provider.is_available():
            self.location_enabled = False
            self._report(UnsupportedCapabilityError("location"))

    def _report(self, error: AgriVoiceError) -> FailureNotice:
        notice = notice_for(error)
        logger.warning(f"{notice.category} failure ({notice.kind}): {notice.message}")
        if self.on_failure is not None:
            self.on_failure(notice)
        return notice

    # -------------------------------------------------------------------------
    # Session control
    # -------------------------------------------------------------------------

    def start(self) -> bool:
        """Ask the speech source to begin a session.

        Returns False (after reporting why) when voice input is unavailable.
        The state only changes once the source signals 'started'.
        """
        if not self.voice_enabled or self.speech_source is None:
            self._report(UnsupportedCapabilityError("voice"))
            return False
        if self.state == "idle":
            self.current_text = ""
            self.speech_source.start()
        return True

    def stop(self) -> None:
        """Ask the speech source to end the session."""
        if self.state == "listening" and self.speech_source is not None:
            self.speech_source.stop()

    def listen(self) -> list[InferredFields]:
        """Drain the speech source's events, returning every inference made."""
        if self.speech_source is None or not self.voice_enabled:
            return []

        results: list[InferredFields] = []
        for event in self.speech_source.events():
            fields = self.handle_event(event)
            if fields is not None:
                results.append(fields)
        return results

    def handle_event(self, event: SpeechEvent) -> InferredFields | None:
        """Advance the state machine by one event."""
        if event.type == "started":
            logger.info("Recording started")
            self.state = "listening"
            self.live_text = ""
        elif event.type == "stopped":
            logger.info("Recording stopped")
            self.state = "idle"
        elif event.type == "error":
            self.state = "idle"
            failure = RecognitionFailure.from_code(event.error or "")
            if self.session_logger is not None:
                self.session_logger.log_recognition_error(failure.kind, event.error)
            self._report(failure)
        elif event.fragment is not None:
            return self.handle_fragment(event.fragment)
        return None

    def handle_fragment(self, fragment: Fragment) -> InferredFields | None:
        """Show interim text; infer fields from final text."""
        if self.state != "listening":
            logger.debug(f"Ignoring fragment while idle: {fragment.text!r}")
            return None

        if not fragment.is_final:
            self.live_text = fragment.text
            if self.session_logger is not None:
                self.session_logger.log_interim_fragment()
            if self.on_interim is not None:
                self.on_interim(fragment.text)
            return None

        return self._infer(fragment.text)

    def _infer(self, raw_text: str) -> InferredFields:
        normalized = self.normalizer.normalize(raw_text)
        self.current_text = normalized
        self.live_text = normalized

        fields = self.engine.infer(normalized, raw_text=raw_text)

        if self.session_logger is not None:
            self.session_logger.log_final_fragment(raw_text)
            if normalized != raw_text:
                terms = [e.spoken for e in self.normalizer.matched_entries(raw_text)]
                self.session_logger.log_terms_normalized(raw_text, normalized, terms)
            self.session_logger.log_fields_inferred(fields)

        if self.on_fields is not None:
            self.on_fields(fields)
        return fields

    # -------------------------------------------------------------------------
    # Location suggestion
    # -------------------------------------------------------------------------

    def suggest_field_name(self, current: Coordinate) -> str | None:
        """Name of the registered field within the threshold of current, if any."""
        fields = self.registry.all()
        nearest = self.matcher.find_nearest(current, fields)
        suggestion = nearest.name if nearest is not None else None

        if self.session_logger is not None:
            match = self.matcher.nearest(current, fields)
            self.session_logger.log_field_suggested(
                suggestion, match.distance_km if match is not None else None
            )
        return suggestion

    def locate_and_suggest(self) -> str | None:
        """Acquire a coordinate and suggest a field name for it.

        Location failures are reported and yield None; retrying is up to
        the caller.
        """
        if not self.location_enabled or self.location_provider is None:
            self._report(UnsupportedCapabilityError("location"))
            return None

        try:
            current = self.location_provider.acquire(self.location_timeout_seconds)
        except (LocationFailure, UnsupportedCapabilityError) as e:
            self._report(e)
            return None
        return self.suggest_field_name(current)

    def confirm_field(
        self, name: str, location: Coordinate, work_type: str | None = None
    ) -> KnownField:
        """Remember that the operator named the field at location."""
        field = self.registry.upsert(name, location)
        if self.history is not None:
            self.history.record(location, work_type)
        return field
