"""Speech fragment stream handling and the recording-session orchestrator."""

from agrivoice.recognition.base import ScriptedSpeechSource, SpeechSource
from agrivoice.recognition.extractor import VoiceRecordExtractor
from agrivoice.recognition.models import Fragment, SessionState, SpeechEvent

__all__ = [
    "Fragment",
    "ScriptedSpeechSource",
    "SessionState",
    "SpeechEvent",
    "SpeechSource",
    "VoiceRecordExtractor",
]
