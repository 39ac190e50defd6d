"""Speech-acquisition collaborators.

The audio-to-text engine itself lives outside this package; a SpeechSource
only exposes what it produced as an ordered stream of SpeechEvents.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from pathlib import Path

from agrivoice.recognition.models import SpeechEvent

INTERIM_PREFIX = "~"
ERROR_PREFIX = "!"


class SpeechSource(ABC):
    """Abstract base class for speech fragment sources."""

    @abstractmethod
    def start(self) -> None:
        """Begin a recognition session."""
        ...

    @abstractmethod
    def stop(self) -> None:
        """End the session; no further fragments are delivered."""
        ...

    @abstractmethod
    def events(self) -> Iterator[SpeechEvent]:
        """Events of the current session, in arrival order."""
        ...

    @abstractmethod
    def is_available(self) -> bool:
        """Check if speech recognition is available on the current system."""
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Source name for display."""
        ...


class ScriptedSpeechSource(SpeechSource):
    """Replay a transcript script as a recognition session.

    Script format, one fragment per line:
        ~いね は      interim fragment
        いね はしゅ   final fragment
        !no-speech    engine error (ends the session)
    Blank lines and lines starting with '#' are skipped.

    With interim_results=False interim lines are dropped. With
    continuous=False the session stops after the first final fragment.
    """

    def __init__(
        self,
        lines: Iterable[str],
        continuous: bool = True,
        interim_results: bool = True,
    ) -> None:
        self.lines = [line.rstrip("\n") for line in lines]
        self.continuous = continuous
        self.interim_results = interim_results
        self._running = False

    @classmethod
    def from_file(cls, path: Path, **kwargs) -> "ScriptedSpeechSource":
        return cls(path.read_text(encoding="utf-8").splitlines(), **kwargs)

    def start(self) -> None:
        self._running = True

    def stop(self) -> None:
        self._running = False

    def events(self) -> Iterator[SpeechEvent]:
        if not self._running:
            return
        yield SpeechEvent.started()

        for line in self.lines:
            if not self._running:
                break
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            if stripped.startswith(ERROR_PREFIX):
                self._running = False
                yield SpeechEvent.of_error(stripped[len(ERROR_PREFIX):].strip() or "unknown")
                return
            if stripped.startswith(INTERIM_PREFIX):
                if self.interim_results:
                    yield SpeechEvent.of_fragment(stripped[len(INTERIM_PREFIX):].strip(), is_final=False)
                continue

            yield SpeechEvent.of_fragment(stripped, is_final=True)
            if not self.continuous:
                break

        self._running = False
        yield SpeechEvent.stopped()

    def is_available(self) -> bool:
        return True

    @property
    def name(self) -> str:
        return "scripted"
