"""
Speech engine interfaces.

Recognition and synthesis are opaque capabilities: a browser bridge, an OS
text-to-speech voice or a test double all plug in by implementing these
classes. Engines report progress through callbacks, which must be invoked on
the event loop thread.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class Voice:
    """A synthesis voice offered by an engine."""

    name: str
    lang: str
    default: bool = False


@dataclass
class Utterance:
    """Text plus voice parameters handed to a synthesis engine."""

    text: str
    voice: Voice | None = None
    lang: str = "en-US"
    rate: float = 0.9
    pitch: float = 1.0
    volume: float = 1.0
    on_start: Callable[[], None] | None = None
    on_end: Callable[[], None] | None = None
    on_error: Callable[[str], None] | None = None


class SynthesisEngine(ABC):
    """Text-to-speech capability."""

    @property
    def available(self) -> bool:
        return True

    @abstractmethod
    def get_voices(self) -> list[Voice]:
        """List voices the engine can speak with."""
        pass

    @abstractmethod
    def speak(self, utterance: Utterance) -> None:
        """
        Start speaking an utterance.

        Returns immediately; ``utterance.on_start`` fires when audio begins and
        exactly one of ``on_end`` / ``on_error`` fires when it stops.

        Raises:
            CapabilityUnavailable: Synthesis is not possible in this runtime
        """
        pass

    @abstractmethod
    def cancel(self) -> None:
        """Stop the current utterance, if any."""
        pass


ResultCallback = Callable[[str, bool], None]


class RecognitionEngine(ABC):
    """
    Continuous speech-to-text capability.

    The engine may end a session by itself (silence timeout, network hiccup);
    it reports that through ``on_end`` exactly as it does a requested stop.
    """

    def __init__(self, lang: str = "en-US", interim_results: bool = True):
        self.lang = lang
        self.interim_results = interim_results
        self.on_result: ResultCallback | None = None
        self.on_end: Callable[[], None] | None = None
        self.on_error: Callable[[str], None] | None = None

    @property
    def available(self) -> bool:
        return True

    @abstractmethod
    def start(self) -> None:
        """
        Begin a recognition session.

        Raises:
            CapabilityUnavailable: Recognition is not possible in this runtime
        """
        pass

    @abstractmethod
    def stop(self) -> None:
        """Ask the engine to end the session; ``on_end`` follows."""
        pass

    def _emit_result(self, text: str, is_final: bool) -> None:
        if self.on_result is not None:
            self.on_result(text, is_final)

    def _emit_end(self) -> None:
        if self.on_end is not None:
            self.on_end()

    def _emit_error(self, message: str) -> None:
        if self.on_error is not None:
            self.on_error(message)
