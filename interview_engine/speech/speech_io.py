"""
Speech input/output for the interviewer.

Wraps a recognition engine and a synthesis engine behind one object and
publishes everything that happens (transcripts, end of speech, viseme
timelines) on the session's EventChannel.
"""

import logging
import time
from collections.abc import Callable

from interview_engine.config.settings import VoiceSettings
from interview_engine.events import EventChannel, EventType
from interview_engine.speech.engines import RecognitionEngine, SynthesisEngine, Utterance, Voice
from interview_engine.speech.exceptions import CapabilityUnavailable
from interview_engine.speech.visemes import PhonemeVisemeAnalyzer, VisemeEvent, WordViseme, sample

logger = logging.getLogger(__name__)

# Recognition errors after which retrying is pointless
FATAL_RECOGNITION_ERRORS = ("not-allowed", "service-not-allowed", "audio-capture")


class UtteranceHandle:
    """Returned by ``SpeechIO.speak``; cancels that utterance only."""

    def __init__(self, cancel: Callable[[], None] | None = None):
        self._cancel = cancel
        self.cancelled = False

    def cancel(self) -> None:
        if self.cancelled:
            return
        self.cancelled = True
        if self._cancel is not None:
            self._cancel()


class SpeechIO:
    """
    Listening and speaking for one interview session.

    Recognition runs as a continuous session. If the engine ends it on its own
    while we still intend to listen, it is restarted; when the caller stops it,
    ``SPEECH_END`` is published with the accumulated transcript.

    ``speak`` publishes the viseme timeline before playback starts and clears
    it when the utterance ends, fails or is cancelled.

    Missing or unsupported engines never raise: the matching ``*_supported``
    flag goes False for good and the call becomes a no-op.
    """

    def __init__(
        self,
        channel: EventChannel,
        recognition: RecognitionEngine | None = None,
        synthesis: SynthesisEngine | None = None,
        analyzer: PhonemeVisemeAnalyzer | None = None,
        voice_settings: VoiceSettings | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize speech I/O.

        Args:
            channel: Session event channel
            recognition: Speech-to-text engine, None when unavailable
            synthesis: Text-to-speech engine, None when unavailable
            analyzer: Viseme timeline builder
            voice_settings: Voice, pitch, rate and volume
            clock: Wall-clock source used to anchor viseme timelines
        """
        self.channel = channel
        self.recognition = recognition
        self.synthesis = synthesis
        self.analyzer = analyzer or PhonemeVisemeAnalyzer()
        self.voice_settings = voice_settings or VoiceSettings()
        self.clock = clock

        self.recognition_supported = recognition is not None and recognition.available
        self.synthesis_supported = synthesis is not None and synthesis.available
        self.error: str | None = None

        self.is_listening = False
        self.is_speaking = False
        self.transcript = ""
        self.visemes: list[WordViseme] = []

        self._listening = False
        self._final_transcript = ""
        self._interim_transcript = ""
        self._active_utterance: Utterance | None = None

        if self.recognition_supported:
            recognition.lang = self.voice_settings.lang
            recognition.on_result = self._handle_result
            recognition.on_end = self._handle_recognition_end
            recognition.on_error = self._handle_recognition_error
        else:
            logger.warning("Speech recognition is not supported")

        if not self.synthesis_supported:
            logger.warning("Speech synthesis is not supported")

    # Recognition

    def start_listening(self) -> bool:
        """
        Start a continuous recognition session.

        Returns:
            True if listening, False when recognition is unavailable or failed to start
        """
        if not self.recognition_supported:
            self._set_error("Speech recognition is not supported in this environment")
            return False

        if self._listening:
            return True

        self._final_transcript = ""
        self._interim_transcript = ""
        self.transcript = ""
        self._listening = True

        try:
            self.recognition.start()
        except CapabilityUnavailable as e:
            self._listening = False
            self.recognition_supported = False
            self._set_error(f"Speech recognition unavailable: {e}")
            return False
        except Exception as e:
            self._listening = False
            self._set_error(f"Failed to start speech recognition: {e}")
            return False

        self.is_listening = True
        logger.info("Listening started")
        return True

    def stop_listening(self) -> str:
        """
        Stop listening on purpose.

        ``SPEECH_END`` follows once the engine confirms the session ended.

        Returns:
            Transcript accumulated so far
        """
        transcript = self.transcript
        if not self._listening:
            return transcript

        self._listening = False
        try:
            self.recognition.stop()
        except Exception as e:
            self._set_error(f"Failed to stop speech recognition: {e}")
            self._end_recognition()

        logger.info(f"Listening stopped ({len(transcript)} chars)")
        return transcript

    def _handle_result(self, text: str, is_final: bool) -> None:
        if not self.is_listening:
            return

        if is_final:
            if text.strip():
                self._final_transcript += text.strip() + " "
            self._interim_transcript = ""
        else:
            self._interim_transcript = text.strip()

        self.transcript = (self._final_transcript + self._interim_transcript).strip()
        self.channel.publish(EventType.TRANSCRIPT, transcript=self.transcript, is_final=is_final)

    def _handle_recognition_end(self) -> None:
        if self._listening:
            logger.debug("Recognition ended by engine, restarting")
            try:
                self.recognition.start()
                return
            except Exception as e:
                self._listening = False
                self._set_error(f"Failed to restart speech recognition: {e}")

        self._end_recognition()

    def _end_recognition(self) -> None:
        if not self.is_listening:
            return
        self.is_listening = False
        self.channel.publish(EventType.SPEECH_END, transcript=self.transcript)

    def _handle_recognition_error(self, message: str) -> None:
        self._set_error(f"Speech recognition error: {message}")
        if message in FATAL_RECOGNITION_ERRORS:
            self.recognition_supported = False
            self._listening = False

    # Synthesis

    def get_voices(self) -> list[Voice]:
        if not self.synthesis_supported:
            return []
        try:
            return self.synthesis.get_voices()
        except Exception as e:
            self._set_error(f"Failed to list voices: {e}")
            return []

    def update_voice_settings(self, **changes) -> VoiceSettings:
        """Apply validated changes to the voice settings."""
        self.voice_settings = VoiceSettings.model_validate(
            {**self.voice_settings.model_dump(), **changes}
        )
        return self.voice_settings

    def select_voice(self) -> Voice | None:
        """
        Pick the synthesis voice.

        The configured voice name wins. Otherwise, for the configured language:
        a Google voice that is not "Female", then any non-"Female" voice, then
        any voice in that language, then the first voice offered.
        """
        voices = self.get_voices()
        if not voices:
            return None

        if self.voice_settings.voice:
            for voice in voices:
                if voice.name == self.voice_settings.voice:
                    return voice
            logger.warning(f"Voice {self.voice_settings.voice!r} not found, using preference chain")

        lang = self.voice_settings.lang.lower()

        def matches_lang(voice: Voice) -> bool:
            return voice.lang.replace("_", "-").lower() == lang

        preferences = [
            lambda v: matches_lang(v) and "Google" in v.name and "Female" not in v.name,
            lambda v: matches_lang(v) and "Female" not in v.name,
            matches_lang,
        ]
        for prefer in preferences:
            for voice in voices:
                if prefer(voice):
                    return voice

        return voices[0]

    def speak(self, text: str) -> UtteranceHandle:
        """
        Speak text, replacing anything currently being spoken.

        The viseme timeline is published before the engine receives the
        utterance. ``SPEAKING_ENDED`` is published once for this call unless a
        later ``speak`` supersedes it.

        Args:
            text: Text to speak

        Returns:
            Handle that cancels this utterance
        """
        if not self.synthesis_supported:
            self._set_error("Speech synthesis is not supported in this environment")
            self.channel.publish(EventType.SPEAKING_ENDED, text=text, skipped=True)
            return UtteranceHandle()

        self._active_utterance = None
        try:
            self.synthesis.cancel()
        except Exception as e:
            logger.warning(f"Failed to cancel previous utterance: {e}")

        utterance = Utterance(
            text=text,
            voice=self.select_voice(),
            lang=self.voice_settings.lang,
            rate=self.voice_settings.rate,
            pitch=self.voice_settings.pitch,
            volume=self.voice_settings.volume,
        )
        utterance.on_start = lambda: self._handle_utterance_start(utterance)
        utterance.on_end = lambda: self._finish_utterance(utterance)
        utterance.on_error = lambda message: self._finish_utterance(utterance, error=message)

        self._active_utterance = utterance
        self.is_speaking = True
        self.visemes = self.analyzer.analyze_text_to_phonemes(text, self.clock())
        self.channel.publish(EventType.VISEMES, timeline=self.visemes, text=text)

        try:
            self.synthesis.speak(utterance)
        except CapabilityUnavailable as e:
            self.synthesis_supported = False
            self._finish_utterance(utterance, error=f"Speech synthesis unavailable: {e}")
        except Exception as e:
            self._finish_utterance(utterance, error=f"Failed to speak: {e}")

        return UtteranceHandle(lambda: self._cancel_utterance(utterance))

    def _handle_utterance_start(self, utterance: Utterance) -> None:
        if utterance is not self._active_utterance:
            return
        self.channel.publish(EventType.SPEAKING_STARTED, text=utterance.text)

    def _finish_utterance(
        self, utterance: Utterance, error: str | None = None, cancelled: bool = False
    ) -> None:
        if utterance is not self._active_utterance:
            return

        self._active_utterance = None
        self.is_speaking = False
        self.visemes = []
        if error:
            self._set_error(error)

        self.channel.publish(EventType.VISEMES, timeline=[], text="")
        self.channel.publish(
            EventType.SPEAKING_ENDED, text=utterance.text, error=error, cancelled=cancelled
        )

    def _cancel_utterance(self, utterance: Utterance) -> None:
        if utterance is not self._active_utterance:
            return
        # Finish first so the engine's own interrupt callback is ignored
        self._finish_utterance(utterance, cancelled=True)
        try:
            self.synthesis.cancel()
        except Exception as e:
            logger.warning(f"Failed to cancel utterance: {e}")

    # Rendering

    def current_viseme(self, now: float | None = None) -> VisemeEvent | None:
        """Viseme to display at ``now`` (defaults to the clock)."""
        return sample(self.clock() if now is None else now, self.visemes)

    def close(self) -> None:
        """Stop listening and speaking."""
        if self._listening:
            self.stop_listening()
        if self._active_utterance is not None:
            self._cancel_utterance(self._active_utterance)

    def _set_error(self, message: str) -> None:
        self.error = message
        logger.error(message)
        self.channel.publish(EventType.SPEECH_ERROR, message=message)
