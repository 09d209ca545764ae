"""Speech recognition, synthesis and viseme timing."""

from interview_engine.speech.exceptions import CapabilityUnavailable, SpeechError
from interview_engine.speech.speech_io import SpeechIO, UtteranceHandle
from interview_engine.speech.visemes import PhonemeVisemeAnalyzer, VisemeEvent, WordViseme, sample

__all__ = [
    "CapabilityUnavailable",
    "PhonemeVisemeAnalyzer",
    "SpeechError",
    "SpeechIO",
    "UtteranceHandle",
    "VisemeEvent",
    "WordViseme",
    "sample",
]
