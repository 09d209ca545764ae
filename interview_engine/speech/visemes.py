"""
Text to timed viseme sequence.

Each word gets an estimated duration from its length, is split into phonemes
(digraphs first), and its span is cut into equal slices: a leading silence,
one slice per phoneme, and a trailing silence. Times are absolute, anchored to
the moment synthesis starts, so a renderer can look up the current mouth shape
from wall-clock time alone with ``sample()``.
"""

import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

SECONDS_PER_CHARACTER = 0.05
WORD_BASE_DURATION = 0.1
WORD_GAP = 0.1

SILENCE = "sil"
OPEN_MOUTH = "aa"

DIGRAPHS = ("th", "sh", "ch", "ph", "wh", "ng")

PHONEME_TO_VISEME = {
    # Silence and punctuation
    "": SILENCE,
    " ": SILENCE,
    ".": SILENCE,
    ",": SILENCE,
    "?": SILENCE,
    "!": SILENCE,
    ";": SILENCE,
    ":": SILENCE,
    # Bilabials
    "p": "PP",
    "b": "PP",
    "m": "PP",
    # Labiodentals
    "f": "FF",
    "v": "FF",
    "ph": "FF",
    # Dentals
    "th": "TH",
    "dh": "TH",
    # Alveolars
    "t": "DD",
    "d": "DD",
    "l": "DD",
    "n": "nn",
    "ng": "nn",
    "s": "SS",
    "z": "SS",
    # Postalveolars
    "sh": "CH",
    "zh": "CH",
    "ch": "CH",
    "j": "CH",
    # Velars
    "k": "kk",
    "g": "kk",
    "h": "kk",
    "c": "kk",
    "q": "kk",
    "x": "kk",
    # Approximants
    "r": "RR",
    "w": "RR",
    "wh": "RR",
    "y": "I",
    # Vowels
    "a": "aa",
    "e": "E",
    "i": "I",
    "o": "O",
    "u": "U",
}


@dataclass(frozen=True)
class VisemeEvent:
    """One mouth shape held over ``[start, end)`` (absolute seconds)."""

    type: str
    start: float
    end: float

    def contains(self, timestamp: float) -> bool:
        return self.start <= timestamp < self.end


@dataclass
class WordViseme:
    """Timed viseme sequence for a single word."""

    word: str
    start: float
    end: float
    visemes: list[VisemeEvent] = field(default_factory=list)


def word_duration(word: str) -> float:
    """Estimated spoken duration of a word in seconds."""
    return len(word) * SECONDS_PER_CHARACTER + WORD_BASE_DURATION


def split_phonemes(word: str) -> list[str]:
    """
    Split a word into phonemes, longest match first.

    Args:
        word: Word to split (case-insensitive)

    Returns:
        Phoneme strings in order
    """
    lowered = word.lower()
    phonemes = []
    i = 0
    while i < len(lowered):
        pair = lowered[i : i + 2]
        if pair in DIGRAPHS:
            phonemes.append(pair)
            i += 2
        else:
            phonemes.append(lowered[i])
            i += 1
    return phonemes


def phoneme_to_viseme(phoneme: str) -> str:
    return PHONEME_TO_VISEME.get(phoneme, OPEN_MOUTH)


class PhonemeVisemeAnalyzer:
    """Deterministic text to viseme timeline transform."""

    def analyze_text_to_phonemes(self, text: str, reference_time: float) -> list[WordViseme]:
        """
        Build the viseme timeline for a piece of text.

        Args:
            text: Text about to be spoken
            reference_time: Wall-clock second at which playback begins

        Returns:
            One WordViseme per word, in order
        """
        timeline = []
        current_time = reference_time

        for word in text.split():
            duration = word_duration(word)
            start = current_time
            end = start + duration

            visemes = [SILENCE]
            visemes.extend(phoneme_to_viseme(p) for p in split_phonemes(word))
            visemes.append(SILENCE)

            timeline.append(
                WordViseme(word=word, start=start, end=end, visemes=self._tile(visemes, start, end))
            )
            current_time = end + WORD_GAP

        logger.debug(f"Built viseme timeline: {len(timeline)} words")
        return timeline

    def _tile(self, visemes: list[str], start: float, end: float) -> list[VisemeEvent]:
        """Lay visemes on equal, contiguous slices of ``[start, end)``."""
        slice_duration = (end - start) / len(visemes)
        # The last boundary is pinned to end so float error cannot open a gap
        boundaries = [start + k * slice_duration for k in range(len(visemes))] + [end]

        return [
            VisemeEvent(type=viseme, start=boundaries[k], end=boundaries[k + 1])
            for k, viseme in enumerate(visemes)
        ]


def sample(now: float, timeline: list[WordViseme]) -> VisemeEvent | None:
    """
    Viseme active at ``now``, or None between words and outside the timeline.

    Args:
        now: Wall-clock second
        timeline: Timeline from ``PhonemeVisemeAnalyzer``

    Returns:
        Active VisemeEvent or None
    """
    for word in timeline:
        if now < word.start:
            return None
        if now < word.end:
            for event in word.visemes:
                if event.contains(now):
                    return event
            return None
    return None


def timeline_end(timeline: list[WordViseme]) -> float | None:
    """End time of the last word, or None for an empty timeline."""
    return timeline[-1].end if timeline else None
