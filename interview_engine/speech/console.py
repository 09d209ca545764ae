"""
Terminal speech engines.

The interviewer "speaks" by printing, and the participant "talks" by typing
lines. Useful for running an interview without audio hardware.
"""

import asyncio
import logging
import sys
import threading
from typing import TextIO

from interview_engine.speech.engines import RecognitionEngine, SynthesisEngine, Utterance, Voice
from interview_engine.speech.visemes import WORD_GAP, word_duration

logger = logging.getLogger(__name__)

CONSOLE_VOICE = Voice(name="Console", lang="en-US", default=True)


class ConsoleSynthesisEngine(SynthesisEngine):
    """Prints utterances and ends them after their estimated spoken duration."""

    def __init__(self, output: TextIO | None = None, realtime: bool = True):
        self.output = output or sys.stdout
        self.realtime = realtime
        self._pending: asyncio.TimerHandle | None = None
        self._current: Utterance | None = None

    def get_voices(self) -> list[Voice]:
        return [CONSOLE_VOICE]

    def speak(self, utterance: Utterance) -> None:
        loop = asyncio.get_running_loop()
        self._current = utterance

        print(f"\nInterviewer: {utterance.text}", file=self.output, flush=True)
        if utterance.on_start:
            loop.call_soon(utterance.on_start)

        words = utterance.text.split()
        duration = sum(word_duration(w) + WORD_GAP for w in words) / max(utterance.rate, 0.1)
        self._pending = loop.call_later(duration if self.realtime else 0, self._complete, utterance)

    def _complete(self, utterance: Utterance) -> None:
        if utterance is not self._current:
            return
        self._current = None
        self._pending = None
        if utterance.on_end:
            utterance.on_end()

    def cancel(self) -> None:
        utterance = self._current
        if self._pending is not None:
            self._pending.cancel()
        self._pending = None
        self._current = None
        if utterance is not None and utterance.on_error:
            utterance.on_error("interrupted")


class ConsoleRecognitionEngine(RecognitionEngine):
    """
    Treats each line typed on stdin as a final recognition result.

    A single background reader owns stdin for the engine's lifetime; lines
    typed while not listening are buffered for the next session.
    """

    def __init__(self, input_stream: TextIO | None = None, prompt: str = "You: "):
        super().__init__()
        self.input_stream = input_stream or sys.stdin
        self.prompt = prompt
        self._lines: asyncio.Queue[str | None] = asyncio.Queue()
        self._reader: threading.Thread | None = None
        self._session: asyncio.Task | None = None

    def start(self) -> None:
        loop = asyncio.get_running_loop()
        if self._reader is None:
            # Daemon thread so a pending readline never blocks interpreter exit
            self._reader = threading.Thread(target=self._read_stdin, args=(loop,), daemon=True)
            self._reader.start()
        if self._session is None or self._session.done():
            print(self.prompt, end="", flush=True)
            self._session = loop.create_task(self._deliver_lines())

    def stop(self) -> None:
        if self._session is not None and not self._session.done():
            self._session.cancel()
        self._session = None
        asyncio.get_running_loop().call_soon(self._emit_end)

    def _read_stdin(self, loop: asyncio.AbstractEventLoop) -> None:
        while True:
            line = self.input_stream.readline()
            item = line.rstrip("\n") if line else None
            try:
                loop.call_soon_threadsafe(self._lines.put_nowait, item)
            except RuntimeError:
                # Event loop already closed
                return
            if item is None:
                return

    async def _deliver_lines(self) -> None:
        while True:
            line = await self._lines.get()
            if line is None:
                # stdin closed; keep the marker for later sessions
                self._lines.put_nowait(None)
                self._emit_error("audio-capture")
                self._emit_end()
                return
            if line.strip():
                self._emit_result(line, True)

    async def aclose(self) -> None:
        if self._session is not None and not self._session.done():
            self._session.cancel()
        self._session = None
