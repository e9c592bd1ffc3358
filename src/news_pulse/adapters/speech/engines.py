"""Speech engine adapters."""

import asyncio
import logging
import textwrap
from typing import Optional, Sequence

from news_pulse.core import SpeechEngine, SpeechError, Voice

logger = logging.getLogger(__name__)

BASE_WORDS_PER_MINUTE = 175


class ConsoleSpeechEngine(SpeechEngine):
    """Print segments instead of speaking them.

    pause_per_word simulates speaking time (seconds per word at rate 1.0).
    """

    def __init__(
        self,
        voices: Sequence[Voice] = (),
        pause_per_word: float = 0.0,
        width: int = 78,
    ) -> None:
        self._voices = list(voices)
        self.pause_per_word = pause_per_word
        self.width = width

    def voices(self) -> list[Voice]:
        return list(self._voices)

    async def speak(self, text: str, voice: Optional[Voice], rate: float) -> None:
        print(textwrap.fill(f"🔊 {text}", width=self.width, subsequent_indent="   "))
        delay = self.pause_per_word * len(text.split()) / rate
        await asyncio.sleep(delay)

    def cancel(self) -> None:
        pass


class CommandSpeechEngine(SpeechEngine):
    """Speak through an external TTS program such as espeak-ng or say.

    The argv template may use {text}, {voice}, {rate} and {wpm}. When it does
    not contain {text}, the text is written to the program's stdin.
    """

    def __init__(self, command: Sequence[str], voices: Sequence[Voice] = ()) -> None:
        if not command:
            raise ValueError("Speech command cannot be empty")
        self.command = list(command)
        self._voices = list(voices)
        self._process: Optional[asyncio.subprocess.Process] = None

    def voices(self) -> list[Voice]:
        return list(self._voices)

    def build_args(self, text: str, voice: Optional[Voice], rate: float) -> list[str]:
        values = {
            "text": text,
            "voice": voice.name if voice else "",
            "rate": f"{rate:g}",
            "wpm": str(int(BASE_WORDS_PER_MINUTE * rate)),
        }
        args = []
        for part in self.command:
            formatted = part.format(**values)
            # Text starting with "-" would be parsed as an option
            if part.startswith("{text}") and formatted.startswith("-"):
                formatted = " " + formatted
            # Drop options whose value is an empty voice
            if formatted == "" and "{voice}" in part:
                if args and args[-1].startswith("-"):
                    args.pop()
                continue
            args.append(formatted)
        return args

    async def speak(self, text: str, voice: Optional[Voice], rate: float) -> None:
        args = self.build_args(text, voice, rate)
        use_stdin = not any("{text}" in part for part in self.command)

        try:
            self._process = await asyncio.create_subprocess_exec(
                *args,
                stdin=asyncio.subprocess.PIPE if use_stdin else asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise SpeechError(f"Cannot start {args[0]}: {e}") from e

        process = self._process
        try:
            _, stderr = await process.communicate(text.encode("utf-8") if use_stdin else None)
        except asyncio.CancelledError:
            self.cancel()
            raise
        finally:
            self._process = None

        if process.returncode != 0:
            message = stderr.decode("utf-8", "ignore").strip() if stderr else ""
            raise SpeechError(f"{args[0]} exited with {process.returncode}: {message}")

    def cancel(self) -> None:
        process = self._process
        if process is not None and process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass
