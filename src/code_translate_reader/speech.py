import asyncio
import logging
import math
import sys
from typing import Any, Protocol, runtime_checkable

from code_translate_reader.errors import SpeechUnavailableError

logger = logging.getLogger(__name__)

MIN_NATIVE_RATE = -10
MAX_NATIVE_RATE = 10


@runtime_checkable
class SpeechEngine(Protocol):
    async def speak(self, text: str, speed: float = 1.0) -> None: ...

    def stop(self) -> None: ...


def native_rate(speed: float) -> int:
    """Map a speed multiplier (1.0 = normal) onto System.Speech's -10..10 rate scale."""
    rate = math.floor((speed - 1) * 10 + 0.5)
    return max(MIN_NATIVE_RATE, min(MAX_NATIVE_RATE, rate))


def escape_powershell(text: str) -> str:
    """Escape text for a double-quoted PowerShell string literal."""
    return text.replace("`", "``").replace('"', '`"').replace("$", "`$")


def build_powershell_script(text: str, speed: float) -> str:
    return "\n".join(
        [
            "Add-Type -AssemblyName System.Speech",
            "$synth = New-Object System.Speech.Synthesis.SpeechSynthesizer",
            f"$synth.Rate = {native_rate(speed)}",
            f'$synth.Speak("{escape_powershell(text)}")',
            "$synth.Dispose()",
        ]
    )


class PowerShellSpeechEngine:
    """Speaks through Windows' built-in System.Speech, one PowerShell process per call."""

    failure_message = (
        "Windows speech failed, make sure PowerShell may run commands "
        "and System.Speech is installed"
    )

    def __init__(self, executable: str = "powershell") -> None:
        self.executable = executable
        self._process: asyncio.subprocess.Process | None = None

    async def speak(self, text: str, speed: float = 1.0) -> None:
        script = build_powershell_script(text, speed)
        try:
            process = await asyncio.create_subprocess_exec(
                self.executable,
                "-NoProfile",
                "-NonInteractive",
                "-Command",
                script,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.debug("Could not start %s: %s", self.executable, e)
            raise SpeechUnavailableError(self.failure_message) from e

        self._process = process
        try:
            _, stderr = await process.communicate()
        finally:
            self._process = None
            if process.returncode is None:
                process.kill()
                await process.wait()

        if process.returncode != 0:
            logger.debug(
                "PowerShell speech exited with %s: %s",
                process.returncode,
                stderr.decode(errors="replace").strip() if stderr else "",
            )
            raise SpeechUnavailableError(self.failure_message)

    def stop(self) -> None:
        if self._process is not None and self._process.returncode is None:
            self._process.kill()


def _library_failure_message(platform: str) -> str:
    if platform == "darwin":
        return "Speech failed, make sure speech is enabled in macOS"
    if platform.startswith("linux"):
        return "Speech failed, make sure espeak or festival is installed"
    return "Speech failed, check your system speech settings"


class Pyttsx3SpeechEngine:
    """Speaks through pyttsx3 using the system default voice.

    pyttsx3 blocks until playback finishes, so each call runs in a worker thread.
    """

    def __init__(self, platform: str = sys.platform) -> None:
        self.platform = platform
        self._engine: Any = None

    async def speak(self, text: str, speed: float = 1.0) -> None:
        try:
            await asyncio.to_thread(self._speak_sync, text, speed)
        except asyncio.CancelledError:
            # the worker thread keeps running until the engine is told to stop
            self.stop()
            raise
        except SpeechUnavailableError:
            raise
        except Exception as e:
            logger.debug("Speech failed: %s", e)
            raise SpeechUnavailableError(_library_failure_message(self.platform)) from e

    def _speak_sync(self, text: str, speed: float) -> None:
        import pyttsx3

        engine = pyttsx3.init()
        self._engine = engine
        try:
            engine.setProperty("rate", int(engine.getProperty("rate") * speed))
            engine.say(text)
            engine.runAndWait()
        finally:
            self._engine = None

    def stop(self) -> None:
        if self._engine is not None:
            self._engine.stop()


def create_speech_engine(platform: str = sys.platform) -> SpeechEngine:
    if platform == "win32":
        logger.debug("Using PowerShell System.Speech engine")
        return PowerShellSpeechEngine()
    logger.debug("Using pyttsx3 speech engine on %s", platform)
    return Pyttsx3SpeechEngine(platform=platform)
