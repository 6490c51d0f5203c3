import asyncio
import threading
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from code_translate_reader.errors import SpeechUnavailableError
from code_translate_reader.speech import (
    PowerShellSpeechEngine,
    Pyttsx3SpeechEngine,
    SpeechEngine,
    build_powershell_script,
    create_speech_engine,
    escape_powershell,
    native_rate,
)


@pytest.mark.parametrize(
    ("speed", "rate"),
    [(1.0, 0), (2.0, 10), (0.0, -10), (1.5, 5), (0.5, -5), (1.25, 3), (0.75, -2)],
)
def test_native_rate(speed: float, rate: int) -> None:
    assert native_rate(speed) == rate


@pytest.mark.parametrize(("speed", "rate"), [(3.0, 10), (-1.0, -10)])
def test_native_rate_is_clamped(speed: float, rate: int) -> None:
    assert native_rate(speed) == rate


def test_escape_powershell() -> None:
    assert escape_powershell('say "hi"') == 'say `"hi`"'
    assert escape_powershell("cost $HOME") == "cost `$HOME"
    assert escape_powershell("a`b") == "a``b"


def test_build_powershell_script() -> None:
    script = build_powershell_script('read "this"', 2.0)
    lines = script.splitlines()
    assert lines[0] == "Add-Type -AssemblyName System.Speech"
    assert "$synth.Rate = 10" in lines
    assert '$synth.Speak("read `"this`"")' in lines
    assert lines[-1] == "$synth.Dispose()"


class TestCreateSpeechEngine:
    def test_windows_uses_powershell(self) -> None:
        engine = create_speech_engine("win32")
        assert isinstance(engine, PowerShellSpeechEngine)
        assert isinstance(engine, SpeechEngine)

    @pytest.mark.parametrize("platform", ["darwin", "linux"])
    def test_other_platforms_use_pyttsx3(self, platform: str) -> None:
        engine = create_speech_engine(platform)
        assert isinstance(engine, Pyttsx3SpeechEngine)
        assert engine.platform == platform


def _fake_process(returncode: int, stderr: bytes = b"") -> MagicMock:
    process = MagicMock()
    process.returncode = returncode
    process.communicate = AsyncMock(return_value=(b"", stderr))
    process.wait = AsyncMock(return_value=returncode)
    return process


class TestPowerShellSpeechEngine:
    async def test_runs_one_shot_script(self) -> None:
        process = _fake_process(0)

        with patch("asyncio.create_subprocess_exec", new=AsyncMock(return_value=process)) as mock_exec:
            await PowerShellSpeechEngine().speak("hello world", 1.5)

        args = mock_exec.call_args.args
        assert args[:4] == ("powershell", "-NoProfile", "-NonInteractive", "-Command")
        assert "$synth.Rate = 5" in args[4]
        assert '$synth.Speak("hello world")' in args[4]
        process.kill.assert_not_called()

    async def test_nonzero_exit_raises(self) -> None:
        process = _fake_process(1, stderr=b"Add-Type : Cannot find assembly")

        with patch("asyncio.create_subprocess_exec", new=AsyncMock(return_value=process)):
            with pytest.raises(SpeechUnavailableError, match="System.Speech"):
                await PowerShellSpeechEngine().speak("hello")

    async def test_missing_powershell_raises(self) -> None:
        with patch("asyncio.create_subprocess_exec", new=AsyncMock(side_effect=FileNotFoundError("powershell"))):
            with pytest.raises(SpeechUnavailableError, match="PowerShell"):
                await PowerShellSpeechEngine().speak("hello")

    async def test_process_killed_when_cancelled(self) -> None:
        process = _fake_process(0)
        process.returncode = None
        process.communicate = AsyncMock(side_effect=asyncio.CancelledError)

        with patch("asyncio.create_subprocess_exec", new=AsyncMock(return_value=process)):
            with pytest.raises(asyncio.CancelledError):
                await PowerShellSpeechEngine().speak("hello")

        process.kill.assert_called_once()
        process.wait.assert_awaited_once()


class TestPyttsx3SpeechEngine:
    async def test_speak_runs_sync_call(self) -> None:
        with patch("code_translate_reader.speech.Pyttsx3SpeechEngine._speak_sync") as mock_sync:
            await Pyttsx3SpeechEngine(platform="linux").speak("hello", 1.2)

        mock_sync.assert_called_once_with("hello", 1.2)

    def test_speak_sync_scales_default_rate(self) -> None:
        fake_engine = MagicMock()
        fake_engine.getProperty.return_value = 200

        with patch("pyttsx3.init", return_value=fake_engine):
            Pyttsx3SpeechEngine(platform="linux")._speak_sync("hello", 1.5)

        fake_engine.setProperty.assert_called_once_with("rate", 300)
        fake_engine.say.assert_called_once_with("hello")
        fake_engine.runAndWait.assert_called_once()

    async def test_cancel_stops_playback(self) -> None:
        released = threading.Event()
        fake_engine = MagicMock()
        fake_engine.getProperty.return_value = 200
        fake_engine.runAndWait.side_effect = lambda: released.wait(timeout=5)
        fake_engine.stop.side_effect = released.set
        speech = Pyttsx3SpeechEngine(platform="linux")

        with patch("pyttsx3.init", return_value=fake_engine):
            task = asyncio.create_task(speech.speak("a long paragraph"))
            while not fake_engine.runAndWait.called:
                await asyncio.sleep(0.01)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        fake_engine.stop.assert_called_once()
        assert released.is_set()

    @pytest.mark.parametrize(
        ("platform", "hint"),
        [("darwin", "macOS"), ("linux", "espeak or festival"), ("freebsd13", "system speech settings")],
    )
    async def test_failure_message_is_platform_specific(self, platform: str, hint: str) -> None:
        with patch(
            "code_translate_reader.speech.Pyttsx3SpeechEngine._speak_sync",
            side_effect=RuntimeError("driver not found"),
        ):
            with pytest.raises(SpeechUnavailableError, match=hint):
                await Pyttsx3SpeechEngine(platform=platform).speak("hello")

    def test_stop_without_playback_is_noop(self) -> None:
        Pyttsx3SpeechEngine(platform="linux").stop()
