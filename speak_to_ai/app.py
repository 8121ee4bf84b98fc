"""The daemon: wiring recording, transcription, output and notifications together."""

from __future__ import annotations

import asyncio
import os
import signal
import subprocess
import threading
import time
from concurrent.futures import CancelledError
from dataclasses import dataclass, field
from typing import Any, Callable

from .config import Config
from .logger import DefaultLogger, Logger
from .model_manager import ModelError
from .notify import NotificationError
from .output_factory import EnvironmentType
from .outputs import OutputError
from .platform import Environment, ensure_directory_exists

TRANSCRIPTION_TIMEOUT = 120.0
_SERVER_STOP_TIMEOUT = 10.0
_POLL_INTERVAL = 0.05

_ENVIRONMENT_MAP = {
    Environment.X11: EnvironmentType.X11,
    Environment.WAYLAND: EnvironmentType.WAYLAND,
}


def level_tooltip(level: float) -> str:
    """Tray tooltip showing an audio level as a ten-cell bar and a percentage."""
    percentage = min(int(level * 100), 100)
    full = max(0, min(percentage // 10, 10))
    bar = "█" * full + "░" * (10 - full)
    return f"🎤 Recording... Level: {bar} {percentage}%"


@dataclass
class App:
    """The application and all of its components."""

    logger: Logger | None = None
    config: Config | None = None
    config_file: str = ""
    environment: Environment | None = None
    model_manager: Any = None
    recorder: Any = None
    whisper_engine: Any = None
    output_manager: Any = None
    hotkey_manager: Any = None
    websocket_server: Any = None
    tray_manager: Any = None
    notify_manager: Any = None
    last_transcript: str = ""
    transcription_timeout: float = TRANSCRIPTION_TIMEOUT
    _shutdown: threading.Event = field(default_factory=threading.Event, init=False, repr=False)
    _server_loop: asyncio.AbstractEventLoop | None = field(default=None, init=False, repr=False)
    _server_thread: threading.Thread | None = field(default=None, init=False, repr=False)

    # -- small helpers -------------------------------------------------

    @property
    def _log(self) -> Logger:
        return self.logger if self.logger is not None else DefaultLogger()

    @property
    def cancelled(self) -> bool:
        return self._shutdown.is_set()

    def _tooltip(self, text: str) -> None:
        if self.tray_manager is not None:
            self.tray_manager.set_tooltip(text)

    def _notify(self, send: Callable[[Any], None]) -> None:
        if self.notify_manager is None:
            return
        try:
            send(self.notify_manager)
        except NotificationError as exc:
            self._log.debug("Notification failed: %s", exc)

    # -- recording -----------------------------------------------------

    def handle_start_recording(self) -> None:
        """Make sure a model is available, then start recording."""
        self._log.info("Starting recording...")
        try:
            self.ensure_model_available()
        except ModelError as exc:
            self._log.error("Model not available: %s", exc)
            self._tooltip("❌ Model unavailable")
            raise ModelError(f"model not available: {exc}") from exc

        self.recorder.set_audio_level_callback(self._on_audio_level)

        try:
            self.recorder.start_recording()
        except Exception as exc:
            raise RuntimeError(f"failed to start recording: {exc}") from exc

        if self.tray_manager is not None:
            self.tray_manager.set_recording_state(True)
        self._notify(lambda n: n.notify_start_recording())

    def _on_audio_level(self, level: float) -> None:
        self._tooltip(level_tooltip(level))
        self._log.debug("Audio level: %.2f", level)

    def handle_stop_recording_and_transcribe(self) -> threading.Thread:
        """Stop recording and transcribe in the background; return the worker thread."""
        self._log.info("Stopping recording and transcribing...")
        try:
            audio_file = self.recorder.stop_recording()
        except Exception as exc:
            raise RuntimeError(f"failed to stop recording: {exc}") from exc

        if self.tray_manager is not None:
            self.tray_manager.set_recording_state(False)
            self.tray_manager.set_tooltip("🔄 Transcribing...")
        self._notify(lambda n: n.notify_stop_recording())

        worker = threading.Thread(
            target=self.transcribe, args=(audio_file,), daemon=True, name="transcription"
        )
        worker.start()
        return worker

    def transcribe(self, audio_file: str) -> None:
        """Transcribe a file, giving up on timeout or when the app is cancelled."""
        outcome: dict[str, Any] = {}
        finished = threading.Event()

        def work() -> None:
            try:
                if self.whisper_engine is None:
                    raise RuntimeError("whisper engine not initialized")
                outcome["text"] = self.whisper_engine.transcribe(audio_file)
            except Exception as exc:
                outcome["error"] = exc
            finally:
                finished.set()

        threading.Thread(target=work, daemon=True, name="whisper").start()

        deadline = time.monotonic() + self.transcription_timeout
        while not finished.wait(_POLL_INTERVAL):
            if self._shutdown.is_set():
                self.handle_transcription_cancellation(CancelledError("context canceled"))
                return
            if time.monotonic() >= deadline:
                self.handle_transcription_cancellation(TimeoutError("context deadline exceeded"))
                return

        self.handle_transcription_result(outcome.get("text", ""), outcome.get("error"))

    def handle_transcription_result(self, transcript: str, error: BaseException | None) -> None:
        if error is not None:
            self._tooltip("❌ Transcription failed")
            self._notify(lambda n: n.show_notification("Error", f"Transcription failed: {error}"))
            self._log.error("Failed to transcribe audio: %s", error)
            return

        self.last_transcript = transcript

        if self.output_manager is not None:
            try:
                self.output_manager.type_to_active_window(transcript)
            except OutputError as exc:
                self._log.warning("Failed to type to active window: %s", exc)

        self._tooltip("✅ Ready")
        self._notify(lambda n: n.notify_transcription_complete())
        self._log.info("Transcription completed: %s", transcript)

    def handle_transcription_cancellation(self, error: BaseException | None) -> None:
        self._log.warning("Transcription cancelled: %s", error)
        self._tooltip("⚠️  Transcription cancelled")
        self._notify(lambda n: n.show_notification("Cancelled", "Transcription was cancelled"))

    # -- configuration -------------------------------------------------

    def handle_show_config(self) -> subprocess.Popen:
        """Open the configuration file in $EDITOR (or xdg-open); return the process."""
        path = self.config_file
        self._log.info("Opening configuration file: %s", path)
        self._notify(lambda n: n.show_notification("Configuration File", f"Opening: {path}"))

        editor = os.environ.get("EDITOR", "")
        if not editor:
            editor = "xdg-open"
            self._log.debug("$EDITOR not set, using xdg-open as fallback")
        else:
            self._log.debug("Using editor from $EDITOR: %s", editor)

        if not os.path.exists(path):
            message = f"Configuration file not found: {path}"
            self._log.error(message)
            self._notify(lambda n: n.show_notification("Error", message))
            raise FileNotFoundError(f"config file not found: {path}")

        streams: dict[str, Any] = {}
        if editor == "xdg-open":
            streams = {
                "stdin": subprocess.DEVNULL,
                "stdout": subprocess.DEVNULL,
                "stderr": subprocess.DEVNULL,
            }
        try:
            process = subprocess.Popen([editor, path], **streams)
        except OSError as exc:
            message = f"Failed to open config file with {editor}: {exc}"
            self._log.error(message)
            self._notify(lambda n: n.show_notification("Error", message))
            raise OSError(f"failed to open config file: {exc}") from exc

        self._log.info("Successfully opened config file with %s", editor)
        return process

    def ensure_model_available(self) -> None:
        """Make sure the model is present, downloading it with progress if needed."""
        if self.model_manager is None:
            raise ModelError("model manager not initialized")
        try:
            self.model_manager.get_model_path(None)
            return
        except ModelError:
            pass

        self._log.info("Model not found, downloading...")
        self._notify(
            lambda n: n.show_notification("Speak-to-AI", "Downloading Whisper model for first use...")
        )

        def progress(downloaded: int, total: int, percentage: float) -> None:
            self._log.info(
                "Download progress: %.1f%% (%.1f MB / %.1f MB)",
                percentage,
                downloaded / (1024 * 1024),
                total / (1024 * 1024),
            )
            self._tooltip(f"📥 Downloading model: {percentage:.1f}%")

        try:
            model_path = self.model_manager.get_model_path(progress)
        except ModelError as exc:
            self._tooltip("❌ Model download failed")
            raise ModelError(f"failed to download model: {exc}") from exc

        self._notify(lambda n: n.show_notification("Speak-to-AI", "Model downloaded successfully!"))
        self._tooltip("✅ Ready")
        self._log.info("Model downloaded successfully: %s", model_path)

    def ensure_directories(self) -> None:
        """Create the model and temporary-audio directories, warning on failure."""
        general = self.config.general
        models_dir = os.path.dirname(general.model_path) or "."
        try:
            ensure_directory_exists(models_dir)
        except OSError as exc:
            self._log.warning("Failed to create models directory: %s", exc)
        try:
            ensure_directory_exists(general.temp_audio_path)
        except OSError as exc:
            self._log.warning("Failed to create temp directory: %s", exc)

    def convert_environment_type(self) -> EnvironmentType:
        return _ENVIRONMENT_MAP.get(self.environment, EnvironmentType.UNKNOWN)

    # -- lifecycle -----------------------------------------------------

    def cancel(self) -> None:
        """Ask the application to shut down."""
        self._shutdown.set()

    def register_callbacks(self) -> None:
        self.hotkey_manager.register_callbacks(
            self.handle_start_recording, self.handle_stop_recording_and_transcribe
        )

    def run_and_wait(self) -> None:
        """Start every component, block until cancelled or signalled, then shut down."""
        if self.config is not None and self.config.web_server.enabled and self.websocket_server is not None:
            self._start_web_server()

        if self.tray_manager is not None:
            self.tray_manager.start()

        if self.hotkey_manager is not None:
            self.register_callbacks()
            try:
                self.hotkey_manager.start()
            except Exception as exc:
                self._log.warning("Failed to start hotkey manager: %s", exc)

        self._log.info("Speak-to-AI is ready to use!")

        def on_signal(signum: int, frame: Any) -> None:
            self._log.info("Shutdown signal received: %s", signal.Signals(signum).name)
            self.cancel()

        previous: dict[int, Any] = {}
        if threading.current_thread() is threading.main_thread():
            for sig in (signal.SIGINT, signal.SIGTERM):
                previous[sig] = signal.signal(sig, on_signal)
        try:
            while not self._shutdown.wait(0.5):
                pass
        finally:
            for sig, handler in previous.items():
                signal.signal(sig, handler)

        self.shutdown()

    def shutdown(self) -> None:
        """Stop every component and release resources."""
        self._log.info("Shutting down...")

        if self.hotkey_manager is not None:
            self.hotkey_manager.stop()

        self._stop_web_server()

        if self.tray_manager is not None:
            self.tray_manager.stop()

        if self.recorder is not None:
            try:
                self.recorder.cleanup_file()
            except Exception as exc:
                self._log.warning("Failed to cleanup temporary file: %s", exc)

        if self.whisper_engine is not None:
            try:
                self.whisper_engine.close()
            except Exception as exc:
                self._log.warning("Failed to close whisper engine: %s", exc)

        self._log.info("Daemon shutdown complete")

    def _start_web_server(self) -> None:
        loop = asyncio.new_event_loop()
        ready = threading.Event()

        def run() -> None:
            asyncio.set_event_loop(loop)
            try:
                loop.run_until_complete(self.websocket_server.start())
            except Exception as exc:
                self._log.error("WebSocket server error: %s", exc)
            finally:
                ready.set()
            loop.run_forever()
            loop.close()

        thread = threading.Thread(target=run, daemon=True, name="websocket-server")
        thread.start()
        ready.wait()
        self._server_loop, self._server_thread = loop, thread

    def _stop_web_server(self) -> None:
        loop, thread = self._server_loop, self._server_thread
        if loop is None or thread is None:
            return
        try:
            future = asyncio.run_coroutine_threadsafe(self.websocket_server.stop(), loop)
            future.result(timeout=_SERVER_STOP_TIMEOUT)
        except Exception as exc:
            self._log.error("Error shutting down WebSocket server: %s", exc)
        loop.call_soon_threadsafe(loop.stop)
        thread.join(timeout=_SERVER_STOP_TIMEOUT)
        self._server_loop = self._server_thread = None