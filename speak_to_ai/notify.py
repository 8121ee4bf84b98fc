"""Desktop notifications through notify-send."""

from __future__ import annotations

import shutil
import subprocess


class NotificationError(Exception):
    """A notification could not be sent."""


class NotificationManager:
    """Sends desktop notifications for an application."""

    def __init__(self, app_name: str) -> None:
        self.app_name = app_name

    def notify_start_recording(self) -> None:
        self._send("🎤 Speak-to-AI", "Recording started", "notification-microphone-sensitivity-high")

    def notify_stop_recording(self) -> None:
        self._send("🛑 Recording stopped", "Transcribing audio...", "notification-microphone-sensitivity-muted")

    def notify_transcription_complete(self) -> None:
        self._send("✅ Transcription complete", "Text copied to clipboard", "edit-copy")

    def notify_error(self, message: str) -> None:
        self._send("❌ Error", message, "dialog-error")

    def show_notification(self, summary: str, body: str) -> None:
        self._send(summary, body, "dialog-information")

    def _send(self, summary: str, body: str, icon: str) -> None:
        cmd = ["notify-send", "--app-name", self.app_name, "--icon", icon, summary, body]
        try:
            subprocess.run(cmd, check=True)
        except (OSError, subprocess.CalledProcessError) as exc:
            raise NotificationError(f"failed to send notification: {exc}") from exc

    def is_available(self) -> bool:
        return shutil.which("notify-send") is not None