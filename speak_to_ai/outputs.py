"""Delivering text to the clipboard or the focused window."""

from __future__ import annotations

import shutil
import subprocess
from abc import ABC, abstractmethod


class OutputError(Exception):
    """Text could not be delivered."""


class Outputter(ABC):
    @abstractmethod
    def copy_to_clipboard(self, text: str) -> None: ...

    @abstractmethod
    def type_to_active_window(self, text: str) -> None: ...


class ClipboardOutputter(Outputter):
    """Copies text using xclip or wl-copy."""

    def __init__(self, clipboard_tool: str) -> None:
        if shutil.which(clipboard_tool) is None:
            raise OutputError(f"clipboard tool not found: {clipboard_tool}")
        self.clipboard_tool = clipboard_tool

    def copy_to_clipboard(self, text: str) -> None:
        if self.clipboard_tool == "xclip":
            cmd = ["xclip", "-selection", "clipboard"]
        elif self.clipboard_tool == "wl-copy":
            cmd = ["wl-copy"]
        else:
            raise OutputError(f"unsupported clipboard tool: {self.clipboard_tool}")
        try:
            subprocess.run(cmd, input=text.encode(), check=True)
        except (OSError, subprocess.CalledProcessError) as exc:
            raise OutputError(f"failed to copy to clipboard: {exc}") from exc

    def type_to_active_window(self, text: str) -> None:
        raise OutputError("typing to active window not supported by clipboard outputter")


class TypeOutputter(Outputter):
    """Types text into the active window with xdotool."""

    def __init__(self, type_tool: str) -> None:
        if shutil.which(type_tool) is None:
            raise OutputError(f"type tool not found: {type_tool}")
        self.type_tool = type_tool

    def type_to_active_window(self, text: str) -> None:
        if self.type_tool != "xdotool":
            raise OutputError(f"unsupported typing tool: {self.type_tool}")
        cmd = ["xdotool", "type", "--clearmodifiers", text]
        try:
            subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, check=True)
        except subprocess.CalledProcessError as exc:
            output = (exc.output or b"").decode(errors="replace")
            raise OutputError(f"failed to type text: {exc}, output: {output}") from exc
        except OSError as exc:
            raise OutputError(f"failed to type text: {exc}, output: ") from exc

    def copy_to_clipboard(self, text: str) -> None:
        raise OutputError("copying to clipboard not supported by type outputter")


class CombinedOutputter(Outputter):
    """Clipboard and typing together."""

    def __init__(self, clipboard_tool: str, type_tool: str) -> None:
        try:
            self.clipboard = ClipboardOutputter(clipboard_tool)
        except OutputError as exc:
            raise OutputError(f"failed to create clipboard outputter: {exc}") from exc
        try:
            self.typer = TypeOutputter(type_tool)
        except OutputError as exc:
            raise OutputError(f"failed to create type outputter: {exc}") from exc

    def copy_to_clipboard(self, text: str) -> None:
        self.clipboard.copy_to_clipboard(text)

    def type_to_active_window(self, text: str) -> None:
        self.typer.type_to_active_window(text)