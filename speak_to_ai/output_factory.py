"""Choosing an outputter from configuration and environment."""

from __future__ import annotations

from enum import Enum

from .config import Config
from .outputs import ClipboardOutputter, CombinedOutputter, OutputError, Outputter, TypeOutputter


class EnvironmentType(str, Enum):
    X11 = "X11"
    WAYLAND = "Wayland"
    UNKNOWN = "Unknown"


class OutputFactory:
    """Builds outputters from a configuration."""

    def __init__(self, config: Config | None) -> None:
        self.config = config

    def resolve_tools(self, env: EnvironmentType | str) -> tuple[str, str]:
        """Return (clipboard_tool, type_tool), resolving "auto" for the environment."""
        if self.config is None:
            raise OutputError("no configuration given")
        wayland = env == EnvironmentType.WAYLAND
        clipboard_tool = self.config.output.clipboard_tool
        if clipboard_tool == "auto":
            clipboard_tool = "wl-copy" if wayland else "xclip"
        type_tool = self.config.output.type_tool
        if type_tool == "auto":
            type_tool = "wl-keyboard" if wayland else "xdotool"
        return clipboard_tool, type_tool

    def get_outputter(self, env: EnvironmentType | str) -> Outputter:
        clipboard_tool, type_tool = self.resolve_tools(env)
        mode = self.config.output.default_mode
        if mode == "clipboard":
            return ClipboardOutputter(clipboard_tool)
        if mode == "active_window":
            return TypeOutputter(type_tool)
        return CombinedOutputter(clipboard_tool, type_tool)


def get_outputter_from_config(config: Config | None, env: EnvironmentType | str) -> Outputter:
    return OutputFactory(config).get_outputter(env)