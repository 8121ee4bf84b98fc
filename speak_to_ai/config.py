"""Application configuration model."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class GeneralSettings:
    """General application settings."""

    debug: bool = False
    model_path: str = ""
    model_type: str = ""
    model_precision: str = ""
    language: str = ""
    temp_audio_path: str = ""


@dataclass
class HotkeySettings:
    """Hotkey bindings."""

    start_recording: str = ""
    stop_recording: str = ""


@dataclass
class AudioSettings:
    """Audio capture settings."""

    device: str = ""
    sample_rate: int = 0
    recording_method: str = ""
    channels: int = 0


@dataclass
class OutputSettings:
    """How transcribed text is delivered."""

    default_mode: str = ""
    clipboard_tool: str = ""
    type_tool: str = ""


@dataclass
class WebServerSettings:
    """WebSocket server settings."""

    enabled: bool = False
    port: int = 0
    host: str = ""
    auth_token: str = ""
    api_version: str = ""
    log_requests: bool = False
    cors_origins: str = ""
    max_clients: int = 0


@dataclass
class Config:
    """Complete application configuration."""

    general: GeneralSettings = field(default_factory=GeneralSettings)
    hotkeys: HotkeySettings = field(default_factory=HotkeySettings)
    audio: AudioSettings = field(default_factory=AudioSettings)
    output: OutputSettings = field(default_factory=OutputSettings)
    web_server: WebServerSettings = field(default_factory=WebServerSettings)