"""Speech-to-text daemon core: transcription, text output, notifications and a WebSocket API."""

__version__ = "0.1.0"