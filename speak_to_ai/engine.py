"""Speech recognition over WAV files with a pluggable speech model."""

from __future__ import annotations

import os
import struct
import wave
from abc import ABC, abstractmethod
from typing import Callable, Iterable, Sequence

from .config import Config

MAX_AUDIO_FILE_SIZE = 50 * 1024 * 1024
REQUIRED_FREE_SPACE = 100 * 1024 * 1024


class TranscriptionError(Exception):
    """Speech recognition could not be carried out."""


class SpeechModel(ABC):
    """A loaded speech-recognition model."""

    @abstractmethod
    def transcribe(self, samples: Sequence[float], language: str | None) -> Iterable[str]:
        """Recognise normalised mono samples and yield the text of each segment."""

    def close(self) -> None:
        """Release the model's resources."""


ModelLoader = Callable[[str], SpeechModel]


class WhisperEngine:
    """Turns recorded audio files into text."""

    def __init__(
        self,
        config: Config,
        model_path: str,
        *,
        loader: ModelLoader | None = None,
        min_free_space: int = REQUIRED_FREE_SPACE,
    ) -> None:
        if not is_valid_file(model_path):
            raise TranscriptionError(f"whisper model not found: {model_path}")
        if loader is None:
            raise TranscriptionError("failed to load whisper model: no speech model backend configured")
        try:
            model = loader(model_path)
        except Exception as exc:
            raise TranscriptionError(f"failed to load whisper model: {exc}") from exc
        self.config = config
        self.model: SpeechModel | None = model
        self.model_path = model_path
        self.min_free_space = min_free_space

    def close(self) -> None:
        if self.model is not None:
            self.model.close()

    def transcribe(self, audio_file: str) -> str:
        """Recognise speech in a WAV file and return the trimmed transcript."""
        if not is_valid_file(audio_file):
            raise TranscriptionError(f"audio file not found or invalid: {audio_file}")

        try:
            size = get_file_size(audio_file)
        except OSError as exc:
            raise TranscriptionError(f"error checking audio file size: {exc}") from exc
        if size > MAX_AUDIO_FILE_SIZE:
            raise TranscriptionError(
                f"audio file too large ({size} bytes), max allowed is {MAX_AUDIO_FILE_SIZE} bytes"
            )

        try:
            _ensure_free_space(audio_file, self.min_free_space)
        except (OSError, TranscriptionError) as exc:
            raise TranscriptionError(f"insufficient disk space: {exc}") from exc

        try:
            samples = load_audio_data(audio_file)
        except TranscriptionError as exc:
            raise TranscriptionError(f"failed to load audio data: {exc}") from exc

        if self.model is None:
            raise TranscriptionError("failed to create whisper context: model is closed")

        lang = self.config.general.language
        language = lang if lang and lang != "auto" else None

        try:
            segments = list(self.model.transcribe(samples, language))
        except Exception as exc:
            raise TranscriptionError(f"failed to process audio: {exc}") from exc

        return "".join(f"{text} " for text in segments).strip()


def _decode_samples(frames: bytes, width: int) -> list[int]:
    if width == 1:
        return list(frames)
    if width == 2:
        return [value for (value,) in struct.iter_unpack("<h", frames)]
    if width == 4:
        return [value for (value,) in struct.iter_unpack("<i", frames)]
    if width == 3:
        return [
            int.from_bytes(frames[start:start + 3], "little", signed=True)
            for start in range(0, len(frames), 3)
        ]
    raise TranscriptionError(f"unsupported sample width: {width} bytes")


def load_audio_data(audio_file: str) -> list[float]:
    """Read a PCM WAV file as samples scaled by 1/32768, one per frame."""
    try:
        reader = wave.open(audio_file, "rb")
    except FileNotFoundError as exc:
        raise TranscriptionError(f"failed to open audio file: {exc}") from exc
    except (OSError, wave.Error, EOFError) as exc:
        raise TranscriptionError(f"failed to read audio buffer: {exc}") from exc
    with reader:
        try:
            channels = reader.getnchannels()
            width = reader.getsampwidth()
            frames = reader.readframes(reader.getnframes())
        except (OSError, wave.Error, EOFError) as exc:
            raise TranscriptionError(f"failed to read audio buffer: {exc}") from exc

    data = _decode_samples(frames, width)
    num_frames = len(data) // channels if channels else 0
    return [sample / 32768.0 for sample in data[:num_frames]]


def is_valid_file(path: str) -> bool:
    """True for an existing regular file given by an already-normalised path."""
    if os.path.normpath(path) != path:
        return False
    try:
        return os.path.isfile(path) and not os.path.isdir(path)
    except OSError:
        return False


def clean_transcript(text: str) -> str:
    """Return the transcript unchanged."""
    return text


def get_file_size(path: str) -> int:
    return os.stat(path).st_size


def _ensure_free_space(path: str, required: int) -> int:
    directory = os.path.dirname(path) or "."
    stat = os.statvfs(directory)
    available = stat.f_bavail * stat.f_bsize
    if available < required:
        raise TranscriptionError(
            f"insufficient disk space: {available} bytes available, {required} required"
        )
    return available


def check_disk_space(path: str) -> int:
    """Return the bytes free beside path; raise if fewer than 100 MiB."""
    return _ensure_free_space(path, REQUIRED_FREE_SPACE)