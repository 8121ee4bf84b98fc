"""Locating, downloading and checking speech models."""

from __future__ import annotations

import os
import time
from typing import Callable

import requests

from .config import Config
from .engine import get_file_size, is_valid_file

MODEL_URL_ENV = "SPEAK_TO_AI_MODEL_URL"
MIN_MODEL_SIZE = 10 * 1024 * 1024
_REPORT_INTERVAL = 0.1
_CHUNK_SIZE = 64 * 1024

ProgressCallback = Callable[[int, int, float], None]


class ModelError(Exception):
    """A model could not be found, fetched or accepted."""


def model_file_name(model_type: str, precision: str) -> str:
    return f"ggml-model-{model_type}.{precision}.bin"


def _has_extension(path: str) -> bool:
    return "." in os.path.basename(path)


class ModelManager:
    """Finds the configured model, downloading it when missing."""

    def __init__(
        self,
        config: Config,
        *,
        base_url: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.config = config
        self.base_url = base_url if base_url is not None else os.environ.get(MODEL_URL_ENV, "")
        self.session = session if session is not None else requests.Session()

    def get_model_path(self, progress: ProgressCallback | None = None) -> str:
        """Return the model's path, downloading it if it is not there yet."""
        general = self.config.general
        if general.model_path and is_valid_file(general.model_path):
            return general.model_path

        path = os.path.join(self.model_dir(), model_file_name(general.model_type, general.model_precision))
        if is_valid_file(path):
            return path
        return self.download_model(general.model_type, general.model_precision, progress)

    def model_dir(self) -> str:
        directory = self.config.general.model_path or "models"
        if _has_extension(directory):
            return os.path.dirname(directory) or "."
        return directory

    def download_model(
        self, model_type: str, precision: str, progress: ProgressCallback | None = None
    ) -> str:
        """Fetch a model into the model directory and return its path."""
        directory = self.model_dir()
        try:
            os.makedirs(directory, mode=0o755, exist_ok=True)
        except OSError as exc:
            raise ModelError(f"failed to create model directory: {exc}") from exc

        file_name = model_file_name(model_type, precision)
        path = os.path.join(directory, file_name)
        if not self.base_url:
            raise ModelError(f"failed to download model: no download URL set in {MODEL_URL_ENV}")
        url = self.base_url.rstrip("/") + "/" + file_name

        try:
            out = open(path, "wb")
        except OSError as exc:
            raise ModelError(f"failed to create output file: {exc}") from exc

        completed = False
        try:
            with out:
                self._fetch(url, out, progress)
            completed = True
        finally:
            if not completed:
                try:
                    os.remove(path)
                except OSError:
                    pass
        return path

    def _fetch(self, url: str, out, progress: ProgressCallback | None) -> None:
        try:
            response = self.session.get(url, stream=True)
        except requests.RequestException as exc:
            raise ModelError(f"failed to download model: {exc}") from exc
        with response:
            if response.status_code != 200:
                raise ModelError(f"bad status: {response.status_code} {response.reason}")
            try:
                total = int(response.headers.get("Content-Length", ""))
            except ValueError:
                total = 0
            report = progress if progress is not None and total > 0 else None

            downloaded = 0
            last_report: float | None = None
            try:
                for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                    out.write(chunk)
                    downloaded += len(chunk)
                    now = time.monotonic()
                    if report and (last_report is None or now - last_report > _REPORT_INTERVAL):
                        report(downloaded, total, downloaded / total * 100)
                        last_report = now
            except (requests.RequestException, OSError) as exc:
                raise ModelError(f"failed to save model: {exc}") from exc
            if report:
                report(downloaded, total, downloaded / total * 100)

    def validate_model(self, model_path: str) -> None:
        """Raise ModelError unless the file exists and is plausibly large."""
        if not is_valid_file(model_path):
            raise ModelError(f"model file not found: {model_path}")
        try:
            size = get_file_size(model_path)
        except OSError as exc:
            raise ModelError(f"error checking model file: {exc}") from exc
        if size < MIN_MODEL_SIZE:
            raise ModelError(f"model file is too small ({size} bytes), might be corrupted")