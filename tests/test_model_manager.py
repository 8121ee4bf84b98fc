import os

import pytest
import responses

from speak_to_ai.config import Config
from speak_to_ai.model_manager import MIN_MODEL_SIZE, ModelError, ModelManager, model_file_name

BASE_URL = "https://models.example.com/files"


def make_manager(model_path="", model_type="base", precision="q5_1"):
    config = Config()
    config.general.model_path = model_path
    config.general.model_type = model_type
    config.general.model_precision = precision
    return ModelManager(config, base_url=BASE_URL)


def test_model_file_name():
    assert model_file_name("base", "q5_1") == "ggml-model-base.q5_1.bin"


def test_model_dir_defaults_to_models():
    assert make_manager().model_dir() == "models"


def test_model_dir_from_file_path(tmp_path):
    manager = make_manager(str(tmp_path / "sub" / "model.bin"))
    assert manager.model_dir() == str(tmp_path / "sub")


def test_model_dir_from_directory(tmp_path):
    manager = make_manager(str(tmp_path / "models"))
    assert manager.model_dir() == str(tmp_path / "models")


def test_get_model_path_existing_file(tmp_path):
    path = tmp_path / "custom.bin"
    path.write_bytes(b"data")
    with responses.RequestsMock() as rsps:
        assert make_manager(str(path)).get_model_path() == str(path)
        assert len(rsps.calls) == 0


def test_get_model_path_existing_in_dir(tmp_path):
    directory = tmp_path / "models"
    directory.mkdir()
    existing = directory / model_file_name("base", "q5_1")
    existing.write_bytes(b"data")
    with responses.RequestsMock() as rsps:
        assert make_manager(str(directory)).get_model_path() == str(existing)
        assert len(rsps.calls) == 0


def test_get_model_path_downloads_with_progress(tmp_path):
    body = b"model-bytes" * 100
    name = model_file_name("tiny", "f16")
    directory = tmp_path / "models"
    manager = make_manager(str(directory), "tiny", "f16")
    reports = []
    with responses.RequestsMock() as rsps:
        rsps.add(
            responses.GET,
            f"{BASE_URL}/{name}",
            body=body,
            headers={"Content-Length": str(len(body))},
        )
        path = manager.get_model_path(lambda d, t, p: reports.append((d, t, p)))

    assert path == os.path.join(str(directory), name)
    with open(path, "rb") as f:
        assert f.read() == body
    assert reports
    downloaded, total, percentage = reports[-1]
    assert downloaded == total == len(body)
    assert percentage == pytest.approx(100.0)
    assert all(d1 <= d2 for (d1, _, _), (d2, _, _) in zip(reports, reports[1:]))


def test_download_bad_status_removes_file(tmp_path):
    name = model_file_name("base", "q5_1")
    directory = tmp_path / "models"
    manager = make_manager(str(directory))
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, f"{BASE_URL}/{name}", status=404)
        with pytest.raises(ModelError, match="bad status"):
            manager.download_model("base", "q5_1")
    assert not (directory / name).exists()
    assert directory.is_dir()


def test_download_without_url(tmp_path, monkeypatch):
    monkeypatch.delenv("SPEAK_TO_AI_MODEL_URL", raising=False)
    config = Config()
    config.general.model_path = str(tmp_path / "models")
    manager = ModelManager(config)
    with pytest.raises(ModelError, match="failed to download model"):
        manager.download_model("base", "q5_1")


def test_validate_model_missing():
    with pytest.raises(ModelError, match="model file not found: /non/existing/model.bin"):
        make_manager().validate_model("/non/existing/model.bin")


def test_validate_model_too_small(tmp_path):
    path = tmp_path / "small.bin"
    path.write_bytes(b"abc")
    with pytest.raises(ModelError, match=r"too small \(3 bytes\)"):
        make_manager().validate_model(str(path))


def test_validate_model_large_enough(tmp_path):
    path = tmp_path / "big.bin"
    with open(path, "wb") as f:
        f.truncate(MIN_MODEL_SIZE)
    manager = make_manager()
    manager.validate_model(str(path))
    assert os.path.getsize(path) == MIN_MODEL_SIZE