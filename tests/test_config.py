from pathlib import Path

import pytest

from packages.shortgen import config
from packages.shortgen.config import DEFAULT_VIDEO_CACHE_BYTES, Settings

ENV_VARS = (
    "DATA_DIR_PATH", "MUSIC_DIR_PATH", "REMOTION_DIR_PATH", "DEV", "DOCKER",
    "CONCURRENCY", "VIDEO_CACHE_SIZE_IN_BYTES", "WHISPER_MODEL", "WHISPER_INSTALL_PATH",
    "WHISPER_REQUIRE_GPU", "KOKORO_MODEL_PATH", "KOKORO_VOICES_PATH", "FFMPEG_PATH",
    "NPX_PATH", "PORT", "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config.shutil, "which", lambda name: None)


def test_defaults():
    s = Settings.from_env()
    assert s.data_dir_path == Path("data")
    assert s.music_dir_path == Path("data/music")
    assert s.videos_dir_path == Path("data/videos")
    assert s.temp_dir_path == Path("data/temp")
    assert s.remotion_dir_path == Path("remotion")
    assert s.whisper_install_path == Path("data/whisper")
    assert s.kokoro_model_path == Path("data/models/Kokoro-82M-v1.0/kokoro-v1.0.onnx")
    assert s.kokoro_voices_path == Path("data/models/Kokoro-82M-v1.0/voices-v1.0.bin")
    assert (s.dev_mode, s.running_in_docker, s.whisper_require_gpu) == (False, False, False)
    assert s.concurrency == 1
    assert s.video_cache_size_in_bytes == DEFAULT_VIDEO_CACHE_BYTES
    assert s.whisper_model == "medium.en"
    assert s.ffmpeg_path == "ffmpeg"
    assert s.npx_path == "npx"
    assert s.port == 3123
    assert s.log_level == "info"


def test_paths_follow_data_dir(monkeypatch):
    monkeypatch.setenv("DATA_DIR_PATH", "/srv/shorts")
    s = Settings.from_env()
    assert s.music_dir_path == Path("/srv/shorts/music")
    assert s.videos_dir_path == Path("/srv/shorts/videos")
    assert s.whisper_install_path == Path("/srv/shorts/whisper")
    assert s.kokoro_model_path == Path("/srv/shorts/models/Kokoro-82M-v1.0/kokoro-v1.0.onnx")


def test_explicit_paths_override_derived(monkeypatch):
    monkeypatch.setenv("DATA_DIR_PATH", "/srv/shorts")
    monkeypatch.setenv("MUSIC_DIR_PATH", "/music")
    monkeypatch.setenv("KOKORO_VOICES_PATH", "/models/voices.bin")
    s = Settings.from_env()
    assert s.music_dir_path == Path("/music")
    assert s.kokoro_voices_path == Path("/models/voices.bin")


@pytest.mark.parametrize("raw, expected", [
    ("true", True), ("1", True), ("YES", True), (" on ", True),
    ("false", False), ("0", False), ("", False), ("nope", False),
])
def test_boolean_parsing(monkeypatch, raw, expected):
    for name in ("DEV", "DOCKER", "WHISPER_REQUIRE_GPU"):
        monkeypatch.setenv(name, raw)
    s = Settings.from_env()
    assert (s.dev_mode, s.running_in_docker, s.whisper_require_gpu) == (expected,) * 3


def test_int_values(monkeypatch):
    monkeypatch.setenv("CONCURRENCY", "6")
    monkeypatch.setenv("VIDEO_CACHE_SIZE_IN_BYTES", "1048576")
    monkeypatch.setenv("PORT", "8080")
    s = Settings.from_env()
    assert (s.concurrency, s.video_cache_size_in_bytes, s.port) == (6, 1048576, 8080)


def test_ffmpeg_path_resolution(monkeypatch):
    monkeypatch.setattr(config.shutil, "which", lambda name: "/usr/bin/ffmpeg")
    assert Settings.from_env().ffmpeg_path == "/usr/bin/ffmpeg"
    monkeypatch.setenv("FFMPEG_PATH", "/opt/ffmpeg/bin/ffmpeg")
    assert Settings.from_env().ffmpeg_path == "/opt/ffmpeg/bin/ffmpeg"


def test_ensure_dirs(tmp_path):
    s = Settings(data_dir_path=tmp_path / "d", music_dir_path=tmp_path / "d" / "music",
                 whisper_install_path=tmp_path / "d" / "whisper")
    s.ensure_dirs()
    for p in (s.videos_dir_path, s.temp_dir_path, s.music_dir_path, s.whisper_install_path):
        assert p.is_dir()
