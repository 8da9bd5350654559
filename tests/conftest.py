import pytest

from packages.shortgen.config import Settings


@pytest.fixture
def settings(tmp_path):
    s = Settings(
        data_dir_path=tmp_path / "data",
        music_dir_path=tmp_path / "data" / "music",
        remotion_dir_path=tmp_path / "remotion",
        whisper_install_path=tmp_path / "data" / "whisper",
        concurrency=4,
        video_cache_size_in_bytes=1000,
        ffmpeg_path="ffmpeg",
    )
    s.ensure_dirs()
    return s
