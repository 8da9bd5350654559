import os
import shutil
from pathlib import Path

from pydantic import BaseModel

DEFAULT_VIDEO_CACHE_BYTES = 2 * 1024 * 1024 * 1024
KOKORO_MODEL_NAME = "Kokoro-82M-v1.0"


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    data_dir_path: Path = Path("data")
    music_dir_path: Path = Path("data/music")
    remotion_dir_path: Path = Path("remotion")

    dev_mode: bool = False
    running_in_docker: bool = False

    # renderer
    concurrency: int = 1
    video_cache_size_in_bytes: int = DEFAULT_VIDEO_CACHE_BYTES

    # transcription
    whisper_model: str = "medium.en"
    whisper_install_path: Path = Path("data/whisper")
    whisper_require_gpu: bool = False

    # tts
    kokoro_model_path: Path = Path("data/models") / KOKORO_MODEL_NAME / "kokoro-v1.0.onnx"
    kokoro_voices_path: Path = Path("data/models") / KOKORO_MODEL_NAME / "voices-v1.0.bin"

    ffmpeg_path: str = "ffmpeg"
    npx_path: str = "npx"

    port: int = 3123
    log_level: str = "info"

    @property
    def videos_dir_path(self) -> Path:
        return self.data_dir_path / "videos"

    @property
    def temp_dir_path(self) -> Path:
        return self.data_dir_path / "temp"

    @classmethod
    def from_env(cls) -> "Settings":
        data_dir = Path(os.getenv("DATA_DIR_PATH", "data"))
        model_dir = data_dir / "models" / KOKORO_MODEL_NAME
        return cls(
            data_dir_path=data_dir,
            music_dir_path=Path(os.getenv("MUSIC_DIR_PATH", str(data_dir / "music"))),
            remotion_dir_path=Path(os.getenv("REMOTION_DIR_PATH", "remotion")),
            dev_mode=_env_bool("DEV"),
            running_in_docker=_env_bool("DOCKER"),
            concurrency=int(os.getenv("CONCURRENCY", 1)),
            video_cache_size_in_bytes=int(os.getenv("VIDEO_CACHE_SIZE_IN_BYTES", DEFAULT_VIDEO_CACHE_BYTES)),
            whisper_model=os.getenv("WHISPER_MODEL", "medium.en"),
            whisper_install_path=Path(os.getenv("WHISPER_INSTALL_PATH", str(data_dir / "whisper"))),
            whisper_require_gpu=_env_bool("WHISPER_REQUIRE_GPU"),
            kokoro_model_path=Path(os.getenv("KOKORO_MODEL_PATH", str(model_dir / "kokoro-v1.0.onnx"))),
            kokoro_voices_path=Path(os.getenv("KOKORO_VOICES_PATH", str(model_dir / "voices-v1.0.bin"))),
            ffmpeg_path=os.getenv("FFMPEG_PATH") or shutil.which("ffmpeg") or "ffmpeg",
            npx_path=os.getenv("NPX_PATH", "npx"),
            port=int(os.getenv("PORT", 3123)),
            log_level=os.getenv("LOG_LEVEL", "info"),
        )

    def ensure_dirs(self):
        for p in (self.data_dir_path, self.videos_dir_path, self.temp_dir_path,
                  self.music_dir_path, self.whisper_install_path):
            os.makedirs(p, exist_ok=True)
