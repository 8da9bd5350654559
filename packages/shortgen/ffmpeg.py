import base64
import logging
import subprocess
from typing import List

from . import gpu

LOGGER = logging.getLogger(__name__)


class FFmpegError(RuntimeError):
    pass


class FFMpeg:
    """Thin wrapper around the ffmpeg binary; audio always arrives as raw bytes on stdin."""

    def __init__(self, ffmpeg_path: str, gpu_accelerated: bool = False):
        self.ffmpeg_path = ffmpeg_path
        self.gpu_accelerated = gpu_accelerated

    @classmethod
    def init(cls, settings) -> "FFMpeg":
        path = settings.ffmpeg_path
        accelerated = False
        try:
            name = gpu.detect_gpu_name()
            if name and "T4" in name:
                LOGGER.info("NVIDIA T4 GPU detected, enabling hardware acceleration")
                accelerated = True
                if not gpu.ffmpeg_has_nvenc(path):
                    LOGGER.warning("NVENC not available in FFmpeg build")
                    accelerated = False
        except (OSError, subprocess.CalledProcessError) as exc:
            LOGGER.warning("GPU detection failed, using CPU: %s", exc)
            accelerated = False

        LOGGER.info("FFmpeg initialized (path=%s, gpu_accelerated=%s)", path, accelerated)
        return cls(path, accelerated)

    def _input_args(self) -> List[str]:
        args = [self.ffmpeg_path, "-y", "-hide_banner", "-loglevel", "error"]
        if self.gpu_accelerated:
            args += ["-hwaccel", "cuda", "-hwaccel_output_format", "cuda"]
        return args + ["-i", "pipe:0"]

    def _mp3_args(self) -> List[str]:
        return ["-vn", "-c:a", "libmp3lame", "-b:a", "128k", "-ac", "2", "-f", "mp3"]

    def _run(self, cmd: List[str], audio: bytes, what: str) -> bytes:
        try:
            res = subprocess.run(cmd, input=audio, capture_output=True, check=True)
        except subprocess.CalledProcessError as exc:
            stderr = (exc.stderr or b"").decode("utf-8", errors="replace").strip()
            LOGGER.error("Error %s: %s", what, stderr)
            raise FFmpegError(f"ffmpeg failed while {what}: {stderr}") from exc
        return res.stdout

    def save_normalized_audio(self, audio: bytes, output_path: str) -> str:
        """Write 16 kHz mono PCM WAV, the input format Whisper expects."""
        LOGGER.debug("Normalizing audio for Whisper")
        cmd = self._input_args() + [
            "-vn", "-c:a", "pcm_s16le", "-ac", "1", "-ar", "16000", "-f", "wav",
            str(output_path),
        ]
        self._run(cmd, audio, "normalizing audio")
        LOGGER.debug("Audio normalization complete (output=%s, gpu_accelerated=%s)",
                     output_path, self.gpu_accelerated)
        return str(output_path)

    def create_mp3_data_uri(self, audio: bytes) -> str:
        cmd = self._input_args() + self._mp3_args() + ["pipe:1"]
        data = self._run(cmd, audio, "encoding mp3 data uri")
        return "data:audio/mp3;base64," + base64.b64encode(data).decode("ascii")

    def save_to_mp3(self, audio: bytes, file_path: str) -> str:
        cmd = self._input_args() + self._mp3_args() + [str(file_path)]
        self._run(cmd, audio, "converting to mp3")
        LOGGER.debug("MP3 conversion complete (output=%s, gpu_accelerated=%s)",
                     file_path, self.gpu_accelerated)
        return str(file_path)
