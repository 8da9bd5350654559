import logging
import os
import threading
from typing import List

from . import gpu
from .schemas import Caption

LOGGER = logging.getLogger(__name__)


def _ts(ms: int):
    s, ms = divmod(int(ms), 1000)
    h = s // 3600; m = (s % 3600) // 60; s = s % 60
    return f"{h:02}:{m:02}:{s:02},{ms:03}"


def to_srt(captions: List[Caption], srt_path: str) -> str:
    os.makedirs(os.path.dirname(srt_path) or ".", exist_ok=True)
    with open(srt_path, "w", encoding="utf-8") as f:
        for i, cap in enumerate(captions, start=1):
            f.write(f"{i}\n{_ts(cap.start_ms)} --> {_ts(cap.end_ms)}\n{cap.text.strip()}\n\n")
    return srt_path


class Whisper:
    def __init__(self, settings, device: str = "cpu"):
        self.settings = settings
        self.device = device
        self._model = None
        self._lock = threading.Lock()

    @classmethod
    def init(cls, settings) -> "Whisper":
        LOGGER.debug("Checking CUDA for Whisper")
        try:
            has_cuda = gpu.cuda_available()
        except ImportError as exc:
            LOGGER.error("Failed to probe CUDA for Whisper: %s", exc)
            raise
        device = "cuda" if has_cuda else "cpu"
        # GPU requirement is enforced outside Docker only
        if not has_cuda and settings.whisper_require_gpu and not settings.running_in_docker:
            LOGGER.error("CUDA is not available but WHISPER_REQUIRE_GPU is set")
            raise RuntimeError("CUDA is not available. Use a GPU runtime or unset WHISPER_REQUIRE_GPU.")
        if not has_cuda:
            LOGGER.warning("CUDA not available, Whisper will run on CPU")
        os.makedirs(settings.whisper_install_path, exist_ok=True)
        LOGGER.info("Whisper initialized (model=%s, device=%s)", settings.whisper_model, device)
        return cls(settings, device)

    def _load(self):
        with self._lock:
            if self._model is None:
                import whisper

                self._model = whisper.load_model(
                    self.settings.whisper_model,
                    device=self.device,
                    download_root=str(self.settings.whisper_install_path),
                )
        return self._model

    def create_captions(self, audio_path: str) -> List[Caption]:
        """Word-level captions with millisecond timestamps."""
        LOGGER.debug("Starting to transcribe audio %s on %s", audio_path, self.device)
        try:
            if not os.path.exists(audio_path):
                raise FileNotFoundError(f"Audio file not found at {audio_path}")
            model = self._load()
            res = model.transcribe(str(audio_path), word_timestamps=True, fp16=self.device == "cuda")
        except Exception:
            LOGGER.exception("Failed to transcribe audio %s", audio_path)
            raise

        LOGGER.debug("Transcription finished for %s, creating captions", audio_path)
        captions = []
        for seg in res.get("segments", []):
            for w in seg.get("words", []) or []:
                captions.append(Caption(
                    text=w["word"],
                    start_ms=round(w["start"] * 1000),
                    end_ms=round(w["end"] * 1000),
                ))
        LOGGER.debug("Captions created for %s (%d words)", audio_path, len(captions))
        return captions
