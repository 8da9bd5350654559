import io
import logging
import os
import shutil
from pathlib import Path
from typing import List, Tuple
from urllib.request import Request, urlopen

import soundfile as sf

from . import gpu

LOGGER = logging.getLogger(__name__)

UA = "shortgen/0.1"
RELEASE_URL = "https://github.com/thewh1teagle/kokoro-onnx/releases/download/model-files-v1.0"
DEFAULT_VOICE = "af_heart"


class TTSInitError(RuntimeError):
    pass


def _download(url: str, dest: Path, timeout=60):
    dest.parent.mkdir(parents=True, exist_ok=True)
    tmp = dest.with_suffix(dest.suffix + ".part")
    req = Request(url, headers={"User-Agent": UA})
    with urlopen(req, timeout=timeout) as r, open(tmp, "wb") as f:
        shutil.copyfileobj(r, f)
    os.replace(tmp, dest)


def ensure_model_files(model_path: Path, voices_path: Path):
    for path in (model_path, voices_path):
        if path.exists():
            continue
        url = f"{RELEASE_URL}/{path.name}"
        LOGGER.info("Downloading %s -> %s", url, path)
        _download(url, path)


class Kokoro:
    SAMPLE_RATE = 24000

    def __init__(self, engine, lang: str = "en-us"):
        self.engine = engine
        self.lang = lang

    @classmethod
    def init(cls, settings) -> "Kokoro":
        try:
            import onnxruntime as ort
            from kokoro_onnx import Kokoro as KokoroOnnx

            model_path = Path(settings.kokoro_model_path)
            voices_path = Path(settings.kokoro_voices_path)
            ensure_model_files(model_path, voices_path)

            providers = gpu.onnx_providers()
            opts = ort.SessionOptions()
            opts.graph_optimization_level = ort.GraphOptimizationLevel.ORT_ENABLE_ALL
            session = ort.InferenceSession(str(model_path), sess_options=opts, providers=providers)
            engine = KokoroOnnx.from_session(session, str(voices_path))
        except Exception as exc:
            LOGGER.exception("Failed to initialize Kokoro")
            raise TTSInitError(f"Failed to initialize Kokoro: {exc}") from exc

        LOGGER.info("Kokoro initialized (model=%s, providers=%s)", model_path, providers)
        return cls(engine)

    def list_available_voices(self) -> List[str]:
        return sorted(self.engine.get_voices())

    def generate(self, text: str, voice: str = DEFAULT_VOICE, speed: float = 1.0) -> Tuple[bytes, float]:
        """
        Synthesize `text` and return (wav_bytes, duration_seconds).
        """
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")
        if voice not in self.engine.get_voices():
            raise ValueError(f"Unknown voice: {voice}")

        samples, sample_rate = self.engine.create(text.strip(), voice=voice, speed=speed, lang=self.lang)
        buf = io.BytesIO()
        sf.write(buf, samples, sample_rate, format="WAV", subtype="PCM_16")
        duration = len(samples) / float(sample_rate)
        LOGGER.debug("Audio generated with Kokoro (voice=%s, %.2fs, %d chars)", voice, duration, len(text))
        return buf.getvalue(), duration
