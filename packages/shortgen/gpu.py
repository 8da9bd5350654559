import logging
import subprocess
from typing import List, Optional

LOGGER = logging.getLogger(__name__)


def detect_gpu_name() -> Optional[str]:
    """First GPU name reported by nvidia-smi, or None when there is no usable driver."""
    try:
        out = subprocess.run(
            ["nvidia-smi", "--query-gpu=name", "--format=csv,noheader"],
            capture_output=True, text=True, check=True,
        ).stdout
    except (OSError, subprocess.CalledProcessError) as exc:
        LOGGER.debug("nvidia-smi unavailable: %s", exc)
        return None
    names = [line.strip() for line in out.splitlines() if line.strip()]
    return names[0] if names else None


def ffmpeg_has_nvenc(ffmpeg_path: str) -> bool:
    out = subprocess.run(
        [ffmpeg_path, "-hide_banner", "-codecs"],
        capture_output=True, text=True, check=True,
    ).stdout
    return "nvenc" in out


def cuda_available() -> bool:
    import torch  # heavy; only pulled in when asked

    return torch.cuda.is_available()


def onnx_providers() -> List[str]:
    import onnxruntime as ort

    available = ort.get_available_providers()
    providers = []
    if "CUDAExecutionProvider" in available:
        providers.append("CUDAExecutionProvider")
    providers.append("CPUExecutionProvider")
    return providers
