import subprocess
import sys
from types import SimpleNamespace

from packages.shortgen import gpu


def test_detect_gpu_name_without_driver(monkeypatch):
    def missing(*a, **kw):
        raise FileNotFoundError("nvidia-smi")

    monkeypatch.setattr(gpu.subprocess, "run", missing)
    assert gpu.detect_gpu_name() is None


def test_detect_gpu_name_first_line(monkeypatch):
    monkeypatch.setattr(
        gpu.subprocess, "run",
        lambda *a, **kw: SimpleNamespace(stdout="Tesla T4\nTesla T4\n"),
    )
    assert gpu.detect_gpu_name() == "Tesla T4"


def test_detect_gpu_name_command_failure(monkeypatch):
    def failing(cmd, **kw):
        raise subprocess.CalledProcessError(9, cmd)

    monkeypatch.setattr(gpu.subprocess, "run", failing)
    assert gpu.detect_gpu_name() is None


def test_ffmpeg_has_nvenc(monkeypatch):
    monkeypatch.setattr(
        gpu.subprocess, "run",
        lambda *a, **kw: SimpleNamespace(stdout=" DEV.LS h264  (encoders: libx264 h264_nvenc )"),
    )
    assert gpu.ffmpeg_has_nvenc("ffmpeg") is True


def test_onnx_providers_prefers_cuda(monkeypatch):
    fake = SimpleNamespace(get_available_providers=lambda: ["CPUExecutionProvider", "CUDAExecutionProvider"])
    monkeypatch.setitem(sys.modules, "onnxruntime", fake)
    assert gpu.onnx_providers() == ["CUDAExecutionProvider", "CPUExecutionProvider"]


def test_onnx_providers_cpu_only(monkeypatch):
    fake = SimpleNamespace(get_available_providers=lambda: ["CPUExecutionProvider"])
    monkeypatch.setitem(sys.modules, "onnxruntime", fake)
    assert gpu.onnx_providers() == ["CPUExecutionProvider"]
