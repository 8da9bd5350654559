import json
import logging
import os
import re
import subprocess
from pathlib import Path
from typing import List

from .schemas import ShortVideoProps

LOGGER = logging.getLogger(__name__)

COMPONENT_TO_RENDER = "ShortVideo"
REMOTION_VERSION = "4.0.286"

GPU_GL = "angle"
CPU_GL = "swangle"

_PROGRESS = re.compile(r"(\d+)/(\d+)")


class RenderError(RuntimeError):
    pass


def _run_streaming(cmd: List[str], cwd, label: str):
    """Run a renderer command, logging its output line by line."""
    tail = []
    with subprocess.Popen(
        cmd, cwd=cwd, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True,
    ) as proc:
        try:
            for line in proc.stdout:
                line = line.rstrip()
                if not line:
                    continue
                tail = (tail + [line])[-20:]
                m = _PROGRESS.search(line)
                if m and int(m.group(2)):
                    LOGGER.debug("Rendering %s %d%% complete", label, int(m.group(1)) * 100 // int(m.group(2)))
                else:
                    LOGGER.debug("[remotion] %s", line)
        except BaseException:
            proc.kill()
            raise
        code = proc.wait()
    if code != 0:
        raise subprocess.CalledProcessError(code, cmd, output="\n".join(tail))


class Remotion:
    def __init__(self, bundled: str, settings):
        self.bundled = bundled
        self.settings = settings

    @classmethod
    def _entry_point(cls, settings) -> Path:
        sub, ext = ("src", "ts") if settings.dev_mode else ("dist", "js")
        return Path(settings.remotion_dir_path) / sub / "components" / "root" / f"index.{ext}"

    @classmethod
    def init(cls, settings) -> "Remotion":
        npx = settings.npx_path
        cwd = str(settings.remotion_dir_path)
        subprocess.run([npx, "remotion", "browser", "ensure"], cwd=cwd, check=True)

        if not settings.running_in_docker:
            try:
                listing = subprocess.run(
                    ["npm", "ls", "@remotion/renderer"],
                    cwd=cwd, capture_output=True, text=True, check=True,
                ).stdout
                if REMOTION_VERSION not in listing:
                    raise RenderError(f"Incorrect @remotion/renderer version installed, expected {REMOTION_VERSION}")
            except (OSError, subprocess.CalledProcessError, RenderError) as exc:
                LOGGER.warning("Renderer version check failed: %s", exc)

        bundled = os.path.abspath(os.path.join(settings.data_dir_path, "remotion-bundle"))
        subprocess.run([
            npx, "remotion", "bundle", str(cls._entry_point(settings)),
            f"--out-dir={bundled}",
            f"--public-dir={os.path.abspath(settings.music_dir_path)}",
        ], cwd=cwd, check=True)

        LOGGER.debug("Remotion %s initialized, bundle at %s", REMOTION_VERSION, bundled)
        return cls(bundled, settings)

    def _base_cmd(self, props_path: str, output: str) -> List[str]:
        return [
            self.settings.npx_path, "remotion", "render",
            self.bundled, COMPONENT_TO_RENDER, output,
            f"--props={props_path}",
            "--codec=h264",
        ]

    def render(self, props: ShortVideoProps, video_id: str) -> str:
        os.makedirs(self.settings.videos_dir_path, exist_ok=True)
        output = os.path.abspath(os.path.join(self.settings.videos_dir_path, f"{video_id}.mp4"))
        props_path = os.path.abspath(os.path.join(self.settings.temp_dir_path, f"{video_id}.props.json"))
        os.makedirs(os.path.dirname(props_path), exist_ok=True)
        with open(props_path, "w", encoding="utf-8") as f:
            json.dump(props.to_props(), f)

        LOGGER.debug("Starting GPU rendering of %s (video_id=%s)", COMPONENT_TO_RENDER, video_id)
        cmd = self._base_cmd(props_path, output) + [
            f"--concurrency={self.settings.concurrency}",
            f"--offthreadvideo-cache-size-in-bytes={self.settings.video_cache_size_in_bytes}",
            f"--gl={GPU_GL}",
            "--pixel-format=yuv420p",
            "--video-bitrate=8000k",
            "--audio-bitrate=256k",
        ]
        try:
            try:
                _run_streaming(cmd, str(self.settings.remotion_dir_path), video_id)
                LOGGER.debug("Video %s rendered to %s", video_id, output)
            except (OSError, subprocess.CalledProcessError) as exc:
                LOGGER.error("GPU rendering failed for %s, attempting CPU fallback: %s", video_id, exc)
                self._fallback_cpu_render(props_path, output, video_id)
                LOGGER.debug("Video %s rendered to %s with CPU fallback", video_id, output)
        finally:
            if os.path.exists(props_path):
                os.remove(props_path)
        return output

    def _fallback_cpu_render(self, props_path: str, output: str, video_id: str):
        concurrency = max(1, self.settings.concurrency // 2)
        cache = self.settings.video_cache_size_in_bytes // 2
        cmd = self._base_cmd(props_path, output) + [
            f"--concurrency={concurrency}",
            f"--offthreadvideo-cache-size-in-bytes={cache}",
            f"--gl={CPU_GL}",
        ]
        try:
            _run_streaming(cmd, str(self.settings.remotion_dir_path), video_id)
        except (OSError, subprocess.CalledProcessError) as exc:
            LOGGER.error("CPU fallback render failed for %s: %s", video_id, exc)
            raise RenderError(f"Rendering {video_id} failed: {exc}") from exc
