import asyncio
import logging
import os
import uuid
from typing import List, Optional, Tuple

from .music import MusicLibrary
from .schemas import (
    CompositionConfig,
    RenderConfig,
    Scene,
    SceneAudio,
    SceneInput,
    ShortVideoProps,
)

LOGGER = logging.getLogger(__name__)


class ShortCreator:
    """
    Turns scenes into a rendered short:
    1) Kokoro speech per scene, normalized for Whisper and captioned word by word.
    2) Speech re-encoded as an mp3 data URI for the composition.
    3) Background music picked, then the renderer produces <videos>/<id>.mp4.
    Jobs run one at a time in submission order.
    """

    def __init__(self, settings, ffmpeg, kokoro, whisper, remotion, music: Optional[MusicLibrary] = None):
        self.settings = settings
        self.ffmpeg = ffmpeg
        self.kokoro = kokoro
        self.whisper = whisper
        self.remotion = remotion
        self.music = music or MusicLibrary(settings.music_dir_path)
        self._queue: List[Tuple[str, List[SceneInput], RenderConfig]] = []
        self._worker: Optional[asyncio.Task] = None

    # ---------------------- queue ----------------------

    def add_to_queue(self, scenes: List[SceneInput], config: RenderConfig) -> str:
        if not scenes:
            raise ValueError("At least one scene is required")
        video_id = uuid.uuid4().hex
        self._queue.append((video_id, scenes, config))
        LOGGER.info("Queued video %s (%d scenes, %d in queue)", video_id, len(scenes), len(self._queue))
        if self._worker is None or self._worker.done():
            self._worker = asyncio.get_running_loop().create_task(self._process_queue())
        return video_id

    async def _process_queue(self):
        while self._queue:
            video_id, scenes, config = self._queue[0]
            try:
                await asyncio.to_thread(self.create_short, video_id, scenes, config)
            except Exception:
                LOGGER.exception("Error creating video %s", video_id)
            finally:
                self._queue.pop(0)

    async def shutdown(self):
        if self._worker is None or self._worker.done():
            return
        LOGGER.info("Stopping render queue (%d jobs pending)", len(self._queue))
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass

    # ---------------------- pipeline ----------------------

    def create_short(self, video_id: str, scenes: List[SceneInput], config: RenderConfig) -> str:
        LOGGER.debug("Creating short video %s", video_id)
        rendered: List[Scene] = []
        total_s = 0.0
        temp_files = []
        os.makedirs(self.settings.temp_dir_path, exist_ok=True)
        try:
            for idx, scene in enumerate(scenes):
                audio, duration = self.kokoro.generate(scene.text, config.voice)
                if idx == len(scenes) - 1 and config.padding_back:
                    duration += config.padding_back / 1000

                wav_path = os.path.join(self.settings.temp_dir_path, f"{uuid.uuid4().hex}.wav")
                temp_files.append(wav_path)
                self.ffmpeg.save_normalized_audio(audio, wav_path)
                captions = self.whisper.create_captions(wav_path)

                rendered.append(Scene(
                    captions=captions,
                    video=scene.video_url,
                    audio=SceneAudio(url=self.ffmpeg.create_mp3_data_uri(audio), duration=duration),
                ))
                total_s += duration

            props = ShortVideoProps(
                scenes=rendered,
                config=CompositionConfig(
                    padding_back=config.padding_back,
                    caption_position=config.caption_position,
                    caption_background_color=config.caption_background_color,
                    duration_ms=round(total_s * 1000),
                    music_volume=config.music_volume,
                ),
                music=self.music.pick(config.music),
            )
            path = self.remotion.render(props, video_id)
        finally:
            for p in temp_files:
                if os.path.exists(p):
                    os.remove(p)
        LOGGER.info("Video %s created (%.1fs)", video_id, total_s)
        return path

    # ---------------------- lookup ----------------------

    def get_video_path(self, video_id: str) -> str:
        return os.path.join(self.settings.videos_dir_path, f"{video_id}.mp4")

    def status(self, video_id: str) -> str:
        if any(vid == video_id for vid, _, _ in self._queue):
            return "processing"
        if os.path.exists(self.get_video_path(video_id)):
            return "ready"
        return "failed"

    def delete_video(self, video_id: str):
        path = self.get_video_path(video_id)
        if not os.path.exists(path):
            raise FileNotFoundError(path)
        os.remove(path)
        LOGGER.debug("Deleted video %s", video_id)

    def list_videos(self) -> List[dict]:
        videos = []
        queued = [vid for vid, _, _ in self._queue]
        for vid in queued:
            videos.append({"id": vid, "status": "processing"})
        if os.path.isdir(self.settings.videos_dir_path):
            for name in sorted(os.listdir(self.settings.videos_dir_path)):
                vid, ext = os.path.splitext(name)
                if ext == ".mp4" and vid not in queued:
                    videos.append({"id": vid, "status": "ready"})
        return videos
