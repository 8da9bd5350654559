import logging
import os
import random
from typing import List, Optional

import soundfile as sf

from .schemas import MusicTrack

LOGGER = logging.getLogger(__name__)


class MusicLibrary:
    """Background tracks are plain mp3 files; an optional mood is the filename prefix (e.g. `happy_*.mp3`)."""

    def __init__(self, music_dir):
        self.music_dir = str(music_dir)

    def tracks(self, mood: Optional[str] = None) -> List[str]:
        if not os.path.isdir(self.music_dir):
            return []
        files = sorted(f for f in os.listdir(self.music_dir) if f.lower().endswith(".mp3"))
        if mood:
            matching = [f for f in files if f.lower().startswith(mood.lower())]
            if matching:
                return matching
            LOGGER.warning("No music for mood '%s', choosing from all tracks", mood)
        return files

    def pick(self, mood: Optional[str] = None, rng=random) -> Optional[MusicTrack]:
        files = self.tracks(mood)
        if not files:
            return None
        name = rng.choice(files)
        duration = sf.info(os.path.join(self.music_dir, name)).duration
        # `url` is resolved against the renderer's public dir, which is the music dir
        return MusicTrack(file=name, url=name, start=0.0, end=duration)
