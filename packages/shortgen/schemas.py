from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    # Composition props are read by the renderer in camelCase
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Caption(CamelModel):
    text: str
    start_ms: int
    end_ms: int


class SceneInput(BaseModel):
    text: str
    video_url: str


class RenderConfig(BaseModel):
    padding_back: int = 0  # ms of silence after the last scene
    music: Optional[str] = None  # mood, matched against track filename prefix
    music_volume: Literal["muted", "low", "medium", "high"] = "high"
    caption_position: Literal["top", "center", "bottom"] = "bottom"
    caption_background_color: str = "blue"
    voice: str = "af_heart"


class SceneAudio(CamelModel):
    url: str
    duration: float


class Scene(CamelModel):
    captions: List[Caption]
    video: str
    audio: SceneAudio


class MusicTrack(CamelModel):
    file: str
    url: str
    start: float
    end: float


class CompositionConfig(CamelModel):
    padding_back: int = 0
    caption_position: str = "bottom"
    caption_background_color: str = "blue"
    duration_ms: int
    music_volume: str = "high"


class ShortVideoProps(CamelModel):
    scenes: List[Scene]
    config: CompositionConfig
    music: Optional[MusicTrack] = None

    def to_props(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)

