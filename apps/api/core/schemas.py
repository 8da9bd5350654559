from pydantic import BaseModel, Field
from typing import List, Optional

from packages.shortgen.schemas import Caption, RenderConfig, SceneInput


class CreateShortVideo(BaseModel):
    scenes: List[SceneInput] = Field(min_length=1)
    config: RenderConfig = RenderConfig()


class VoiceTask(BaseModel):
    text: str
    voice: str = "af_heart"
    speed: float = 1.0
    name: Optional[str] = None  # output file stem; random when empty


class CaptionsTask(BaseModel):
    wav: str
    srt: bool = False  # also write an .srt next to the audio


class CaptionsResult(BaseModel):
    captions: List[Caption]
    srt: Optional[str] = None
