# apps/api/routers/assets.py
# Single-engine endpoints: speech and captions without rendering a whole short.

import os
import re
import uuid

from fastapi import APIRouter, HTTPException, Request

from packages.shortgen import captions as captions_engine
from ..core.schemas import CaptionsResult, CaptionsTask, VoiceTask

router = APIRouter(tags=["assets"])

_NAME = re.compile(r"[\w-]+")


@router.get("/voices")
async def voices(request: Request):
    return {"voices": request.app.state.kokoro.list_available_voices()}


# ---------- Voice (TTS) ----------

@router.post("/voice")
def voice(task: VoiceTask, request: Request):
    state = request.app.state
    if task.name is not None and not _NAME.fullmatch(task.name):
        raise HTTPException(status_code=400, detail="name may only contain letters, digits, '_' and '-'")
    try:
        audio, duration = state.kokoro.generate(task.text, task.voice, task.speed)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    out_dir = os.path.join(state.settings.data_dir_path, "audio")
    os.makedirs(out_dir, exist_ok=True)
    stem = task.name or f"voice_{uuid.uuid4().hex}"
    mp3 = state.ffmpeg.save_to_mp3(audio, os.path.join(out_dir, f"{stem}.mp3"))
    return {"mp3": mp3, "duration": duration}


# ---------- Captions (Whisper) ----------

@router.post("/captions", response_model=CaptionsResult)
def caps(task: CaptionsTask, request: Request):
    try:
        caps_ = request.app.state.whisper.create_captions(task.wav)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    srt = None
    if task.srt:
        srt = captions_engine.to_srt(caps_, os.path.splitext(task.wav)[0] + ".srt")
    return CaptionsResult(captions=caps_, srt=srt)
