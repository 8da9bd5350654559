import os

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse

from ..core.schemas import CreateShortVideo

router = APIRouter(tags=["short-video"])


def _creator(request: Request):
    return request.app.state.creator


@router.post("/short-video", status_code=201)
async def create_short_video(task: CreateShortVideo, request: Request):
    try:
        video_id = _creator(request).add_to_queue(task.scenes, task.config)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"videoId": video_id}


@router.get("/short-video/{video_id}/status")
async def short_video_status(video_id: str, request: Request):
    return {"status": _creator(request).status(video_id)}


@router.get("/short-video/{video_id}")
async def get_short_video(video_id: str, request: Request):
    path = _creator(request).get_video_path(video_id)
    if not os.path.exists(path):
        raise HTTPException(status_code=404, detail="Video not found")
    return FileResponse(path, media_type="video/mp4", filename=f"{video_id}.mp4")


@router.delete("/short-video/{video_id}")
async def delete_short_video(video_id: str, request: Request):
    try:
        _creator(request).delete_video(video_id)
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail="Video not found")
    return {"success": True}


@router.get("/short-videos")
async def list_short_videos(request: Request):
    return {"videos": _creator(request).list_videos()}
