"""
Video catalog: list, upload, delete. Every route requires a bearer token.
"""
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session
from videohub.auth import get_current_account_id
from videohub.database import get_db
from videohub.repositories import video_repository
from videohub.schemas.user import MessageResponse
from videohub.schemas.video import VideoResponse
from videohub.services.video_upload import UploadPipeline, get_upload_pipeline

router = APIRouter(prefix="/api/videos", tags=["videos"], dependencies=[Depends(get_current_account_id)])


@router.get("", response_model=list[VideoResponse])
def list_videos(db: Session = Depends(get_db)):
    """All videos, newest first."""
    return video_repository.list_videos(db)


@router.post("/upload", response_model=VideoResponse, status_code=status.HTTP_201_CREATED)
async def upload_video(
    # str: a plain text `video` field is treated as no file (400), not a 422
    video: UploadFile | str | None = File(None),
    title: str | None = Form(None),
    pipeline: UploadPipeline = Depends(get_upload_pipeline),
    db: Session = Depends(get_db),
):
    """
    Multipart upload: `video` file field + `title`. 413 when over the size limit,
    501 when remote storage is not configured, 502 when the remote upload fails.
    """
    file = None if isinstance(video, str) else video
    return await pipeline.handle_upload(db, file, title)


@router.delete("/{video_id}", response_model=MessageResponse)
def delete_video(video_id: str, db: Session = Depends(get_db)):
    """Delete the record. Succeeds whether or not the id existed."""
    video_repository.delete_video(db, video_id)
    return MessageResponse(message="Video deleted")
