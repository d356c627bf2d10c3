"""
Video metadata catalog. Only the upload pipeline creates rows.
"""
import logging

from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from videohub.errors import DatastoreError
from videohub.models.video import Video

logger = logging.getLogger(__name__)


def list_videos(db: Session) -> list[Video]:
    """All videos, newest first."""
    try:
        return db.query(Video).order_by(desc(Video.created_at)).all()
    except SQLAlchemyError as e:
        raise DatastoreError("Failed to fetch videos") from e


def get_video(db: Session, video_id: str) -> Video | None:
    try:
        return db.query(Video).filter(Video.id == video_id).first()
    except SQLAlchemyError as e:
        raise DatastoreError("Failed to fetch video") from e


def create_video(
    db: Session,
    *,
    title: str,
    filename: str,
    video_url: str,
    content_type: str | None,
    size_bytes: int | None,
    storage: str,
) -> Video:
    video = Video(
        title=title,
        filename=filename,
        video_url=video_url,
        content_type=content_type,
        size_bytes=size_bytes,
        storage=storage,
    )
    db.add(video)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise DatastoreError("Failed to save video record") from e
    db.refresh(video)
    return video


def delete_video(db: Session, video_id: str) -> bool:
    """Delete by id. Returns False when nothing matched; absence is not an error."""
    try:
        deleted = db.query(Video).filter(Video.id == video_id).delete(synchronize_session=False)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise DatastoreError("Delete failed") from e
    if deleted:
        logger.info("Video deleted: %s", video_id)
    else:
        logger.info("Delete requested for unknown video %s", video_id)
    return bool(deleted)
