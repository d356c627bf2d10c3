"""Uploaded video metadata. A row exists only once a storage backend accepted the bytes."""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, BigInteger
from videohub.database import Base


class Video(Base):
    __tablename__ = "videos"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False)
    filename = Column(String(512), nullable=False)  # stored name (local) or public_id (cloudinary)
    video_url = Column(String(1024), nullable=False)
    content_type = Column(String(100), nullable=True)  # video/mp4 etc
    size_bytes = Column(BigInteger, nullable=True)
    storage = Column(String(20), nullable=False, default="local")
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
