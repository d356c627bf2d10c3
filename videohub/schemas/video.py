from datetime import datetime
from pydantic import BaseModel


class VideoResponse(BaseModel):
    id: str
    title: str
    filename: str
    video_url: str
    content_type: str | None = None
    size_bytes: int | None = None
    storage: str
    created_at: datetime

    class Config:
        from_attributes = True
