from videohub.models.user import User
from videohub.models.video import Video

__all__ = ["User", "Video"]
