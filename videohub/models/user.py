import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime
from videohub.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)  # argon2 hash, never plaintext
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
