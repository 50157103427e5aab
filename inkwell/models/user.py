"""User model."""
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text, Uuid

from inkwell.db.session import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    avatar = Column(Text, nullable=True)  # Media store filename
    # Denormalized count of authored posts, see services.user_service
    posts = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
