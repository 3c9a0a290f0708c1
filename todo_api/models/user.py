"""User model."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String

from todo_api.database import Base


class User(Base):
    """Application user."""

    __tablename__ = "user"
    __table_args__ = (
        Index("ix_user_created_at", "created_at"),
        Index("ix_user_is_active", "is_active"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False)
    email = Column(String(256), unique=True, nullable=False, index=True)
    password_hash = Column(String(256), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    last_login_at = Column(DateTime, nullable=True, default=datetime.utcnow)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
