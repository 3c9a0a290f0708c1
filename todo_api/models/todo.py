"""Todo model."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import validates

from todo_api.database import Base

STATUSES = ("pending", "in-progress", "completed")
PRIORITIES = ("low", "medium", "high")


class Todo(Base):
    """Todo item owned by a single user."""

    __tablename__ = "todo"
    __table_args__ = (
        Index("ix_todo_user_id_created_at", "user_id", "created_at"),
        Index("ix_todo_user_id_status", "user_id", "status"),
        Index("ix_todo_user_id_priority", "user_id", "priority"),
        Index("ix_todo_due_date", "due_date"),
        Index("ix_todo_is_archived", "is_archived"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    status = Column(String(16), nullable=False, default="pending")  # pending, in-progress, completed
    priority = Column(String(16), nullable=False, default="medium")  # low, medium, high
    due_date = Column(DateTime, nullable=True)
    user_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    completed_at = Column(DateTime, nullable=True)
    is_archived = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    @validates("status")
    def _sync_completed_at(self, key: str, status: str) -> str:
        """Stamp completed_at on the way into 'completed', clear it otherwise."""
        if status == "completed":
            if self.completed_at is None:
                self.completed_at = datetime.utcnow()
        else:
            self.completed_at = None
        return status
