from sqlalchemy import Column, Integer, String, DateTime, Date, ForeignKey, Text
from sqlalchemy.orm import relationship
from app.database import Base
import enum
from datetime import datetime

class TaskStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=True)

    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Plain string so rows written with a status this code doesn't know yet still load
    status = Column(String(32), default=TaskStatus.PENDING.value, nullable=False, index=True)

    # Date only, no time component
    due_date = Column(Date, nullable=True, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Relationships
    category = relationship("Category", back_populates="tasks")
    owner = relationship("User", foreign_keys=[user_id], back_populates="tasks")
    status_logs = relationship(
        "TaskStatusLog",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="TaskStatusLog.id",
    )

class TaskStatusLog(Base):
    __tablename__ = "task_status_logs"

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(32), nullable=False, index=True)
    changed_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    changed_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Relationships
    task = relationship("Task", back_populates="status_logs")
    actor = relationship("User", foreign_keys=[changed_by])
