from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum as SQLEnum, Index
from enum import Enum, IntEnum
from typing import Optional
from task_tracker.database import Base


class TaskStatus(str, Enum):
    """Enumeration of task lifecycle states"""
    PENDING = "Pending"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"

    @classmethod
    def parse(cls, raw: Optional[str]) -> Optional["TaskStatus"]:
        """Resolve a status name case-insensitively, None when it is not recognised"""
        if not raw:
            return None
        wanted = raw.strip().lower()
        for member in cls:
            if wanted in (member.value.lower(), member.name.lower()):
                return member
        return None


class Priority(IntEnum):
    HIGH = 1
    MEDIUM = 2
    LOW = 3


class Task(Base):
    """Task model for database"""
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    description = Column(String(1000), nullable=True)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)
    due_date = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    status = Column(SQLEnum(TaskStatus), default=TaskStatus.PENDING, nullable=False)
    priority = Column(Integer, default=Priority.LOW.value, nullable=False)
    category = Column(String(100), nullable=True)
    tags = Column(String(500), nullable=True)
    active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        Index('ix_tasks_status', 'status'),
        Index('ix_tasks_category', 'category'),
        Index('ix_tasks_due_date', 'due_date'),
        Index('ix_tasks_priority', 'priority'),
        Index('ix_tasks_active', 'active'),
    )

    def __repr__(self):
        return f"<Task(id={self.id}, title='{self.title}', status={self.status}, active={self.active})>"
