from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime, timezone
from typing import Optional

from task_tracker.lifecycle import TAG_SEPARATOR, join_tags, split_tags
from task_tracker.models import Priority, TaskStatus

MAX_TAGS_LENGTH = 500


def _clean_title(v):
    if not isinstance(v, str):
        return v
    if not v.strip():
        raise ValueError('Title cannot be empty or just whitespace')
    return v.strip()


def _clean_optional_text(v):
    if isinstance(v, str):
        return v.strip() if v.strip() else None
    return v


def _to_naive_utc(v: Optional[datetime]) -> Optional[datetime]:
    """Timestamps are stored as naive UTC; convert offset-aware input"""
    if v is not None and v.tzinfo is not None:
        return v.astimezone(timezone.utc).replace(tzinfo=None)
    return v


def _check_tags(v: Optional[list[str]]) -> Optional[list[str]]:
    if not v:
        return v
    if any(TAG_SEPARATOR in tag for tag in v):
        raise ValueError(f"Tags cannot contain '{TAG_SEPARATOR}'")
    joined = join_tags(v)
    if joined and len(joined) > MAX_TAGS_LENGTH:
        raise ValueError(f'Tags must be at most {MAX_TAGS_LENGTH} characters in total')
    return v


class TaskBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200, description="Task title")
    description: Optional[str] = Field(None, max_length=1000, description="Task description")
    due_date: Optional[datetime] = Field(None, description="When the task is due")
    priority: int = Field(default=Priority.LOW.value, ge=1, le=3, description="1=high, 2=medium, 3=low")
    category: Optional[str] = Field(None, max_length=100, description="Free-text category")
    tags: Optional[list[str]] = Field(None, description="Task labels")

    @field_validator('title', mode='before')
    @classmethod
    def title_must_not_be_empty(cls, v: str) -> str:
        """Validate title is not just whitespace"""
        return _clean_title(v)

    @field_validator('description', 'category', mode='before')
    @classmethod
    def strip_whitespace(cls, v: Optional[str]) -> Optional[str]:
        """Strip whitespace from optional text"""
        return _clean_optional_text(v)

    @field_validator('tags')
    @classmethod
    def tags_must_fit(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        return _check_tags(v)

    @field_validator('due_date')
    @classmethod
    def due_date_to_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _to_naive_utc(v)


class TaskCreate(TaskBase):
    """Schema for creating a task"""
    pass


class TaskUpdate(TaskBase):
    """Schema for updating a task - replaces every editable field"""
    status: TaskStatus = TaskStatus.PENDING


class TaskFilter(BaseModel):
    """Optional filter, sort and pagination parameters for task queries"""
    title: Optional[str] = None
    status: Optional[str] = None
    category: Optional[str] = None
    tag: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    priority: Optional[int] = None
    completed: Optional[bool] = None
    page: int = 1
    page_size: int = 20
    sort_by: Optional[str] = "created_at"
    descending: bool = True

    @field_validator('start_date', 'end_date')
    @classmethod
    def range_to_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _to_naive_utc(v)


class Task(BaseModel):
    """Schema for returning a task"""
    id: int
    title: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    status: TaskStatus
    priority: int
    category: Optional[str] = None
    tags: list[str] = []

    model_config = ConfigDict(from_attributes=True)

    @field_validator('tags', mode='before')
    @classmethod
    def split_stored_tags(cls, v):
        """Tags are stored joined; expose them as a list"""
        if v is None or isinstance(v, str):
            return split_tags(v)
        return v


class PaginationInfo(BaseModel):
    page: int
    page_size: int
    total_items: int
    total_pages: int
    has_next: bool
    has_previous: bool


class TaskPage(BaseModel):
    """Schema for paginated task list"""
    tasks: list[Task]
    pagination: PaginationInfo


class TaskCount(BaseModel):
    total: int


class PriorityBreakdown(BaseModel):
    high: int = 0
    medium: int = 0
    low: int = 0


class TaskStatistics(BaseModel):
    total: int = 0
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    overdue: int = 0
    by_priority: PriorityBreakdown = PriorityBreakdown()
