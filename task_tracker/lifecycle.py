"""
Task lifecycle rules.

Every mutation of a Task goes through one of the functions below so the
timestamp bookkeeping stays consistent:

- ``completed_at`` is set if and only if the status is Completed
- ``updated_at`` is refreshed on every mutation
- soft-deleted tasks keep their id and data, only ``active`` flips

The functions only change the ORM object in memory; persisting it is the
caller's job.
"""

from datetime import datetime, timezone
from typing import Iterable, Optional

from task_tracker.models import Task, TaskStatus

TAG_SEPARATOR = ","


def utcnow() -> datetime:
    """Current time as a naive UTC datetime (the format stored in the tasks table)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def normalize_tags(tags: Optional[Iterable[str]]) -> list[str]:
    """Strip labels, drop empty ones and duplicates, keep first-seen order"""
    if not tags:
        return []
    seen: list[str] = []
    for tag in tags:
        label = tag.strip() if tag else ""
        if label and label not in seen:
            seen.append(label)
    return seen


def join_tags(tags: Optional[Iterable[str]]) -> Optional[str]:
    labels = normalize_tags(tags)
    return TAG_SEPARATOR.join(labels) if labels else None


def split_tags(raw: Optional[str]) -> list[str]:
    if not raw:
        return []
    return [tag for tag in raw.split(TAG_SEPARATOR) if tag]


def new_task(data) -> Task:
    """Build a fresh Pending task from a TaskCreate payload"""
    now = utcnow()
    return Task(
        title=data.title,
        description=data.description,
        due_date=data.due_date,
        priority=data.priority,
        category=data.category,
        tags=join_tags(data.tags),
        status=TaskStatus.PENDING,
        completed_at=None,
        created_at=now,
        updated_at=now,
        active=True,
    )


def apply_update(task: Task, data) -> Task:
    """Replace every user-editable field of ``task`` with the TaskUpdate payload.

    Status is the source of truth for the completion timestamp: moving to
    Completed stamps it only when it is missing, any other status clears it.
    """
    now = utcnow()
    task.title = data.title
    task.description = data.description
    task.due_date = data.due_date
    task.status = data.status
    task.priority = data.priority
    task.category = data.category
    task.tags = join_tags(data.tags)

    if data.status == TaskStatus.COMPLETED:
        if task.completed_at is None:
            task.completed_at = now
    else:
        task.completed_at = None

    task.updated_at = now
    return task


def mark_completed(task: Task) -> Task:
    """Force the task to Completed, re-stamping the completion time every call"""
    now = utcnow()
    task.status = TaskStatus.COMPLETED
    task.completed_at = now
    task.updated_at = now
    return task


def mark_deleted(task: Task) -> Task:
    task.active = False
    task.updated_at = utcnow()
    return task
