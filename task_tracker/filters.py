"""
Filter predicate composer.

Turns a TaskFilter into a single SQLAlchemy boolean clause: the AND of the
always-on ``active`` clause and one clause per filter field that is present.
Absent or empty fields impose no constraint, and malformed values (an
unknown status name) are dropped instead of raising.

Title search defaults to case-insensitive substring matching; pass
``case_sensitive=True`` for an exact-case match. Category is always an exact
comparison and tag matching is a substring test against the stored
comma-joined string, so a tag filter of "ab" also matches a task tagged "abc".
"""

from typing import Optional

from sqlalchemy import and_, func
from sqlalchemy.sql.elements import ColumnElement

from task_tracker.models import Task, TaskStatus


def _title_clause(title: str, case_sensitive: bool) -> ColumnElement:
    if case_sensitive:
        return Task.title.contains(title, autoescape=True)
    return func.lower(Task.title).contains(title.lower(), autoescape=True)


def _status_clause(raw: str) -> Optional[ColumnElement]:
    status = TaskStatus.parse(raw)
    if status is None:
        return None
    return Task.status == status


def _completed_clause(completed: bool) -> ColumnElement:
    if completed:
        return Task.status == TaskStatus.COMPLETED
    return Task.status != TaskStatus.COMPLETED


def build_task_predicate(task_filter=None, case_sensitive: bool = False) -> ColumnElement:
    """Compose the WHERE clause for a TaskFilter (None means active tasks only)"""
    clauses = [Task.active.is_(True)]
    if task_filter is None:
        return and_(*clauses)

    optional = [
        _title_clause(task_filter.title, case_sensitive) if task_filter.title else None,
        _status_clause(task_filter.status) if task_filter.status else None,
        Task.category == task_filter.category if task_filter.category else None,
        and_(Task.tags.is_not(None), Task.tags.contains(task_filter.tag, autoescape=True))
        if task_filter.tag else None,
        Task.created_at >= task_filter.start_date if task_filter.start_date is not None else None,
        Task.created_at <= task_filter.end_date if task_filter.end_date is not None else None,
        Task.priority == task_filter.priority if task_filter.priority is not None else None,
        _completed_clause(task_filter.completed) if task_filter.completed is not None else None,
    ]
    clauses.extend(clause for clause in optional if clause is not None)
    return and_(*clauses)
