"""Resolve a sort key name to an ORDER BY clause list."""

from typing import Optional

from sqlalchemy.sql.elements import ColumnElement

from task_tracker.models import Task

DEFAULT_SORT_COLUMN = Task.created_at

# Closed mapping; both the legacy Portuguese keys and the English field names
SORT_COLUMNS = {
    "titulo": Task.title,
    "title": Task.title,
    "datavencimento": Task.due_date,
    "due_date": Task.due_date,
    "prioridade": Task.priority,
    "priority": Task.priority,
}


def resolve_sort_column(sort_by: Optional[str]):
    """Unknown or missing keys fall back to the creation timestamp"""
    if not sort_by:
        return DEFAULT_SORT_COLUMN
    return SORT_COLUMNS.get(sort_by.strip().lower(), DEFAULT_SORT_COLUMN)


def resolve_ordering(sort_by: Optional[str] = None, descending: bool = True) -> list[ColumnElement]:
    """
    Build the ORDER BY clauses for a task query.

    Null due dates count as the lowest value: first when ascending, last when
    descending, regardless of the database's own NULL ordering. The task id
    follows in the same direction so ties have a stable order.
    """
    column = resolve_sort_column(sort_by)
    if descending:
        primary = column.desc()
        tie_breaker = Task.id.desc()
        if column is Task.due_date:
            primary = primary.nulls_last()
    else:
        primary = column.asc()
        tie_breaker = Task.id.asc()
        if column is Task.due_date:
            primary = primary.nulls_first()
    return [primary, tie_breaker]
