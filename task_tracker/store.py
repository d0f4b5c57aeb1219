"""
Record store over a SQLAlchemy session.

Reads only ever see active rows. Writes commit immediately, so each call is
one atomic unit against the database. Errors are not caught here.
"""

from typing import Optional, Sequence

from sqlalchemy.orm import Query, Session
from sqlalchemy.sql.elements import ColumnElement

from task_tracker.models import Task
from task_tracker.sorting import resolve_ordering


def _active(db: Session) -> Query:
    return db.query(Task).filter(Task.active.is_(True))


def find_by_id(db: Session, task_id: int) -> Optional[Task]:
    return _active(db).filter(Task.id == task_id).first()


def find_all(db: Session) -> list[Task]:
    return _active(db).order_by(*resolve_ordering()).all()


def find(
    db: Session,
    predicate: ColumnElement,
    ordering: Sequence[ColumnElement],
    skip: Optional[int] = None,
    limit: Optional[int] = None,
) -> list[Task]:
    """Select tasks matching ``predicate`` (which must include the active clause)"""
    query = db.query(Task).filter(predicate).order_by(*ordering)
    if skip:
        query = query.offset(skip)
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def count(db: Session, predicate: Optional[ColumnElement] = None) -> int:
    query = _active(db)
    if predicate is not None:
        query = query.filter(predicate)
    return query.count()


def insert(db: Session, task: Task) -> Task:
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


def replace(db: Session, task: Task) -> Task:
    db.add(task)
    db.commit()
    db.refresh(task)
    return task
