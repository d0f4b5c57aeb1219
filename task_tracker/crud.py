from sqlalchemy import and_, func
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import Optional

from task_tracker import lifecycle, models, schemas, store
from task_tracker.config import get_settings
from task_tracker.errors import TaskNotFoundError
from task_tracker.filters import build_task_predicate
from task_tracker.logger import logger
from task_tracker.pagination import PageWindow, paginate, validate_page_request
from task_tracker.sorting import resolve_ordering


def _case_sensitive(case_sensitive: Optional[bool]) -> bool:
    if case_sensitive is None:
        return get_settings().search_case_sensitive
    return case_sensitive


def _require_task(db: Session, task_id: int) -> models.Task:
    db_task = store.find_by_id(db, task_id)
    if db_task is None:
        logger.info(f"Task {task_id} not found or inactive")
        raise TaskNotFoundError(task_id)
    return db_task


def get_task(db: Session, task_id: int) -> models.Task:
    """Get a single active task by ID"""
    try:
        return _require_task(db, task_id)
    except SQLAlchemyError as e:
        logger.error(f"Error fetching task {task_id}: {str(e)}")
        raise


def get_tasks(db: Session) -> list[models.Task]:
    """Get all active tasks, newest first"""
    try:
        return store.find_all(db)
    except SQLAlchemyError as e:
        logger.error(f"Error fetching tasks: {str(e)}")
        raise


def filter_tasks(
    db: Session,
    task_filter: schemas.TaskFilter,
    case_sensitive: Optional[bool] = None
) -> list[models.Task]:
    """Get every active task matching the filter, sorted, without pagination"""
    try:
        predicate = build_task_predicate(task_filter, _case_sensitive(case_sensitive))
        ordering = resolve_ordering(task_filter.sort_by, task_filter.descending)
        tasks = store.find(db, predicate, ordering)
        logger.info(f"Filtered {len(tasks)} tasks (sort_by={task_filter.sort_by})")
        return tasks
    except SQLAlchemyError as e:
        logger.error(f"Error filtering tasks: {str(e)}")
        raise


def get_task_page(
    db: Session,
    task_filter: schemas.TaskFilter,
    case_sensitive: Optional[bool] = None
) -> tuple[list[models.Task], PageWindow]:
    """Get one page of filtered tasks and its pagination metadata"""
    validate_page_request(task_filter.page, task_filter.page_size)
    try:
        predicate = build_task_predicate(task_filter, _case_sensitive(case_sensitive))
        total = store.count(db, predicate)
        window = paginate(task_filter.page, task_filter.page_size, total)
        tasks = store.find(
            db,
            predicate,
            resolve_ordering(task_filter.sort_by, task_filter.descending),
            skip=window.skip,
            limit=window.page_size,
        )
        logger.info(
            f"Fetched page {window.page}/{window.total_pages} "
            f"({len(tasks)} of {total} tasks, page_size={window.page_size})"
        )
        return tasks, window
    except SQLAlchemyError as e:
        logger.error(f"Error fetching task page: {str(e)}")
        raise


def count_tasks(
    db: Session,
    task_filter: Optional[schemas.TaskFilter] = None,
    case_sensitive: Optional[bool] = None
) -> int:
    """Count active tasks, optionally restricted by a filter"""
    try:
        return store.count(db, build_task_predicate(task_filter, _case_sensitive(case_sensitive)))
    except SQLAlchemyError as e:
        logger.error(f"Error counting tasks: {str(e)}")
        raise


def create_task(db: Session, task: schemas.TaskCreate) -> models.Task:
    """Create a new task"""
    try:
        db_task = store.insert(db, lifecycle.new_task(task))
        logger.info(f"Created task with ID: {db_task.id}")
        return db_task
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating task: {str(e)}")
        raise


def update_task(db: Session, task_id: int, task: schemas.TaskUpdate) -> models.Task:
    """Replace the editable fields of an existing task"""
    try:
        db_task = _require_task(db, task_id)
        db_task = store.replace(db, lifecycle.apply_update(db_task, task))
        logger.info(f"Updated task with ID: {task_id}")
        return db_task
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error updating task {task_id}: {str(e)}")
        raise


def complete_task(db: Session, task_id: int) -> models.Task:
    """Mark a task as completed"""
    try:
        db_task = _require_task(db, task_id)
        db_task = store.replace(db, lifecycle.mark_completed(db_task))
        logger.info(f"Completed task with ID: {task_id}")
        return db_task
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error completing task {task_id}: {str(e)}")
        raise


def delete_task(db: Session, task_id: int) -> models.Task:
    """Soft-delete a task; it stays in the table but is hidden from every query"""
    try:
        db_task = _require_task(db, task_id)
        db_task = store.replace(db, lifecycle.mark_deleted(db_task))
        logger.info(f"Deleted task with ID: {task_id}")
        return db_task
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting task {task_id}: {str(e)}")
        raise


def get_task_statistics(db: Session) -> schemas.TaskStatistics:
    """Count active tasks by status and priority tier, plus overdue ones"""
    try:
        active = models.Task.active.is_(True)
        by_status = dict(
            db.query(models.Task.status, func.count(models.Task.id))
            .filter(active)
            .group_by(models.Task.status)
            .all()
        )
        by_priority = dict(
            db.query(models.Task.priority, func.count(models.Task.id))
            .filter(active)
            .group_by(models.Task.priority)
            .all()
        )
        overdue = store.count(db, and_(
            models.Task.due_date.is_not(None),
            models.Task.due_date < lifecycle.utcnow(),
            models.Task.status != models.TaskStatus.COMPLETED,
        ))
    except SQLAlchemyError as e:
        logger.error(f"Error computing task statistics: {str(e)}")
        raise

    return schemas.TaskStatistics(
        total=sum(by_status.values()),
        pending=by_status.get(models.TaskStatus.PENDING, 0),
        in_progress=by_status.get(models.TaskStatus.IN_PROGRESS, 0),
        completed=by_status.get(models.TaskStatus.COMPLETED, 0),
        overdue=overdue,
        by_priority=schemas.PriorityBreakdown(
            high=by_priority.get(models.Priority.HIGH, 0),
            medium=by_priority.get(models.Priority.MEDIUM, 0),
            low=by_priority.get(models.Priority.LOW, 0),
        ),
    )
