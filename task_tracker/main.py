from fastapi import FastAPI, Depends, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from contextlib import asynccontextmanager

from task_tracker import crud, schemas
from task_tracker.database import get_db, init_db
from task_tracker.config import get_settings
from task_tracker.errors import InvalidPageError, TaskNotFoundError
from task_tracker.logger import logger

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events"""
    # Startup
    logger.info(f"Starting {settings.app_name}")
    try:
        init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {str(e)}")
        raise

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.app_name}")


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    description="Task tracking API with filtering, sorting and pagination",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_credentials,
    allow_methods=settings.cors_methods,
    allow_headers=settings.cors_headers,
)


@app.exception_handler(TaskNotFoundError)
async def task_not_found_handler(request, exc: TaskNotFoundError):
    logger.warning(str(exc))
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": str(exc)}
    )


@app.exception_handler(InvalidPageError)
async def invalid_page_handler(request, exc: InvalidPageError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc)}
    )


# Global exception handler
@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_exception_handler(request, exc: SQLAlchemyError):
    logger.error(f"Database error: {str(exc)}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Database error occurred"}
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc: Exception):
    logger.error(f"Unexpected error: {str(exc)}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "An unexpected error occurred"}
    )


# Health check endpoints
@app.get("/health", tags=["Health"])
def health_check():
    """Basic health check"""
    return {"status": "healthy", "service": settings.app_name}


@app.get("/health/ready", tags=["Health"])
def readiness_check(db: Session = Depends(get_db)):
    """Check if service is ready (including database)"""
    try:
        db.execute(text("SELECT 1"))
        return {
            "status": "ready",
            "service": settings.app_name,
            "database": "connected"
        }
    except Exception as e:
        logger.error(f"Readiness check failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service not ready"
        )


@app.get("/", tags=["Root"])
def read_root():
    """Root endpoint"""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.version,
        "docs": "/docs"
    }


# Task endpoints
@app.get("/tasks/", response_model=list[schemas.Task], tags=["Tasks"])
def read_tasks(db: Session = Depends(get_db)):
    """Get all tasks, newest first"""
    return crud.get_tasks(db)


@app.get("/tasks/filter", response_model=list[schemas.Task], tags=["Tasks"])
def filter_tasks(
        task_filter: schemas.TaskFilter = Depends(),
        db: Session = Depends(get_db)
):
    """Filter tasks by any combination of criteria (no pagination)"""
    return crud.filter_tasks(db, task_filter)


@app.get("/tasks/paged", response_model=schemas.TaskPage, tags=["Tasks"])
def read_task_page(
        task_filter: schemas.TaskFilter = Depends(),
        db: Session = Depends(get_db)
):
    """Get one page of filtered tasks with pagination metadata"""
    logger.info(f"Fetching task page {task_filter.page}")
    tasks, window = crud.get_task_page(db, task_filter)
    return schemas.TaskPage(
        tasks=tasks,
        pagination=schemas.PaginationInfo(
            page=window.page,
            page_size=window.page_size,
            total_items=window.total_items,
            total_pages=window.total_pages,
            has_next=window.has_next,
            has_previous=window.has_previous,
        )
    )


@app.get("/tasks/count", response_model=schemas.TaskCount, tags=["Tasks"])
def count_tasks(
        task_filter: schemas.TaskFilter = Depends(),
        db: Session = Depends(get_db)
):
    """Count tasks matching the filter"""
    return schemas.TaskCount(total=crud.count_tasks(db, task_filter))


@app.get("/tasks/statistics", response_model=schemas.TaskStatistics, tags=["Tasks"])
def read_task_statistics(db: Session = Depends(get_db)):
    """Task counts by status and priority, plus overdue tasks"""
    return crud.get_task_statistics(db)


@app.get("/tasks/{task_id}", response_model=schemas.Task, tags=["Tasks"])
def read_task(task_id: int, db: Session = Depends(get_db)):
    """Get a specific task by ID"""
    return crud.get_task(db, task_id=task_id)


@app.post(
    "/tasks/",
    response_model=schemas.Task,
    status_code=status.HTTP_201_CREATED,
    tags=["Tasks"]
)
def create_task(task: schemas.TaskCreate, db: Session = Depends(get_db)):
    """Create a new task"""
    return crud.create_task(db=db, task=task)


@app.put("/tasks/{task_id}", response_model=schemas.Task, tags=["Tasks"])
def update_task(
        task_id: int,
        task: schemas.TaskUpdate,
        db: Session = Depends(get_db)
):
    """Update a task"""
    return crud.update_task(db, task_id=task_id, task=task)


@app.patch("/tasks/{task_id}/complete", response_model=schemas.Task, tags=["Tasks"])
def complete_task(task_id: int, db: Session = Depends(get_db)):
    """Mark a task as completed"""
    return crud.complete_task(db, task_id=task_id)


@app.delete("/tasks/{task_id}", tags=["Tasks"])
def delete_task(task_id: int, db: Session = Depends(get_db)):
    """Delete a task (soft delete)"""
    crud.delete_task(db, task_id=task_id)
    return {"message": "Task deleted successfully", "task_id": task_id}
