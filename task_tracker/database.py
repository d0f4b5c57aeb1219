from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from task_tracker.config import get_settings
from task_tracker.logger import logger

settings = get_settings()


def install_sqlite_pragmas(target: Engine) -> Engine:
    """Make SQLite string matching behave like PostgreSQL.

    LIKE becomes case-sensitive, and lower() folds all of Unicode instead of
    ASCII only, so case-insensitive title search agrees with Python str.lower().
    """
    @event.listens_for(target, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA case_sensitive_like = ON")
        cursor.close()
        dbapi_connection.create_function(
            "lower", 1, lambda s: s.lower() if s is not None else None, deterministic=True
        )

    return target


def _engine_options() -> dict:
    if settings.is_sqlite:
        return {"connect_args": {"check_same_thread": False}, "echo": settings.debug}
    return {
        "pool_pre_ping": settings.db_pool_pre_ping,  # Verify connections before using
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "echo": settings.debug,  # Log SQL queries in debug mode
    }


engine = create_engine(settings.database_url, **_engine_options())
if settings.is_sqlite:
    install_sqlite_pragmas(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """Database session dependency"""
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error(f"Database session error: {str(e)}")
        db.rollback()
        raise
    finally:
        db.close()


def init_db():
    """Initialize database tables"""
    # Register the mapped classes on Base before creating tables
    from task_tracker import models  # noqa: F401

    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Error creating database tables: {str(e)}")
        raise
