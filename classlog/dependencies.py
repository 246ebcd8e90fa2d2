# ABOUTME: FastAPI dependency injection utilities
# ABOUTME: Provides the process-wide Classroom built from settings and the database session factory

from functools import lru_cache

from classlog.config import get_settings
from classlog.database import SessionLocal, init_db
from classlog.services.classroom import Classroom


@lru_cache
def get_classroom() -> Classroom:
    """
    Returns the Classroom for this process.

    Cached so every request shares one LockManager and its process lock.
    """
    init_db()
    return Classroom(SessionLocal, get_settings())
