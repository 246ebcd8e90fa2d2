# ABOUTME: Database connection and session management
# ABOUTME: Provides SQLAlchemy engine, session factory, and database initialization

from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from classlog.config import get_settings
from classlog.models.database import Base

settings = get_settings()

if settings.database_url.startswith("sqlite:///") and ":memory:" not in settings.database_url:
    Path(settings.database_url.replace("sqlite:///", "", 1)).parent.mkdir(parents=True, exist_ok=True)

engine = create_engine(
    settings.database_url,
    connect_args={"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db():
    """Create the property and cache tables."""
    Base.metadata.create_all(bind=engine)

