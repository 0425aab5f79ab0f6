from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from .config import settings

# Base class for ORM tables
Base = declarative_base()

_connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

engine = create_engine(settings.database_url, connect_args=_connect_args)

SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(bind=None):
    """Create all tables that don't exist yet"""
    # Import so the tables register on Base.metadata
    from ..services.storage import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


# FastAPI dependency
def get_db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
