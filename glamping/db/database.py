# File: glamping/db/database.py
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from glamping.core.config import settings

connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    # Scheduler jobs and request handlers use sessions from different threads
    connect_args = {"check_same_thread": False}

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db(bind=None):
    """Create the mirror tables if they do not exist yet"""
    from glamping.models import kv_store  # noqa: F401  register tables on Base

    Base.metadata.create_all(bind=bind or engine)
