# app/database.py
"""
Database connection, session management, and table creation.
Vehicle pass applications are read from here; the database scan log sink
also writes its rfid_scans rows through the same engine.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from app.config import settings

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,          # Reconnect if the DB drops idle connections
    pool_size=10,
    max_overflow=20,
    echo=False,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency — yields a DB session and closes it after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables():
    """Creates all DB tables on startup. Safe to call multiple times."""
    from app.models.vehicle_pass import VehiclePassApplication   # noqa
    from app.models.scan_log import ScanLog                     # noqa

    Base.metadata.create_all(bind=engine)
