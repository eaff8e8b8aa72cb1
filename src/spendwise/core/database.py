"""Database operations using SQLAlchemy."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text, create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import AppConfig

Base = declarative_base()


def _utcnow() -> datetime:
    # Naive UTC, matching the DateTime column
    return datetime.now(timezone.utc).replace(tzinfo=None)


class KeyValueORM(Base):
    """Key/value blob table."""

    __tablename__ = "kv_store"

    key = Column(String(128), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)


class DatabaseManager:
    """Database connection and session management."""

    def __init__(self, config: AppConfig):
        self.config = config

        connect_args = {}
        if config.database.url.startswith("sqlite"):
            connect_args = {"check_same_thread": False}

        self.engine = create_engine(config.database.url, echo=config.database.echo, connect_args=connect_args)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def create_tables(self) -> None:
        """Create all database tables."""
        Base.metadata.create_all(bind=self.engine)

    def get_session(self) -> Session:
        """Get database session."""
        return self.SessionLocal()


def get_value(session: Session, key: str) -> str | None:
    """Get the raw value stored under a key."""
    row = session.get(KeyValueORM, key)
    return row.value if row else None


def set_value(session: Session, key: str, value: str) -> None:
    """Insert or replace the value stored under a key."""
    row = session.get(KeyValueORM, key)
    if row:
        row.value = value
    else:
        session.add(KeyValueORM(key=key, value=value))
    session.commit()


def delete_value(session: Session, key: str) -> bool:
    """Remove a key. Returns False when it was not present."""
    row = session.get(KeyValueORM, key)
    if not row:
        return False
    session.delete(row)
    session.commit()
    return True
