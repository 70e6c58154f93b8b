"""
Database engine, session management, and base model.

This module is the foundation for all database operations.
Every model inherits from Base. Every request gets a session
from get_db().
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from trade_ledger.config import get_settings

settings = get_settings()

# --- Engine ---
# pool_pre_ping=True tests connections before using them,
# which handles cases where the database restarted or a
# connection went stale.
# The isolation level makes each request's transaction
# serializable, so two payments recorded against the same
# invoice at the same time cannot both read a stale total.
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    isolation_level=settings.DATABASE_ISOLATION_LEVEL,
)

# --- Session Factory ---
# autocommit=False means we explicitly control when changes
# are saved: one logical operation (record a payment and
# refresh the affected caches) is one commit.
# autoflush=False means SQLAlchemy won't send SQL to the
# database until we explicitly flush or commit.
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    pass


# --- Dependency for FastAPI ---
def get_db():
    """
    Provide a database session for a single request.

    The try/finally pattern ensures the session is always
    closed, preventing connection leaks.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
