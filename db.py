# db.py
# Engine + table definitions for the course catalog and subscriptions.
# DSN-first with a local SQLite fallback.

import logging
import os

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.engine import URL
from sqlalchemy.sql import text

logger = logging.getLogger(__name__)

_SQLITE_FALLBACK_URL = "sqlite:///local_enrollments.db"

metadata = MetaData()

courses = Table(
    "courses",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("title", String(255), nullable=False),
    Column("description", Text, nullable=False, default=""),
    Column("price", Numeric(10, 2), nullable=False, default=0),
    Column("image_url", Text),
    Column("created_at", DateTime(timezone=True)),
)

# uq_subscriptions_user_course is what actually keeps one row per (user, course);
# the pre-check in enrollment.py only saves a round trip.
subscriptions = Table(
    "subscriptions",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("user_id", String(64), nullable=False),
    Column("course_id", String(64), ForeignKey("courses.id"), nullable=False),
    Column("price_paid", Numeric(10, 2), nullable=False),
    Column("subscribed_at", DateTime(timezone=True), nullable=False),
    UniqueConstraint("user_id", "course_id", name="uq_subscriptions_user_course"),
)


def _is_dsn(s: str) -> bool:
    if not s:
        return False
    s = s.strip().lower()
    return s.startswith("postgresql://") or s.startswith("postgresql+psycopg2://") or s.startswith("sqlite:")


def _sqlalchemy_url() -> str | URL | None:
    # 1) DATABASE_URL wins
    db_url = os.getenv("DATABASE_URL")
    if db_url and _is_dsn(db_url):
        return db_url

    # 2) Traditional TCP params
    user = os.getenv("DB_USER")
    pwd = os.getenv("DB_PASS") or os.getenv("DB_PASSWORD")
    name = os.getenv("DB_NAME")
    host = os.getenv("DB_HOST")
    port = os.getenv("DB_PORT")
    if host and user and pwd and name:
        return URL.create(
            drivername="postgresql+psycopg2",
            username=user,
            password=pwd,
            host=host,
            port=int(port) if port else None,
            database=name,
        )

    return None


def create_engine_with_fallback():
    url = _sqlalchemy_url()
    if url is None:
        logger.warning("No database configured; using SQLite at %s", _SQLITE_FALLBACK_URL)
        return create_engine(_SQLITE_FALLBACK_URL, future=True)
    try:
        eng = create_engine(url, pool_pre_ping=True, pool_recycle=1800, future=True)
        with eng.connect() as conn:
            conn.execute(text("SELECT 1"))
        return eng
    except Exception:
        logger.exception("Primary database unavailable; falling back to SQLite at %s", _SQLITE_FALLBACK_URL)
        return create_engine(_SQLITE_FALLBACK_URL, future=True)


def ensure_schema(engine) -> None:
    """Create the courses/subscriptions tables if they are missing."""
    metadata.create_all(engine, checkfirst=True)
