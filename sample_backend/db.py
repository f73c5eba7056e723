"""
Storage adapter over a single SQLite database, accessed through SQLAlchemy.

Callers hand in parameterized SQL (named ``:param`` binds) and get plain
dicts back; every engine failure is re-raised as ``StorageError``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from sqlalchemy import Column, Integer, Text, create_engine, event, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from sample_backend.config import Settings
from sample_backend.errors import IntegrityViolation, StorageError

logger = logging.getLogger(__name__)

SEED_POSTS = (
    ("First post", "This is sample seed data for CRUD demo."),
    ("Second post", "Try list/detail/create/edit/delete flow."),
    ("Third post", "Data is persisted in SQLite database."),
)
SEED_USER = ("Demo User", "demo@sample.com", "1234")

# SQLite INTEGER is a signed 64-bit value.
INTEGER_MIN = -(2**63)
INTEGER_MAX = 2**63 - 1


def utc_now() -> str:
    """ISO-8601 UTC timestamp with microseconds, e.g. 2026-10-18T09:30:00.123456Z."""
    return (
        datetime.now(timezone.utc)
        .isoformat(timespec="microseconds")
        .replace("+00:00", "Z")
    )


@dataclass(frozen=True)
class ExecuteResult:
    rows_affected: int
    # Only meaningful after an INSERT.
    inserted_id: Optional[int] = None


def fits_integer(value: int) -> bool:
    return INTEGER_MIN <= value <= INTEGER_MAX


def _error_message(exc: Exception) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


class Database:
    """
    Owns the engine for one SQLite database. Accepts any SQLAlchemy URL
    (e.g. ``sqlite+pysqlite:///:memory:`` for tests).
    """

    def __init__(self, database_url: str, *, location: str | None = None):
        if not database_url:
            raise ValueError("database_url is required")
        url = make_url(database_url)
        self.is_sqlite = url.get_backend_name() == "sqlite"
        self.in_memory = self.is_sqlite and url.database in (None, "", ":memory:")
        self.location = location or url.database or url.render_as_string(
            hide_password=True
        )

        engine_kwargs: dict[str, Any] = {"future": True}
        if self.is_sqlite:
            engine_kwargs["connect_args"] = {"check_same_thread": False}
        if self.in_memory:
            # One shared connection, otherwise every checkout sees an empty database.
            engine_kwargs["poolclass"] = StaticPool
        self.engine = create_engine(database_url, **engine_kwargs)

        if self.is_sqlite:
            event.listen(self.engine, "connect", self._set_sqlite_pragmas)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        if settings.database_url:
            return cls(settings.database_url)
        path = settings.database_path.resolve()
        path.parent.mkdir(parents=True, exist_ok=True)
        return cls(f"sqlite+pysqlite:///{path}", location=str(path))

    def _set_sqlite_pragmas(self, dbapi_connection, connection_record) -> None:
        cursor = dbapi_connection.cursor()
        try:
            if not self.in_memory:
                cursor.execute("PRAGMA journal_mode = WAL")
            cursor.execute("PRAGMA foreign_keys = ON")
        finally:
            cursor.close()

    def query(
        self, sql: str, params: Optional[Mapping[str, Any]] = None
    ) -> list[dict[str, Any]]:
        """Run a read statement and return every row as a dict."""
        try:
            with self.engine.connect() as conn:
                result = conn.execute(text(sql), dict(params or {}))
                return [dict(row._mapping) for row in result]
        except (SQLAlchemyError, OverflowError) as exc:
            logger.error("Query failed: %s", _error_message(exc))
            raise StorageError(_error_message(exc)) from exc

    def query_one(
        self, sql: str, params: Optional[Mapping[str, Any]] = None
    ) -> Optional[dict[str, Any]]:
        rows = self.query(sql, params)
        return rows[0] if rows else None

    def execute(
        self, sql: str, params: Optional[Mapping[str, Any]] = None
    ) -> ExecuteResult:
        """Run a single write statement in its own transaction."""
        try:
            with self.engine.begin() as conn:
                result = conn.execute(text(sql), dict(params or {}))
                return ExecuteResult(
                    rows_affected=result.rowcount,
                    inserted_id=result.lastrowid,
                )
        except IntegrityError as exc:
            raise IntegrityViolation(_error_message(exc)) from exc
        except (SQLAlchemyError, OverflowError) as exc:
            logger.error("Statement failed: %s", _error_message(exc))
            raise StorageError(_error_message(exc)) from exc

    def init_schema(self) -> None:
        """Create the posts and users tables if they are absent."""
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise StorageError(_error_message(exc)) from exc

    def seed(self) -> None:
        """Insert demo rows into each table that is currently empty."""
        now = utc_now()

        post_count = self.query_one("SELECT COUNT(*) AS count FROM posts")["count"]
        if post_count == 0:
            for title, content in SEED_POSTS:
                self.execute(
                    "INSERT INTO posts (title, content, created_at, updated_at) "
                    "VALUES (:title, :content, :now, :now)",
                    {"title": title, "content": content, "now": now},
                )
            logger.info("Seeded %d demo posts", len(SEED_POSTS))

        user_count = self.query_one("SELECT COUNT(*) AS count FROM users")["count"]
        if user_count == 0:
            name, email, password = SEED_USER
            self.execute(
                "INSERT INTO users (name, email, password, created_at, updated_at) "
                "VALUES (:name, :email, :password, :now, :now)",
                {"name": name, "email": email, "password": password, "now": now},
            )
            logger.info("Seeded demo user %s", email)

    def bootstrap(self) -> None:
        logger.info("Using database at %s", self.location)
        self.init_schema()
        self.seed()

    def dispose(self) -> None:
        self.engine.dispose()


Base = declarative_base()


class PostRow(Base):
    __tablename__ = "posts"
    # AUTOINCREMENT keeps deleted ids from being handed out again.
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True)
    title = Column(Text, nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)


class UserRow(Base):
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=False, unique=True)
    password = Column(Text, nullable=False)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)
