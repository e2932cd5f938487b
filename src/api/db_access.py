# This file wraps database access so API services can run parameterized SQL safely.
# It exists to keep SQL execution details, pool sizing, and statement timeouts out of service code.
# Driver failures are classified here into a small set of storage errors before they leave this layer.
# Every call checks out one pooled connection for one statement and returns it on exit.

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

logger = logging.getLogger(__name__)

_IDENTIFIER_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")
_PG_QUERY_CANCELED = "57014"
_PG_UNIQUE_VIOLATION = "23505"


class DatabaseError(Exception):
    """Storage failure that has already been classified and logged."""

    def __init__(self, operation: str, message: str) -> None:
        self.operation = operation
        super().__init__(f"{operation}: {message}")


class DatabaseTimeoutError(DatabaseError):
    """Statement or pool checkout exceeded the configured deadline."""


class UniqueViolationError(DatabaseError):
    """A unique constraint rejected the write."""


class DatabaseClient:
    """Minimal SQLAlchemy wrapper for API read/write access."""

    def __init__(
        self,
        *,
        database_url: str,
        pool_size: int = 5,
        max_overflow: int = 5,
        query_timeout_seconds: float = 3.0,
    ) -> None:
        connect_args: dict[str, Any] = {}
        if make_url(database_url).get_backend_name() == "postgresql":
            timeout_ms = int(query_timeout_seconds * 1000)
            connect_args["options"] = f"-c statement_timeout={timeout_ms}"
            connect_args["connect_timeout"] = max(1, int(query_timeout_seconds))

        self._engine: Engine = create_engine(
            database_url,
            pool_pre_ping=True,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_timeout=query_timeout_seconds,
            connect_args=connect_args,
            future=True,
        )

    def dispose(self) -> None:
        self._engine.dispose()

    def can_connect(self) -> bool:
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            return False

    def table_exists(self, table_name: str) -> bool:
        self._validate_identifier(table_name)
        query = text("SELECT to_regclass(:table_name) IS NOT NULL AS exists_flag")
        with self._classified("table_exists"), self._engine.connect() as connection:
            result = connection.execute(query, {"table_name": table_name}).scalar_one()
        return bool(result)

    def fetch_all(
        self,
        query: str,
        params: Mapping[str, Any] | None = None,
        *,
        operation: str = "fetch_all",
    ) -> list[dict[str, Any]]:
        with self._classified(operation), self._engine.connect() as connection:
            rows = connection.execute(text(query), dict(params or {})).mappings().all()
        return [dict(row) for row in rows]

    def fetch_one(
        self,
        query: str,
        params: Mapping[str, Any] | None = None,
        *,
        operation: str = "fetch_one",
    ) -> dict[str, Any] | None:
        with self._classified(operation), self._engine.connect() as connection:
            row = connection.execute(text(query), dict(params or {})).mappings().first()
        return dict(row) if row is not None else None

    def execute(
        self,
        query: str,
        params: Mapping[str, Any] | None = None,
        *,
        operation: str = "execute",
    ) -> int:
        """Run a write statement in its own transaction and return the affected row count."""

        with self._classified(operation), self._engine.begin() as connection:
            result = connection.execute(text(query), dict(params or {}))
            return int(result.rowcount)

    def execute_returning(
        self,
        query: str,
        params: Mapping[str, Any] | None = None,
        *,
        operation: str = "execute_returning",
    ) -> dict[str, Any] | None:
        """Run a write statement with a RETURNING clause and return its first row."""

        with self._classified(operation), self._engine.begin() as connection:
            row = connection.execute(text(query), dict(params or {})).mappings().first()
        return dict(row) if row is not None else None

    @contextmanager
    def _classified(self, operation: str) -> Iterator[None]:
        try:
            yield
        except PoolTimeoutError as exc:
            logger.error("Connection pool checkout timed out operation=%s", operation)
            raise DatabaseTimeoutError(operation, "connection pool exhausted") from exc
        except IntegrityError as exc:
            if _pgcode(exc) == _PG_UNIQUE_VIOLATION:
                logger.info("Unique constraint rejected write operation=%s", operation)
                raise UniqueViolationError(operation, "unique constraint violated") from exc
            logger.error("Integrity error operation=%s error=%s", operation, exc.orig)
            raise DatabaseError(operation, "integrity constraint violated") from exc
        except OperationalError as exc:
            if _pgcode(exc) == _PG_QUERY_CANCELED:
                logger.error("Statement timed out operation=%s", operation)
                raise DatabaseTimeoutError(operation, "statement timed out") from exc
            logger.error("Operational database error operation=%s error=%s", operation, exc.orig)
            raise DatabaseError(operation, "database unavailable") from exc
        except SQLAlchemyError as exc:
            logger.exception("Database error operation=%s", operation)
            raise DatabaseError(operation, "database error") from exc

    def _validate_identifier(self, identifier: str) -> str:
        if not _IDENTIFIER_RE.match(identifier):
            raise ValueError(f"Unsafe SQL identifier: {identifier!r}")
        return identifier


def _pgcode(exc: SQLAlchemyError) -> str | None:
    return getattr(getattr(exc, "orig", None), "pgcode", None)
