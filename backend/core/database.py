from __future__ import annotations

import logging
import time
from typing import Iterator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from core.config import settings


logger = logging.getLogger(__name__)


class DatabaseUnavailableError(RuntimeError):
    """The store could not be reached after the connection ping retries."""


# Backoff between ping attempts in open_session(); one attempt more than entries.
PING_RETRY_DELAYS: tuple[float, ...] = (0.2, 0.5, 1.0)

# Lower-cased fragments of driver messages that mean "try again", never "your SQL is wrong".
TRANSIENT_ERROR_MARKERS: tuple[str, ...] = (
    # DNS
    "could not translate host name",
    "name or service not known",
    "getaddrinfo failed",
    # refused / dropped
    "connection refused",
    "actively refused",
    "connection reset",
    "server closed the connection unexpectedly",
    # timeouts
    "timeout",
    "timed out",
    # sqlite writer contention
    "database is locked",
)

# URL schemes rewritten to the psycopg2 dialect.
_POSTGRES_SCHEMES = ("postgresql+psycopg://", "postgresql://", "postgres://")


def _exception_chain(exc: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    cur: BaseException | None = exc
    while cur is not None and id(cur) not in seen:
        seen.add(id(cur))
        yield cur
        cur = cur.__cause__ or cur.__context__


def is_transient_db_connectivity_error(exc: BaseException) -> bool:
    """True for connectivity hiccups anywhere in the exception chain.

    Integrity and syntax errors never match.
    """

    text_blob = " | ".join(str(e).lower() for e in _exception_chain(exc))
    return any(marker in text_blob for marker in TRANSIENT_ERROR_MARKERS)


def normalize_database_url(url: str) -> str:
    url = url.strip()
    for scheme in _POSTGRES_SCHEMES:
        if url.startswith(scheme):
            return "postgresql+psycopg2://" + url.removeprefix(scheme)
    return url


def get_engine(database_url: str | None = None) -> Engine:
    url = normalize_database_url(database_url or settings.database_url)
    parsed = make_url(url)

    if parsed.get_backend_name() == "sqlite":
        # Sessions are used from FastAPI's threadpool; in-memory databases must
        # share one connection or every session sees an empty schema.
        kwargs: dict[str, object] = {"connect_args": {"check_same_thread": False}}
        if parsed.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)

    connect_args: dict[str, object] = {"connect_timeout": 3}
    if (parsed.host or "").lower().endswith("supabase.com") and "sslmode" not in parsed.query:
        connect_args["sslmode"] = "require"
    return create_engine(url, pool_pre_ping=True, connect_args=connect_args)


ENGINE = get_engine()
SessionLocal = sessionmaker(bind=ENGINE, autoflush=False, autocommit=False)


def open_session() -> Session:
    """Return a new session whose connection answered a ``SELECT 1`` ping.

    Transient failures are retried after each delay in ``PING_RETRY_DELAYS``.
    A non-transient ``OperationalError`` or running out of retries raises
    :class:`DatabaseUnavailableError`; any other error propagates as is.
    """

    attempts = len(PING_RETRY_DELAYS) + 1
    last_exc: OperationalError | None = None

    for attempt in range(attempts):
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
            return db
        except OperationalError as exc:
            db.close()
            last_exc = exc
            if attempt + 1 == attempts or not is_transient_db_connectivity_error(exc):
                break
            logger.warning("Database ping failed attempt=%d/%d, retrying", attempt + 1, attempts)
            time.sleep(PING_RETRY_DELAYS[attempt])
        except Exception:
            db.close()
            raise

    raise DatabaseUnavailableError("Database temporarily unavailable") from last_exc
