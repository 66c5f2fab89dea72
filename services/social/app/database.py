import logging
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.exceptions import TransientError
from shared.database.postgres import get_async_session_factory

# Import all models so SQLAlchemy's Base.metadata is populated.
# Required for Alembic autogenerate and create_all().
import app.models  # noqa: F401

logger = logging.getLogger(__name__)

# serialization_failure, deadlock_detected, lock_not_available, query_canceled
_TRANSIENT_SQLSTATES = frozenset({"40001", "40P01", "55P03", "57014"})

_UNIT_KEY = "atomic_unit"

_session_factory: async_sessionmaker[AsyncSession] | None = None


def init_db(database_url: str) -> async_sessionmaker[AsyncSession]:
    global _session_factory
    _session_factory = get_async_session_factory(database_url, expire_on_commit=False)
    return _session_factory


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    if _session_factory is None:
        raise RuntimeError("Database not initialized")
    return _session_factory


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session.

    Unlike the other services this does not commit on the way out: every
    service operation opens its own transaction through ``atomic`` so that a
    check and its write always commit or roll back together.
    """
    factory = get_session_factory()
    async with factory() as session:
        yield session


def _is_transient(exc: DBAPIError) -> bool:
    if isinstance(exc, OperationalError) or exc.connection_invalidated:
        return True
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return sqlstate in _TRANSIENT_SQLSTATES


@asynccontextmanager
async def atomic(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Run the enclosed reads and writes as one transaction.

    Commits on normal exit; any exception rolls the whole unit back.  Storage
    failures a caller may retry surface as ``TransientError``.  A nested call
    joins the enclosing unit instead of opening a second transaction.
    """
    if session.info.get(_UNIT_KEY):
        yield session
        return

    session.info[_UNIT_KEY] = True
    try:
        async with session.begin():
            yield session
    except DBAPIError as exc:
        if _is_transient(exc):
            logger.warning("Transient storage failure: %s", exc.__class__.__name__)
            raise TransientError() from exc
        raise
    finally:
        session.info.pop(_UNIT_KEY, None)
