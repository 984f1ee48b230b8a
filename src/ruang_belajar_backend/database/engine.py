'''
Database Engine file.
1- Database: owns the engine (connection pool) and the AsyncSession factory.
   It is constructed explicitly by the app's lifespan and stored on app.state.
2- get_db_session: Dependency to create, yield and manage the life-cycle of a session,
   publishing the collections written during the request once they are committed.
'''
from typing import AsyncGenerator, Optional
from fastapi import Request
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, AsyncEngine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from ..common.exceptions import DatabaseNotInitializedError
from ..common.logger import log
from .db_enums import EntityKind
from .models import Base

# key used on session.info to collect the collections written by a unit of work
CHANGED_KINDS_KEY = "changed_kinds"


class Database:
    """
    Wraps the async engine and the session factory for one database URL.
    """
    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.echo = echo
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    def _engine_options(self) -> dict:
        if self.url.startswith("sqlite"):
            # one shared connection so an in-memory database survives across sessions
            return {
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            }
        return {
            "pool_size": 5,
            "max_overflow": 10,
            "pool_timeout": 30,
            "pool_recycle": -1,
            "pool_pre_ping": True,
        }

    def connect(self) -> "Database":
        """
        Creates the engine and session factory.
        This is called by the app's lifespan event.
        """
        log.info("Creating database engine...")
        try:
            self.engine = create_async_engine(self.url, echo=self.echo, **self._engine_options())
            self.session_factory = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autocommit=False,
                autoflush=False,
            )
            log.info("Async database engine and session factory created successfully.")
        except Exception as e:
            log.critical(f"Failed to create async database engine: {e}", exc_info=True)
            raise
        return self

    async def create_tables(self) -> None:
        """Creates every table of the schema that does not exist yet."""
        if self.engine is None:
            raise DatabaseNotInitializedError("Database.connect() must be called before create_tables().")
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        log.info("Database tables ensured.")

    def session(self) -> AsyncSession:
        if self.session_factory is None:
            log.error("Session factory is not initialized. App lifespan may not have run.")
            raise DatabaseNotInitializedError("Database session factory is not available.")
        return self.session_factory()

    async def dispose(self) -> None:
        """Disposes of the engine. Called by the app's lifespan."""
        if self.engine:
            await self.engine.dispose()
            log.info("Database engine disposed.")
        self.engine = None
        self.session_factory = None


def mark_changed(db: AsyncSession, kind: EntityKind) -> None:
    """Records that this session wrote to the given collection."""
    db.info.setdefault(CHANGED_KINDS_KEY, set()).add(kind)


def pop_changed(db: AsyncSession) -> set[EntityKind]:
    return db.info.pop(CHANGED_KINDS_KEY, set())


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    1. A session is created from the app's Database for each request.
    2. The session is yielded to the route.
    3. The session is committed if the request is successful, then every
       collection written during the request is published on the change feed.
    4. The session is rolled back if an exception occurs.
    5. The session is always closed after the request.
    """
    database: Optional[Database] = getattr(request.app.state, "database", None)
    if database is None:
        log.error("No Database on app.state. App lifespan may not have run.")
        raise DatabaseNotInitializedError("Database session factory is not available.")

    session = database.session()
    try:
        yield session
        await session.commit()
        change_feed = getattr(request.app.state, "change_feed", None)
        changed = pop_changed(session)
        if change_feed is not None:
            for kind in sorted(changed):
                change_feed.publish(kind)
    except Exception as e:
        await session.rollback()
        log.error(f"Database session rolled back due to error: {e}")
        raise
    finally:
        await session.close()
