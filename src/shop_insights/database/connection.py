"""
Database connection and session management.

The application owns exactly one Database handle for its lifetime: it is
constructed at startup, attached to the FastAPI app state, and disposed at
shutdown. Services receive sessions from it; nothing reaches for a global.
"""

from contextlib import contextmanager
from typing import Generator, Optional

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from shop_insights.utils.exceptions import DatabaseError
from shop_insights.utils.logger import get_logger

logger = get_logger(__name__)


class Database:
    """
    Engine plus session factory for one database URL.

    Usage:
        database = Database("sqlite:///./shop_insights.db")
        database.create_all()
        with database.session() as db:
            tenants = db.query(Tenant).all()
        database.dispose()
    """

    def __init__(self, url: str, echo: bool = False, engine: Optional[Engine] = None):
        self.url = url
        self.engine = engine or self._create_engine(url, echo)
        self.session_factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine,
        )
        logger.info(f"Database handle created for {self.engine.url.get_backend_name()}")

    @staticmethod
    def _create_engine(url: str, echo: bool) -> Engine:
        if url.startswith("sqlite"):
            kwargs = {"connect_args": {"check_same_thread": False}}
            if url in ("sqlite://", "sqlite:///:memory:"):
                # One shared connection, otherwise every session sees an empty database
                kwargs["poolclass"] = StaticPool
            return create_engine(url, echo=echo, **kwargs)

        return create_engine(
            url,
            pool_size=10,
            max_overflow=10,
            pool_pre_ping=True,
            echo=echo,
        )

    def create_all(self) -> None:
        """Create all tables from the ORM metadata."""
        from shop_insights.database.models import Base

        logger.info("Creating database tables...")
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database tables created successfully")

    def drop_all(self) -> None:
        """Drop all tables (use with caution!)."""
        from shop_insights.database.models import Base

        logger.warning("Dropping all database tables...")
        Base.metadata.drop_all(bind=self.engine)

    def new_session(self) -> Session:
        return self.session_factory()

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """
        Context manager for a session that commits on success.

        Usage:
            with database.session() as db:
                db.add(tenant)
        """
        db = self.session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def ping(self) -> bool:
        """
        Return True when a trivial query succeeds.

        Raises:
            DatabaseError: the database could not be reached
        """
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            raise DatabaseError(f"Database ping failed: {e}", operation="ping")
        return True

    def dispose(self) -> None:
        """Release pooled connections."""
        self.engine.dispose()
        logger.info("Database connections disposed")


def get_database(request: Request) -> Database:
    """FastAPI dependency returning the application's Database handle."""
    return request.app.state.database


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency for FastAPI to get a database session.

    Usage:
        @router.get("/items")
        def get_items(db: Session = Depends(get_db)):
            ...
    """
    db = get_database(request).new_session()
    try:
        yield db
    finally:
        db.close()
