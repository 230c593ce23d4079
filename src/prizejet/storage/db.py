"""Database connection and session management."""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from prizejet.auth import models as auth_models  # noqa: F401  registers user_accounts
from prizejet.errors import UpstreamError
from prizejet.logging_config import get_logger
from prizejet.settings import settings
from prizejet.storage.models import Base

logger = get_logger(__name__)


class Database:
    """Database connection manager.

    Created once at process start and handed to the services that need it.
    """

    def __init__(self, database_url: str | None = None, echo: bool | None = None):
        """Initialize database connection.

        Args:
            database_url: Database URL (defaults to settings)
            echo: Log SQL statements (defaults to on in development)
        """
        self.database_url = database_url or settings.database_url
        connect_args = {"check_same_thread": False} if self.database_url.startswith("sqlite") else {}
        self.engine = create_engine(
            self.database_url,
            echo=settings.env == "development" if echo is None else echo,
            pool_pre_ping=True,
            connect_args=connect_args,
        )
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine,
        )
        logger.info("database_initialized", url=self.engine.url.render_as_string(hide_password=True))

    def create_tables(self) -> None:
        """Create all tables in the database."""
        Base.metadata.create_all(bind=self.engine)
        logger.info("tables_created")

    def drop_tables(self) -> None:
        """Drop all tables from the database."""
        Base.metadata.drop_all(bind=self.engine)
        logger.warning("tables_dropped")

    def dispose(self) -> None:
        self.engine.dispose()

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Provide a transactional scope for database operations.

        Data-store failures surface as UpstreamError.

        Yields:
            Database session
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("database_error", error=str(exc))
            raise UpstreamError("The data store could not complete the request.") from exc
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
