"""
Hit storage strategies using Strategy Pattern.

The handler only talks to HitStorageStrategy, so the relational backend
(MySQL in production, SQLite for development and tests) is chosen by the
factory from configuration.
"""

import logging
from abc import ABC, abstractmethod

from sqlalchemy import insert, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from collector_app.database.connection import Base
from collector_app.exceptions import HitStorageError, StorageInitializationError
from collector_app.models.hit import Hit
from collector_app.schemas.hit import HitEvent, StoredHit

logger = logging.getLogger(__name__)


class HitStorageStrategy(ABC):
    """
    Abstract base class for hit storage strategies.

    One instance is created at startup and shared by all requests.
    Implementations must be safe to call from several threads at once.
    """

    @abstractmethod
    def ping(self) -> None:
        """
        Verify the store is reachable.

        Raises:
            StorageInitializationError: if it is not
        """

    @abstractmethod
    def ensure_schema(self) -> None:
        """
        Create the hit table if it does not exist (idempotent).

        Raises:
            StorageInitializationError: if the table cannot be created
        """

    @abstractmethod
    def store_hit(self, event: HitEvent) -> StoredHit:
        """
        Insert one hit as its own transaction.

        Raises:
            HitStorageError: if the insert fails
        """

    def close(self) -> None:
        """Release connections"""


class SQLAlchemyHitStorage(HitStorageStrategy):
    """
    Relational hit storage on top of a SQLAlchemy engine.

    Works with any dialect SQLAlchemy supports; the deployed one is
    MySQL through PyMySQL. The engine's pool is the single shared
    resource, each insert checks out its own connection.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def ping(self) -> None:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            raise StorageInitializationError(f"Error opening database connection: {e}") from e

    def ensure_schema(self) -> None:
        try:
            # checkfirst makes this CREATE TABLE IF NOT EXISTS
            Base.metadata.create_all(bind=self.engine, tables=[Hit.__table__], checkfirst=True)
        except SQLAlchemyError as e:
            raise StorageInitializationError(f"Error creating table {Hit.__tablename__}: {e}") from e
        logger.info("Table %s is ready", Hit.__tablename__)

    def store_hit(self, event: HitEvent) -> StoredHit:
        # Every value is a bound parameter, nothing is formatted into the SQL
        stmt = insert(Hit.__table__).values(
            domain=event.domain,
            path=event.path,
            user=event.user,
            timezone=event.timezone,
            address=event.address,
            created=event.created,
        )

        try:
            with self.engine.begin() as conn:
                result = conn.execute(stmt)
        except SQLAlchemyError as e:
            raise HitStorageError(f"Error inserting hit: {e}") from e

        return StoredHit(id=result.inserted_primary_key[0], rowcount=result.rowcount)

    def close(self) -> None:
        self.engine.dispose()
        logger.info("Database engine disposed")
