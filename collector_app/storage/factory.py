"""
Factory for creating the hit storage client at startup.
"""

import logging
from enum import Enum

from sqlalchemy.exc import ArgumentError

from collector_app.config import Settings
from collector_app.database.connection import create_db_engine
from collector_app.exceptions import StorageInitializationError
from .strategies import HitStorageStrategy, SQLAlchemyHitStorage

logger = logging.getLogger(__name__)


class HitStorageBackend(Enum):
    """Available hit storage backends"""
    MYSQL = "mysql"
    SQLITE = "sqlite"


class HitStorageFactory:
    """
    Simple factory for creating hit storage instances.

    Gets configuration from the Settings it is given. The caller owns the
    returned instance and hands it to the app; nothing is cached here.
    """

    @classmethod
    def backend_for(cls, settings: Settings) -> HitStorageBackend:
        try:
            name = settings.database_url_resolved.get_backend_name()
        except ArgumentError as e:
            raise StorageInitializationError(f"Error in database parameters: {e}") from e

        try:
            return HitStorageBackend(name)
        except ValueError:
            raise StorageInitializationError(f"Unknown storage backend: {name}") from None

    @classmethod
    def create(cls, settings: Settings) -> HitStorageStrategy:
        """
        Connect, check liveness and bootstrap the schema.

        Args:
            settings: resolved configuration

        Returns:
            Ready-to-use hit storage

        Raises:
            StorageInitializationError: on any failure; the caller decides to exit
        """
        backend = cls.backend_for(settings)
        engine = create_db_engine(settings.database_url_resolved, echo=settings.database_echo)
        storage = SQLAlchemyHitStorage(engine)

        try:
            storage.ping()
            storage.ensure_schema()
        except StorageInitializationError:
            storage.close()
            raise

        logger.info("%s hit storage initialized", backend.value)
        return storage
