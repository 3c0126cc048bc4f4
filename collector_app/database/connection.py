"""
Database engine construction.

The engine is created once at startup and owned by the hit storage client;
nothing here keeps a module-level connection.
"""

import logging
from typing import Union

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase

from collector_app.exceptions import StorageInitializationError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def create_db_engine(url: Union[str, URL], echo: bool = False) -> Engine:
    """
    Build the shared engine (connection pool) for the hit store.

    Args:
        url: SQLAlchemy database URL
        echo: log every statement

    Raises:
        StorageInitializationError: if the URL or driver is unusable
    """
    try:
        url = make_url(url)
        connect_args = {}
        if url.get_backend_name() == "sqlite":
            # Requests are served from a threadpool
            connect_args["check_same_thread"] = False

        engine = create_engine(
            url,
            pool_pre_ping=True,
            pool_recycle=3600,
            echo=echo,
            connect_args=connect_args,
        )
    except (ArgumentError, ImportError, SQLAlchemyError) as e:
        raise StorageInitializationError(f"Error in database parameters: {e}") from e

    logger.info("Database engine created for %s", url.render_as_string(hide_password=True))
    return engine
