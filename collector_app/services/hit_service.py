import logging

from collector_app.exceptions import HitStorageError
from collector_app.schemas.hit import HitEvent, StoredHit
from collector_app.storage.strategies import HitStorageStrategy

logger = logging.getLogger(__name__)


class HitService:
    """
    Hit Service with dependency injection for storage.

    The storage client is created once at startup and injected here,
    so tests can hand in any HitStorageStrategy.
    """

    def __init__(self, storage: HitStorageStrategy):
        self.storage = storage

    def record_hit(self, event: HitEvent) -> StoredHit:
        """
        Persist one hit. Blocking: the route runs it in the threadpool.

        No retry: a failed insert fails the request that caused it.

        Raises:
            HitStorageError: if the insert fails
        """
        try:
            stored = self.storage.store_hit(event)
        except HitStorageError:
            logger.exception(
                "Failed to store hit for domain=%r path=%r from %s",
                event.domain, event.path, event.address,
            )
            raise

        logger.info("Stored hit id=%s rows=%s domain=%r path=%r", stored.id, stored.rowcount, event.domain, event.path)
        return stored

    @staticmethod
    def confirmation(event: HitEvent) -> str:
        """Plain text echo of every logged field"""
        return (
            f"Logged: domain={event.domain} path={event.path} user={event.user} "
            f"timezone={event.timezone} address={event.address}"
        )
