"""
Exceptions raised by the collector.

Startup errors (configuration, storage initialization) are fatal and are
turned into a non-zero exit by main(). HitStorageError is per request and
is mapped to a 500 response.
"""


class CollectorError(Exception):
    """Base class for collector errors"""


class ConfigurationError(CollectorError):
    """Configuration source is missing, unreadable or invalid"""


class StorageInitializationError(CollectorError):
    """Engine construction, liveness check or schema bootstrap failed"""


class HitStorageError(CollectorError):
    """A single hit could not be written"""
