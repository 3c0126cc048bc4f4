"""
Hit collector entry point.

Installed as the `hit-collector` script; `python main.py` runs the same
function. An optional first argument names a JSON database config file.
"""

import logging
import sys
from typing import List, Optional

from collector_app.config import load_settings
from collector_app.exceptions import ConfigurationError, StorageInitializationError
from collector_app.logger import setup_logging
from collector_app.server import create_app, serve
from collector_app.storage.factory import HitStorageFactory

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Startup: config -> logging -> storage -> app -> serve.

    Startup functions raise; this is the only place that turns a fatal
    error into a process exit code.
    """
    if argv is None:
        argv = sys.argv[1:]
    config_file = argv[0] if argv else None

    try:
        settings = load_settings(config_file)
    except ConfigurationError as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return 1

    setup_logging(settings)
    logger.info("Starting %s %s", settings.app_name, settings.app_version)

    try:
        storage = HitStorageFactory.create(settings)
    except StorageInitializationError:
        logger.critical("Hit storage initialization failed", exc_info=True)
        return 1

    app = create_app(settings, storage)

    try:
        serve(settings, app)
    except ConfigurationError:
        logger.critical("Cannot start server", exc_info=True)
        storage.close()
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")

    return 0


if __name__ == "__main__":
    sys.exit(main())
