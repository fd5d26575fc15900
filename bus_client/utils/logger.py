"""
utils/logger.py

Logging setup for the CLI and for Celery worker processes.
"""

import logging
import logging.config
from typing import Optional

from bus_client.utils.config_manager import ConfigManager, Settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(settings: Optional[Settings] = None):
    """
    Configure logging from the settings' dictConfig section, or with a
    basic stream handler at general.log_level when there is none.
    """
    settings = settings or ConfigManager.get_settings()

    if settings.logging:
        logging.config.dictConfig(settings.logging)
    else:
        logging.basicConfig(level=settings.general.log_level.upper(), format=LOG_FORMAT)
