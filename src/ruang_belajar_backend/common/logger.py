'''
universal logger
'''
import logging
import sys

from .config import settings

def setup_logger(level: str = settings.LOG_LEVEL) -> logging.Logger:
    """
    Configures the 'RB-backend' logger once and returns it.
    Every module logs through this single instance.
    """
    logger = logging.getLogger('RB-backend')
    logger.setLevel(level.upper())

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(module)s - %(levelname)s\n - %(message)s'
        ))
        logger.addHandler(handler)

    # keep pool chatter out of the app log unless echo is requested
    if not settings.DATABASE_ECHO:
        logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)

    return logger

log = setup_logger()
