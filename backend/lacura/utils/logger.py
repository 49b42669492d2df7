import logging
import sys
from lacura.core.config import get_settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _configure_root() -> logging.Logger:
    """One `lacura` logger writing to stdout; components log through children of it."""
    settings = get_settings()
    root = logging.getLogger("lacura")
    root.setLevel(settings.LOG_LEVEL.upper())

    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    return root


logger = _configure_root()


def get_logger(component: str) -> logging.Logger:
    """`get_logger("booking_service")` -> the `lacura.booking_service` logger."""
    return logger.getChild(component)
