__version__ = "1.2.0"

from .app.main import sync, findings

__all__ = [
    "__version__",
    "sync",
    "findings",
]

# stdlib logging defaults: attach NullHandler to prevent 'No handler' warnings
import logging
_logger = logging.getLogger(__name__)
_logger.addHandler(logging.NullHandler())
