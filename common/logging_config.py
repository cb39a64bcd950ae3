import logging
import os
import sys
from typing import Optional, Tuple, Union

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class PeerLoggerAdapter(logging.LoggerAdapter):
    """Prefix every record with the remote peer it concerns."""

    def process(self, msg, kwargs):
        return f"[{self.extra['peer']}] {msg}", kwargs


def setup_logging(
    component_name: str,
    log_level: Optional[str] = None,
) -> logging.Logger:
    """
    Set up logging configuration for a component.

    Module loggers of the component's packages (``common``, ``fileserver``,
    ``cli``) share the handler installed here.

    Args:
        component_name: Name of the component (e.g., 'fileserver', 'cli')
        log_level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to LOG_LEVEL env var or INFO

    Returns:
        Configured logger instance
    """
    if log_level is None:
        log_level = os.getenv('LOG_LEVEL', 'INFO')

    level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(component_name)
    logger.setLevel(level)

    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    logger.addHandler(handler)
    logger.propagate = False

    if component_name != 'common':
        shared = logging.getLogger('common')
        shared.setLevel(level)
        if not shared.handlers:
            shared.addHandler(handler)
            shared.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def connection_logger(
    logger: logging.Logger,
    peer: Union[Tuple[str, int], str],
) -> logging.LoggerAdapter:
    """
    Wrap a logger so every message carries the peer address.

    Args:
        logger: Logger to wrap
        peer: Socket address tuple or preformatted label

    Returns:
        LoggerAdapter tagging records with ``[host:port]``
    """
    if isinstance(peer, tuple):
        peer = f"{peer[0]}:{peer[1]}"
    return PeerLoggerAdapter(logger, {'peer': peer})
