"""
Thread-safe rate-limited logging, so that a node going down does not flood
the logs with one warning per request.
"""
import logging
import threading
from typing import Optional

from cachetools import TTLCache

logger = logging.getLogger(__name__)

# Messages seen recently; expiry is what re-enables logging them
_recent_messages = TTLCache(maxsize=100, ttl=60)
_recent_messages_lock = threading.RLock()


def rate_limited_log(
    message: str,
    level: str = "warning",
    logger_instance: Optional[logging.Logger] = None
) -> bool:
    """
    Log a message unless the same message was logged within the last minute.

    Args:
        message: Message to log
        level: Log level (debug, info, warning, error, critical)
        logger_instance: Logger to use (defaults to module logger)

    Returns:
        True if the message was logged
    """
    log_instance = logger_instance or logger
    log_method = getattr(log_instance, level.lower(), log_instance.warning)
    key = f"{level}:{message}"

    with _recent_messages_lock:
        if key in _recent_messages:
            return False
        _recent_messages[key] = True
    log_method(message)
    return True


def reset_rate_limits() -> None:
    """Forget every recently logged message."""
    with _recent_messages_lock:
        _recent_messages.clear()
