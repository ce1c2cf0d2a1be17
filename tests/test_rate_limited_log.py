"""
Tests for the rate-limited logging of transport failures.
"""
import threading
from unittest.mock import MagicMock, patch

from cachetools import TTLCache

from ledger_sdk.node import _rate_limited_log
from ledger_sdk.node._rate_limited_log import rate_limited_log, reset_rate_limits


def test_same_message_is_logged_once():
    logger = MagicMock()
    assert rate_limited_log("Node down", logger_instance=logger) is True
    assert rate_limited_log("Node down", logger_instance=logger) is False
    logger.warning.assert_called_once_with("Node down")


def test_levels_are_keyed_separately():
    logger = MagicMock()
    rate_limited_log("Node down", level="warning", logger_instance=logger)
    rate_limited_log("Node down", level="error", logger_instance=logger)
    logger.warning.assert_called_once_with("Node down")
    logger.error.assert_called_once_with("Node down")


def test_reset_re_enables_logging():
    logger = MagicMock()
    rate_limited_log("Node down", logger_instance=logger)
    reset_rate_limits()
    rate_limited_log("Node down", logger_instance=logger)
    assert logger.warning.call_count == 2


def test_expiry_re_enables_logging():
    """Entries expire with the cache's TTL"""
    clock = [0]
    cache = TTLCache(maxsize=100, ttl=60, timer=lambda: clock[0])
    logger = MagicMock()
    with patch.object(_rate_limited_log, "_recent_messages", cache):
        assert rate_limited_log("Node down", logger_instance=logger)
        clock[0] = 59
        assert not rate_limited_log("Node down", logger_instance=logger)
        clock[0] = 61
        assert rate_limited_log("Node down", logger_instance=logger)


def test_concurrent_callers_log_once():
    logger = MagicMock()
    barrier = threading.Barrier(8)

    def log():
        barrier.wait()
        rate_limited_log("Node down", logger_instance=logger)

    threads = [threading.Thread(target=log) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    logger.warning.assert_called_once_with("Node down")
