"""
Thread-safe rate-limited logging utilities.

Repeated transient failures (RPC retries, congested nodes) would otherwise
flood the log; each distinct message is emitted at most once per interval.
"""
import logging
import threading
from typing import Dict, Optional

from cachetools import TTLCache

logger = logging.getLogger(__name__)

_CACHE_MAXSIZE = 256

# One cache per interval so that every message expires on its own schedule
_log_caches: Dict[int, TTLCache] = {}
_log_caches_lock = threading.RLock()


def rate_limited_log(
    message: str,
    level: str = "warning",
    interval: int = 60,
    logger_instance: Optional[logging.Logger] = None
) -> bool:
    """
    Log a message with rate limiting, in a thread-safe manner.

    Args:
        message: Message to log
        level: Log level (debug, info, warning, error, critical)
        interval: Minimum interval between identical messages, in seconds
        logger_instance: Logger to use (defaults to module logger)

    Returns:
        True if the message was emitted, False if it was suppressed
    """
    log_instance = logger_instance or logger
    log_method = getattr(log_instance, level.lower(), log_instance.warning)
    key = f"{log_instance.name}:{level}:{message}"

    with _log_caches_lock:
        cache = _log_caches.get(interval)
        if cache is None:
            cache = TTLCache(maxsize=_CACHE_MAXSIZE, ttl=interval)
            _log_caches[interval] = cache

        if key in cache:
            return False

        log_method(message)
        cache[key] = True
        return True


def reset_rate_limits() -> None:
    """Forget every suppressed message (mainly for tests)."""
    with _log_caches_lock:
        _log_caches.clear()
