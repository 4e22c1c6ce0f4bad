"""
Redis Connection Pool Management.

Provides singleton connection pool for Redis with health checks and retry logic.
Used by RedisJobQueue and RedisJobEventPublisher.

Responsibility:
    - Manage Redis connection pool built from a single REDIS_URL
    - Health check with PING
    - Retry logic with exponential backoff
    - Thread-safe singleton pattern

Architecture Notes:
    - Infrastructure Layer (external dependency on Redis)
    - Singleton pattern for connection pool reuse
    - Thread-safe with threading.Lock
    - Environment-based configuration (see sheetjobs.config)

Business Rules:
    - Max connections: 10 (configurable via REDIS_MAX_CONNECTIONS)
    - Connection timeout: 5s (configurable via REDIS_TIMEOUT)
    - Retry attempts: 3 (configurable via REDIS_RETRY_ATTEMPTS)
    - Exponential backoff: 1s, 2s, 4s (base=1s, multiplier=2)
    - Decode responses: True (return strings not bytes)

Error Handling:
    - ConnectionError / TimeoutError: Log and retry with exponential backoff
    - All retries exhausted: raise QueueConnectionError
    - Health check failure: Return False (don't raise exception)

Examples:
    >>> client = get_redis_client()
    >>> client.set("key", "value")
    >>>
    >>> if health_check():
    ...     print("Redis is healthy")
    >>>
    >>> close_connections()
"""

import logging
import os
import threading
import time
from typing import Optional

from redis import ConnectionPool, Redis
from redis.exceptions import ConnectionError, RedisError, TimeoutError

from sheetjobs.application.ports.job_queue import QueueConnectionError
from sheetjobs.config import get_settings

# Configure logger for this module
logger = logging.getLogger(__name__)

# Singleton connection pool (thread-safe)
_redis_pool: Optional[ConnectionPool] = None
_pool_lock = threading.Lock()


def get_redis_client(
    url: Optional[str] = None,
    max_connections: Optional[int] = None,
    timeout: Optional[int] = None,
) -> Redis:
    """
    Get Redis client with connection pooling (singleton pattern).

    Creates connection pool on first call, reuses pool on subsequent calls.
    Thread-safe using lock. Implements retry logic with exponential backoff.

    Args:
        url: Redis connection string (default from settings: REDIS_URL)
        max_connections: Max pool size (default from env: REDIS_MAX_CONNECTIONS or 10)
        timeout: Connection timeout in seconds (default from env: REDIS_TIMEOUT or 5)

    Returns:
        Redis client instance with connection pool

    Raises:
        QueueConnectionError: If connection fails after all retry attempts
    """
    global _redis_pool

    settings = get_settings()
    redis_url = url or settings.redis_url
    max_conn = max_connections or int(os.getenv("REDIS_MAX_CONNECTIONS", "10"))
    conn_timeout = timeout or int(os.getenv("REDIS_TIMEOUT", "5"))

    # Create connection pool if not exists (thread-safe singleton)
    if _redis_pool is None:
        with _pool_lock:
            # Double-check locking pattern
            if _redis_pool is None:
                logger.info(
                    f"Creating Redis connection pool: url={redis_url}, "
                    f"max_connections={max_conn}, timeout={conn_timeout}s"
                )

                _redis_pool = ConnectionPool.from_url(
                    redis_url,
                    max_connections=max_conn,
                    socket_timeout=conn_timeout,
                    socket_connect_timeout=conn_timeout,
                    socket_keepalive=True,
                    decode_responses=True,  # Return strings not bytes
                )

    client = Redis(connection_pool=_redis_pool)

    # Test connection with retry logic (exponential backoff)
    retry_attempts = settings.redis_retry_attempts
    backoff_base = 1  # Base delay in seconds
    last_error: Optional[Exception] = None

    for attempt in range(retry_attempts):
        try:
            client.ping()
            logger.debug(f"Redis connection established (attempt {attempt + 1})")
            return client

        except (ConnectionError, TimeoutError) as e:
            last_error = e
            if attempt < retry_attempts - 1:
                delay = backoff_base * (2**attempt)
                logger.warning(
                    f"Redis connection failed (attempt {attempt + 1}/{retry_attempts}): {e}. "
                    f"Retrying in {delay}s..."
                )
                time.sleep(delay)
            else:
                logger.error(
                    f"Redis connection failed after {retry_attempts} attempts: {e}"
                )

    raise QueueConnectionError(
        f"Failed to connect to Redis after {retry_attempts} attempts. "
        f"Last error: {last_error}",
        original_error=last_error,
    )


def health_check() -> bool:
    """
    Check Redis health with PING test.

    Returns:
        True if Redis is healthy (PING successful), False otherwise
    """
    try:
        client = get_redis_client()
        if client.ping():
            logger.debug("Redis health check: OK")
            return True
        logger.warning("Redis health check: PING returned False")
        return False

    except (RedisError, QueueConnectionError) as e:
        logger.warning(f"Redis health check failed: {e}")
        return False


def close_connections() -> None:
    """
    Close all Redis connections in the pool.

    Closes connection pool and resets singleton. Called on API shutdown.
    Safe to call multiple times.
    """
    global _redis_pool

    with _pool_lock:
        if _redis_pool is not None:
            logger.info("Closing Redis connection pool")

            try:
                _redis_pool.disconnect()

            except RedisError as e:
                logger.error(f"Error closing Redis connection pool: {e}")

            finally:
                _redis_pool = None
                logger.info("Redis connection pool closed")

        else:
            logger.debug("Redis connection pool already closed or not initialized")
