"""
Concurrency control for checkout session finalization.

DistributedLock provides mutual exclusion keyed by an arbitrary string
through Django's cache framework. With django-redis configured (REDIS_URL
set) the lock spans processes and servers; with the local-memory cache it
serializes threads of a single process, which is what development and the
test suite use.

Usage:

    from payments.locks import DistributedLock

    with DistributedLock(f"split_payment:{session_id}", ttl=120, timeout=5.0):
        # Only one request finalizes this session at a time
        finalize(session_id)

Note:
    The TTL must be longer than the slowest expected finalization
    (four holds/captures plus payouts, each bounded by
    STRIPE_API_TIMEOUT_SECONDS). A crashed worker's lock expires after TTL.
"""

from __future__ import annotations

import logging
import time
import uuid as uuid_module
from typing import TYPE_CHECKING

from django.core.cache import cache

from payments.exceptions import LockAcquisitionError

if TYPE_CHECKING:
    from typing import Any

logger = logging.getLogger(__name__)


class DistributedLock:
    """
    Cache-based distributed lock with TTL.

    Features:
        - Automatic TTL prevents deadlocks from crashed processes
        - Token-based ownership prevents release by another holder
        - Blocking and non-blocking acquisition modes
        - Context manager support for clean usage

    Example:
        # Context manager (recommended)
        with DistributedLock("split_payment:cs_123", ttl=120):
            finalize()

        # Non-blocking
        lock = DistributedLock("split_payment:cs_123", blocking=False)
        try:
            with lock:
                finalize()
        except LockAcquisitionError:
            # Another request holds the lock
            handle_contention()

    Args:
        key: Lock identifier (will be prefixed with "lock:")
        ttl: Lock TTL in seconds (auto-releases after this time)
        blocking: If True, acquire() waits until lock is available
        timeout: Maximum wait time in seconds (only if blocking=True)
    """

    POLL_INTERVAL = 0.05

    def __init__(
        self,
        key: str,
        ttl: int = 30,
        blocking: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self.key = f"lock:{key}"
        self.ttl = ttl
        self.blocking = blocking
        self.timeout = timeout
        self._token: str | None = None

    def acquire(self) -> bool:
        """
        Attempt to acquire the lock.

        Returns:
            True if lock was acquired

        Raises:
            LockAcquisitionError: If lock couldn't be acquired
        """
        token = str(uuid_module.uuid4())

        if self.blocking:
            end_time = time.monotonic() + self.timeout
            while True:
                if cache.add(self.key, token, timeout=self.ttl):
                    self._token = token
                    return True
                if time.monotonic() >= end_time:
                    break
                time.sleep(self.POLL_INTERVAL)

            logger.warning(
                "Lock acquisition timed out",
                extra={"lock_key": self.key, "timeout": self.timeout},
            )
            raise LockAcquisitionError(
                f"Failed to acquire lock '{self.key}' within {self.timeout}s",
                details={"key": self.key, "timeout": self.timeout},
            )

        if not cache.add(self.key, token, timeout=self.ttl):
            raise LockAcquisitionError(
                f"Lock '{self.key}' is already held",
                details={"key": self.key},
            )
        self._token = token
        return True

    def release(self) -> bool:
        """
        Release the lock if we hold it.

        Returns:
            True if lock was released, False if we didn't hold it

        Note:
            Safe to call multiple times. A lock that expired and was
            taken by another holder is left alone.
        """
        if self._token is None:
            return False

        token, self._token = self._token, None
        if cache.get(self.key) != token:
            logger.warning("Lock expired before release", extra={"lock_key": self.key})
            return False
        cache.delete(self.key)
        return True

    @property
    def is_held(self) -> bool:
        """Check if we currently hold the lock."""
        return self._token is not None

    def __enter__(self) -> DistributedLock:
        """Context manager entry - acquire the lock."""
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> bool:
        """Context manager exit - always release the lock."""
        self.release()
        return False  # Don't suppress exceptions


__all__ = [
    "DistributedLock",
]
