import asyncio
import functools
import random
from typing import Callable, Optional
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError, InterfaceError
from storefront.common import logger

def is_recoverable_exception(exc: BaseException) -> bool:
    if isinstance(exc, asyncio.CancelledError):
        return False
    # common transient-ish exceptions (sqlite "database is locked" surfaces as OperationalError)
    if isinstance(exc, (TimeoutError, ConnectionError, OperationalError, InterfaceError)):
        return True
    if isinstance(exc, DBAPIError):
        if getattr(exc, "connection_invalidated", False):
            return True
        orig = getattr(exc, "orig", None)
        if orig is not None:
            name = type(orig).__name__.lower()
            if any(k in name for k in ("timeout", "connection", "serialization", "deadlock")):
                return True
    return False


def is_recoverable_or_conflict(exc: BaseException) -> bool:
    """Also retries unique-key conflicts: a racing transaction committed first and the
    retry will observe its result."""
    if isinstance(exc, IntegrityError):
        return True
    return is_recoverable_exception(exc)


async def _sleep_with_jitter(delay: float, jitter: float) -> None:
    jitter_val = random.uniform(-jitter * delay, jitter * delay)
    await asyncio.sleep(max(0.0, delay + jitter_val))


def retry_transaction(
    *,
    attempts: int = 3,
    base_delay: float = 0.05,
    factor: float = 2.0,
    max_delay: float = 1.0,
    jitter: float = 0.15,
    if_retryable: Optional[Callable[[BaseException], bool]] = None,
):
    """Re-run an async unit of work that opens its own transaction.

    The wrapped function must be safe to run again from scratch: every attempt has to
    open a fresh session, since a failed transaction is rolled back as a whole.
    """
    if if_retryable is None:
        if_retryable = is_recoverable_exception

    def deco(fn: Callable):
        @functools.wraps(fn)
        async def wrapper(*args, **kwargs):
            last_exc = None
            for attempt in range(1, attempts + 1):
                try:
                    return await fn(*args, **kwargs)
                except asyncio.CancelledError:
                    raise
                except Exception as exc:
                    last_exc = exc
                    if not if_retryable(exc) or attempt == attempts:
                        raise

                    delay = min(max_delay, base_delay * (factor ** (attempt - 1)))
                    logger.debug("transaction retry attempt %d failed; retrying in %f: %s", attempt, delay, type(exc).__name__)
                    await _sleep_with_jitter(delay, jitter)
                    continue

            raise last_exc
        return wrapper
    return deco
