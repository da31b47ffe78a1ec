import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from .errors import ExternalServiceError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int,
    backoff: float,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Awaits `operation` up to `max_attempts` times with a fixed `backoff` wait
    between attempts (none after the last one).

    Exceptions outside `retry_on` propagate immediately. When every attempt
    fails, raises ExternalServiceError chained to the last failure.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    last_error: BaseException | None = None
    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except retry_on as e:
            last_error = e
            if attempt == max_attempts:
                break
            logger.debug(f"Attempt {attempt}/{max_attempts} failed ({e!r}), retrying in {backoff}s")
            await sleep(backoff)

    raise ExternalServiceError(
        f"Operation failed after {max_attempts} attempt(s): {last_error}", attempts=max_attempts
    ) from last_error
