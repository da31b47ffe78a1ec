import httpx
import logging

from .errors import ExternalServiceError
from .retry import retry_async
from .schemas import StockResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 2
DEFAULT_BACKOFF_SECONDS = 0.1 # Fixed wait between attempts, deliberately not exponential
DEFAULT_TIMEOUT_SECONDS = 5.0

# Failures worth another attempt: connection problems, 4xx/5xx, unparseable bodies
RETRYABLE_ERRORS = (httpx.HTTPError, ValueError)


async def check_stock(
    base_url: str,
    sku: str,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    *,
    client: httpx.AsyncClient | None = None,
    backoff: float = DEFAULT_BACKOFF_SECONDS,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> StockResult:
    """
    Asks the stock service how many units of `sku` are available.

    Never raises for an unreachable or misbehaving service: after the last
    failed attempt it returns a StockResult whose `available_qty` is None.
    Callers must check `result.ok`.
    """
    if client is None:
        async with httpx.AsyncClient(timeout=timeout) as own_client:
            return await _check_stock_with(own_client, base_url, sku, max_attempts, backoff)
    return await _check_stock_with(client, base_url, sku, max_attempts, backoff)


async def _check_stock_with(
    client: httpx.AsyncClient, base_url: str, sku: str, max_attempts: int, backoff: float
) -> StockResult:
    url = f"{base_url.rstrip('/')}/stock"

    async def attempt() -> StockResult:
        try:
            response = await client.post(url, json={"sku": sku})
            response.raise_for_status()
            return StockResult.model_validate(response.json())
        except httpx.HTTPStatusError as e:
            logger.warning(f"Stock service returned status {e.response.status_code} for SKU {sku}")
            raise
        except httpx.RequestError as e:
            logger.warning(f"Could not connect to stock service ({e.request.url}) for SKU {sku}: {e}")
            raise

    try:
        return await retry_async(attempt, max_attempts, backoff, retry_on=RETRYABLE_ERRORS)
    except ExternalServiceError as e:
        logger.error(f"Stock check for SKU {sku} gave up after {e.attempts} attempt(s): {e.__cause__}")
        return StockResult(sku=sku, available_qty=None)
