"""HTTP transport shared by processor adapters."""

import logging

import httpx

from charitypay.gateways.base import TransportError, UnexpectedResponseError

logger = logging.getLogger(__name__)


async def post(
    url: str,
    *,
    timeout: float,
    client: httpx.AsyncClient | None = None,
    **kwargs,
) -> httpx.Response:
    """POST to a processor, folding every transport failure into TransportError.

    When no client is injected a short-lived one is opened for the call.
    """
    try:
        if client is not None:
            response = await client.post(url, timeout=timeout, **kwargs)
        else:
            async with httpx.AsyncClient() as session:
                response = await session.post(url, timeout=timeout, **kwargs)
    except httpx.TimeoutException as exc:
        logger.warning(f"Processor call timed out: {url}")
        raise TransportError(f"Request to payment provider timed out after {timeout}s") from exc
    except httpx.HTTPError as exc:
        logger.warning(f"Processor call failed: {url}: {exc}")
        raise TransportError(f"Could not reach payment provider: {exc}") from exc

    if response.status_code >= 400:
        raise TransportError(f"Payment provider returned HTTP {response.status_code}")

    return response


def json_body(response: httpx.Response) -> dict:
    """Decode a JSON object body or raise UnexpectedResponseError."""
    try:
        data = response.json()
    except ValueError as exc:
        raise UnexpectedResponseError("Payment provider returned a non-JSON body") from exc

    if not isinstance(data, dict):
        raise UnexpectedResponseError("Payment provider returned an unexpected body")

    return data
