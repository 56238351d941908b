"""Request and envelope helpers shared by the control-plane clients."""

import json
from typing import Any

import httpx

from ..exceptions import GatewayError
from ..logging_config import get_logger
from ..schemas import ApiEnvelope

logger = get_logger(__name__)

# Diagnostic bodies can be whole HTML error pages
MAX_DETAIL_CHARS = 1000


async def send(
    client: httpx.AsyncClient, method: str, url: str, *, action: str, **kwargs: Any
) -> httpx.Response:
    """Send one request, converting transport failures into GatewayError.

    There is no retry: one failed HTTP call is one failed operation.
    """
    try:
        return await client.request(method, url, **kwargs)
    except httpx.TimeoutException as e:
        logger.warning("gateway_request_timeout", action=action, url=url)
        raise GatewayError(f"{action} timed out") from e
    except httpx.HTTPError as e:
        logger.warning("gateway_request_failed", action=action, url=url, error=str(e))
        raise GatewayError(f"{action} failed", detail=str(e)) from e


def parse_envelope(resp: httpx.Response, action: str) -> ApiEnvelope:
    """Validate a JSON envelope and require its success flag."""
    try:
        envelope = ApiEnvelope.model_validate(resp.json())
    except ValueError as e:
        raise GatewayError(
            f"{action} returned an unreadable response",
            status_code=resp.status_code,
            detail=resp.text[:MAX_DETAIL_CHARS],
        ) from e

    if not envelope.success:
        detail = json.dumps(envelope.errors) if envelope.errors else resp.text
        logger.warning(
            "gateway_call_rejected",
            action=action,
            status_code=resp.status_code,
            errors=envelope.errors,
        )
        raise GatewayError(
            f"{action} failed",
            status_code=resp.status_code,
            detail=detail[:MAX_DETAIL_CHARS],
        )
    return envelope


def raise_for_status(resp: httpx.Response, action: str) -> None:
    """Raise GatewayError with status and body for a non-2xx response."""
    if resp.is_success:
        return
    logger.warning("gateway_call_rejected", action=action, status_code=resp.status_code)
    raise GatewayError(
        f"{action} failed",
        status_code=resp.status_code,
        detail=resp.text[:MAX_DETAIL_CHARS],
    )
