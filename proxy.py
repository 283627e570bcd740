import logging
from typing import Any, Dict, Optional

import httpx
from fastapi import HTTPException, Request, Response, status
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from config import settings
from errors import MissingTenantError, ProxyError
from modifier import ResponseModifier

logger = logging.getLogger("labelproxy.proxy")


HOP_BY_HOP_HEADERS = {
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailers",
    "transfer-encoding",
    "upgrade",
    "host",  # Let httpx set the host header based on URL
}


def _filter_headers(headers: Dict[str, str]) -> Dict[str, str]:
    """
    Remove hop-by-hop headers as per RFC 2616.
    These must not be forwarded by proxies.
    """
    return {
        k: v
        for k, v in headers.items()
        if k.lower() not in HOP_BY_HOP_HEADERS
    }


def _error_status(err: ProxyError) -> int:
    if isinstance(err, MissingTenantError):
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    return status.HTTP_502_BAD_GATEWAY


async def _close(*resources: Any) -> None:
    for resource in resources:
        await resource.aclose()


async def forward_request(
    *,
    request: Request,
    upstream_url: str,
    modifier: ResponseModifier,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Response:
    """
    Forward the incoming request to the upstream service and run the
    upstream response through `modifier` before returning it.

    Untouched responses are streamed back raw; rewritten ones are
    returned from memory.
    """
    client = httpx.AsyncClient(timeout=settings.UPSTREAM_TIMEOUT, transport=transport)

    try:
        req = client.build_request(
            method=request.method,
            url=upstream_url,
            headers=_filter_headers(dict(request.headers)),
            params=request.query_params,
        )

        r = await client.send(req, stream=True)

    except httpx.RequestError as e:
        await client.aclose()
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Upstream service unreachable: {str(e)}",
        )
    except Exception:
        await client.aclose()
        raise

    try:
        modified = await modifier(r, request)
    except ProxyError as e:
        await _close(r, client)
        logger.warning(f"Rejecting upstream response from {upstream_url}: {e}")
        raise HTTPException(status_code=_error_status(e), detail=str(e))
    except Exception:
        await _close(r, client)
        raise

    if modified is r:
        return StreamingResponse(
            r.aiter_raw(),
            status_code=r.status_code,
            headers=_filter_headers(dict(r.headers)),
            media_type=r.headers.get("content-type"),
            background=BackgroundTask(_close, r, client),
        )

    await client.aclose()

    return Response(
        content=modified.content,
        status_code=modified.status_code,
        headers=_filter_headers(dict(modified.headers)),
    )
