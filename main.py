import logging
import time
from datetime import datetime, timezone
from typing import Optional

import httpx
from fastapi import FastAPI, Request, Depends, HTTPException
from pydantic import BaseModel

from config import settings
from modifier import ResponseModifier, api_response_modifier
from proxy import forward_request
from routes import Routes
from tenant import extract_label_value


# ======================================================
# App Setup
# ======================================================

app = FastAPI(title="Label Proxy")

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("labelproxy")

handlers = Routes(settings.LABEL)
rules_modifier = api_response_modifier(handlers.rules)
alerts_modifier = api_response_modifier(handlers.alerts)


# ======================================================
# Request Context (Facts Only)
# ======================================================

class RequestContext(BaseModel):
    timestamp: str

    method: str
    path: str
    label: str
    label_value: str

    status_code: int
    reason: Optional[str]
    latency_ms: int


# ======================================================
# Dependencies
# ======================================================

def get_upstream_transport() -> Optional[httpx.AsyncBaseTransport]:
    """
    Transport for upstream calls; None means httpx's default network
    transport.
    """
    return None


# ======================================================
# Health
# ======================================================

@app.get("/health")
def health_check():
    return {"status": "ok"}


# ======================================================
# Filtered Endpoints
# ======================================================

@app.get("/api/v1/rules")
async def rules(
    request: Request,
    label_value: str = Depends(extract_label_value),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_upstream_transport),
):
    return await gateway(
        path="api/v1/rules",
        request=request,
        label_value=label_value,
        modifier=rules_modifier,
        transport=transport,
    )


@app.get("/api/v1/alerts")
async def alerts(
    request: Request,
    label_value: str = Depends(extract_label_value),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_upstream_transport),
):
    return await gateway(
        path="api/v1/alerts",
        request=request,
        label_value=label_value,
        modifier=alerts_modifier,
        transport=transport,
    )


# ======================================================
# Gateway
# ======================================================

async def gateway(
    *,
    path: str,
    request: Request,
    label_value: str,
    modifier: ResponseModifier,
    transport: Optional[httpx.AsyncBaseTransport],
):
    start_time = time.monotonic()
    upstream_url = f"{settings.UPSTREAM_URL.rstrip('/')}/{path}"

    try:
        response = await forward_request(
            request=request,
            upstream_url=upstream_url,
            modifier=modifier,
            transport=transport,
        )
    except HTTPException as e:
        _log_request(request, label_value, e.status_code, e.detail, start_time)
        raise

    _log_request(request, label_value, response.status_code, None, start_time)
    return response


# ======================================================
# Utils
# ======================================================

def _log_request(
    request: Request,
    label_value: str,
    status_code: int,
    reason: Optional[str],
    start_time: float,
) -> None:
    ctx = RequestContext(
        timestamp=datetime.now(timezone.utc).isoformat(),
        method=request.method,
        path=request.url.path,
        label=settings.LABEL,
        label_value=label_value,
        status_code=status_code,
        reason=reason,
        latency_ms=int((time.monotonic() - start_time) * 1000),
    )

    logger.info(ctx.model_dump_json())
