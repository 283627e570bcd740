from typing import Any

from fastapi import HTTPException, Request, status

from config import settings
from errors import MissingTenantError

STATE_KEY = "label_value"


# =========================
# TENANT EXTRACTION
# =========================

def extract_label_value(request: Request) -> str:
    """
    Resolve the tenant from the request.
    Query parameter named after the configured label: ?<LABEL>=<value>
    """
    value = request.query_params.get(settings.LABEL)
    if not value:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f'Bad request. The "{settings.LABEL}" query parameter must be provided.',
        )

    with_label_value(request, value)
    return value


# =========================
# REQUEST CONTEXT
# =========================

def with_label_value(request: Request, value: str) -> None:
    setattr(request.state, STATE_KEY, value)


def must_label_value(context: Any) -> str:
    """
    Read the tenant back from the request the response belongs to.
    Filtering never runs without one.
    """
    state = getattr(context, "state", None)
    value = getattr(state, STATE_KEY, None)
    if not value:
        raise MissingTenantError("can't find label value in request context")
    return value
