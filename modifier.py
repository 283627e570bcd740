import inspect
import logging
from typing import Any, Awaitable, Callable, Union

import httpx
from pydantic_core import PydanticSerializationError

from envelope import APIResponse, get_api_response
from errors import DecodeError, EncodeError

logger = logging.getLogger("labelproxy.modifier")


EnvelopeModifier = Callable[[APIResponse], Union[None, Awaitable[None]]]
ResponseModifier = Callable[[httpx.Response, Any], Awaitable[httpx.Response]]

# Framing of the upstream body; meaningless once it is re-encoded.
STALE_FRAMING_HEADERS = {
    "content-length",
    "content-encoding",
    "transfer-encoding",
}


def api_response_modifier(modifier: EnvelopeModifier) -> ResponseModifier:
    """
    Turn an envelope modifier into a hook over the in-flight upstream
    response.

    Non-200 responses are returned untouched, without reading them.
    Otherwise the body is decoded, handed to `modifier`, re-encoded and
    returned as a new response with a matching Content-Length.
    """

    async def modify(resp: httpx.Response, context: Any) -> httpx.Response:
        if resp.status_code != httpx.codes.OK:
            # Pass non-200 responses as-is.
            logger.debug(f"Passing through upstream response with status {resp.status_code}")
            return resp

        try:
            apir = await get_api_response(resp, context)
        except DecodeError as e:
            raise DecodeError("can't decode API response") from e

        result = modifier(apir)
        if inspect.isawaitable(result):
            await result

        try:
            body = apir.encode()
        except PydanticSerializationError as e:
            raise EncodeError("can't encode API response") from e

        headers = httpx.Headers(
            [
                (k, v)
                for k, v in resp.headers.multi_items()
                if k.lower() not in STALE_FRAMING_HEADERS
            ]
        )
        headers["Content-Length"] = str(len(body))

        return httpx.Response(
            status_code=resp.status_code,
            headers=headers,
            content=body,
        )

    return modify
