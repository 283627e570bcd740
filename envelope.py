from typing import Any, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError
from pydantic_core import PydanticSerializationError, to_jsonable_python

from errors import DecodeError, EncodeError


SUCCESS = "success"


class APIResponse(BaseModel):
    """
    Outer envelope shared by every monitoring API response.

    `data` is kept as plain decoded JSON until a handler asks for a
    typed view of it. The request context travels with the envelope
    but is never serialized.
    """

    model_config = ConfigDict(populate_by_name=True)

    status: str
    data: Any = None
    error_type: Optional[str] = Field(default=None, alias="errorType")
    error: Optional[str] = None
    warnings: Optional[List[str]] = None

    _context: Any = PrivateAttr(default=None)

    @classmethod
    def decode(cls, raw: bytes) -> "APIResponse":
        try:
            apir = cls.model_validate_json(raw)
        except ValidationError as e:
            raise DecodeError("malformed envelope") from e

        if apir.status != SUCCESS:
            raise DecodeError(f"unexpected response status: {apir.status!r}")

        return apir

    def attach_context(self, context: Any) -> None:
        self._context = context

    @property
    def context(self) -> Any:
        return self._context

    def set_data(self, value: Any) -> None:
        try:
            if isinstance(value, BaseModel):
                self.data = value.model_dump(mode="json", by_alias=True, exclude_unset=True)
            else:
                self.data = to_jsonable_python(value, by_alias=True)
        except PydanticSerializationError as e:
            raise EncodeError("can't serialize payload") from e

    def encode(self) -> bytes:
        # Trailing newline, as a streaming JSON encoder would write it.
        return self.model_dump_json(by_alias=True, exclude_unset=True).encode() + b"\n"


async def get_api_response(resp: httpx.Response, context: Any) -> APIResponse:
    """
    Drain and close the upstream body, then decode its envelope.

    The body is closed whatever happens next; it cannot be replayed.
    """
    try:
        if resp.status_code != httpx.codes.OK:
            raise DecodeError(f"unexpected status code: {resp.status_code}")
        body = await resp.aread()
    except httpx.HTTPError as e:
        raise DecodeError("can't read response body") from e
    finally:
        await resp.aclose()

    apir = APIResponse.decode(body)
    apir.attach_context(context)

    return apir
