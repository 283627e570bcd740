class ProxyError(Exception):
    """
    Base class for failures while rewriting an upstream response.

    Every failure is fatal for the response being processed: the
    original body has already been consumed, so nothing is passed
    through unfiltered.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        if self.__cause__ is not None:
            return f"{self.message}: {self.__cause__}"
        return self.message


class DecodeError(ProxyError):
    """Envelope or payload could not be decoded."""


class EncodeError(ProxyError):
    """Filtered payload or envelope could not be serialized."""


class MissingTenantError(ProxyError):
    """No tenant value is attached to the request context."""
