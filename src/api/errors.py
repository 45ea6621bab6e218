"""Error types raised by the registry clients.

Callers branch on the exception class (or ``RegistryError.kind``) rather than
parsing messages.
"""

from typing import Any, Optional

# Keep diagnostic bodies small enough to log
MAX_BODY_CHARS = 2000


class TransportError(Exception):
    """Network failure, timeout or non-2xx response from a registry."""

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        self.cause = cause
        self.status_code = status_code
        self.body = body[:MAX_BODY_CHARS] if body else body
        super().__init__(message)


class NormalizationError(Exception):
    """A registry response did not have the expected raw shape."""

    def __init__(self, message: str, payload: Any = None):
        self.payload = payload
        super().__init__(message)


class InvalidPostcodeError(ValueError):
    """Postcode does not have the shape of a UK postcode."""

    def __init__(self, postcode: str):
        self.postcode = postcode
        super().__init__(f"Invalid UK postcode: {postcode!r}")


class RegistryError(Exception):
    """A transport or normalization failure attributed to a registry operation."""

    def __init__(self, registry: str, operation: str, cause: Exception):
        self.registry = registry
        self.operation = operation
        self.cause = cause
        super().__init__(f"{registry} registry {operation} failed: {cause}")

    @property
    def kind(self) -> str:
        if isinstance(self.cause, NormalizationError):
            return "normalization"
        return "transport"

    @property
    def status_code(self) -> Optional[int]:
        return getattr(self.cause, "status_code", None)

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404
