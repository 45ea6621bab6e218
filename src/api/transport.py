import json
import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel, ConfigDict

from src.api.errors import NormalizationError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class RawResponse(BaseModel):
    """Successful registry response, body not yet interpreted."""

    model_config = ConfigDict(frozen=True)

    status_code: int
    url: str
    content: bytes = b""

    def payload(self) -> Any:
        """Decode the body as JSON."""
        if not self.content:
            return {}
        try:
            return json.loads(self.content)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise NormalizationError(f"Response from {self.url} is not JSON: {e}") from e


class RegistryTransport:
    """Thin HTTP transport for a single registry.

    Authenticates with HTTP Basic using the API key as username and an empty
    password. Performs exactly one request per ``send``; retries belong to
    whoever wraps the client.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self.client = httpx.AsyncClient(
            base_url=base_url,
            auth=httpx.BasicAuth(api_key, ""),
            headers={"Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    async def send(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        body: Optional[Any] = None,
        timeout: Optional[float] = None,
    ) -> RawResponse:
        """Send one request, raising ``TransportError`` on any failure."""
        kwargs: dict[str, Any] = {"params": params, "json": body}
        if timeout is not None:
            kwargs["timeout"] = timeout

        try:
            response = await self.client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("%s %s%s failed: %s", method, self.base_url, path, e)
            raise TransportError(f"{method} {path} failed: {e}", cause=e) from e

        if not response.is_success:
            logger.warning(
                "%s %s returned HTTP %d", method, response.url, response.status_code
            )
            raise TransportError(
                f"{method} {path} returned HTTP {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        return RawResponse(
            status_code=response.status_code,
            url=str(response.url),
            content=response.content,
        )

    async def aclose(self):
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.aclose()
