import logging
from datetime import date
from typing import Any, Optional

import httpx

from src.api.errors import InvalidPostcodeError, NormalizationError, RegistryError, TransportError
from src.api.transport import DEFAULT_TIMEOUT, RegistryTransport
from src.domain.models import PriceObservation, TitleRecord
from src.utils.normalizers import extract_items, normalize_price_items, normalize_title
from src.utils.postcodes import is_valid_postcode, normalize_postcode

logger = logging.getLogger(__name__)

BASE_URL = "https://landregistry.data.gov.uk"
REGISTRY = "property"


class LandRegistryClient:
    """Client for HM Land Registry title and Price Paid data.

    Postcodes are checked against the UK postcode shape before a price lookup
    is sent; pass ``validate_postcodes=False`` to send them unchecked.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        validate_postcodes: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.transport = RegistryTransport(base_url, api_key, timeout=timeout, transport=transport)
        self.validate_postcodes = validate_postcodes

    async def _get(self, operation: str, path: str, params: Optional[dict] = None) -> Any:
        try:
            response = await self.transport.send("GET", path, params=params)
            return response.payload()
        except (TransportError, NormalizationError) as e:
            logger.warning("Land Registry %s failed for %s: %s", operation, path, e)
            raise RegistryError(REGISTRY, operation, e) from e

    def _normalize(self, operation: str, func, *args, **kwargs):
        try:
            return func(*args, **kwargs)
        except NormalizationError as e:
            logger.warning("Land Registry %s returned an unexpected shape: %s", operation, e)
            raise RegistryError(REGISTRY, operation, e) from e

    async def _fetch_prices(self, operation: str, params: dict) -> list[PriceObservation]:
        payload = await self._get(operation, "/def/ppi", params=params)
        items = self._normalize(operation, extract_items, payload, "result", "items")
        return self._normalize(operation, normalize_price_items, items)

    async def fetch_title_record(self, title_number: str) -> TitleRecord:
        payload = await self._get("fetch_title_record", f"/def/ccod/{title_number}")
        return self._normalize("fetch_title_record", normalize_title, payload)

    async def fetch_prices_by_postcode(
        self,
        postcode: str,
        limit: int = 100,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
    ) -> list[PriceObservation]:
        """Get Price Paid records for a postcode, optionally within a sale date window."""
        if self.validate_postcodes and not is_valid_postcode(postcode):
            raise InvalidPostcodeError(postcode)
        if from_date and to_date and from_date > to_date:
            raise ValueError("from_date must not be after to_date")

        params = {"postcode": normalize_postcode(postcode), "limit": limit}
        if from_date:
            params["min_date"] = from_date.isoformat()
        if to_date:
            params["max_date"] = to_date.isoformat()
        return await self._fetch_prices("fetch_prices_by_postcode", params)

    async def fetch_prices_by_address(
        self, address_fragment: str, limit: int = 50
    ) -> list[PriceObservation]:
        """Get Price Paid records whose street matches an address fragment."""
        params = {"street": address_fragment, "limit": limit}
        return await self._fetch_prices("fetch_prices_by_address", params)

    async def fetch_ownership_history(self, title_number: str) -> list[dict]:
        """Get historic proprietors of a title as raw registry records."""
        payload = await self._get(
            "fetch_ownership_history", f"/def/ccod/{title_number}/proprietors"
        )
        items = self._normalize("fetch_ownership_history", extract_items, payload, "result", "items")
        return [item for item in items if isinstance(item, dict)]

    async def aclose(self):
        await self.transport.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.aclose()
