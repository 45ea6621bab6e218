import logging
from typing import Any, Optional

import httpx

from src.api.errors import NormalizationError, RegistryError, TransportError
from src.api.transport import DEFAULT_TIMEOUT, RegistryTransport
from src.domain.models import CompanyRecord, CompanySummary, FilingEntry, Officer
from src.utils.normalizers import (
    extract_items,
    normalize_company,
    normalize_filing,
    normalize_officer,
    normalize_search_item,
)
from src.utils.sic_codes import SicCodeLookup, StaticSicCodeLookup

logger = logging.getLogger(__name__)

BASE_URL = "https://api.company-information.service.gov.uk"
REGISTRY = "company"


class CompaniesHouseClient:
    """Client for the Companies House public data API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        sic_lookup: Optional[SicCodeLookup] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.transport = RegistryTransport(base_url, api_key, timeout=timeout, transport=transport)
        self.sic_lookup = sic_lookup or StaticSicCodeLookup()

    async def _get(self, operation: str, path: str, params: Optional[dict] = None) -> Any:
        """GET a path and decode its JSON body, attributing failures to ``operation``."""
        try:
            response = await self.transport.send("GET", path, params=params)
            return response.payload()
        except (TransportError, NormalizationError) as e:
            logger.warning("Companies House %s failed for %s: %s", operation, path, e)
            raise RegistryError(REGISTRY, operation, e) from e

    def _normalize(self, operation: str, func, *args, **kwargs):
        try:
            return func(*args, **kwargs)
        except NormalizationError as e:
            logger.warning("Companies House %s returned an unexpected shape: %s", operation, e)
            raise RegistryError(REGISTRY, operation, e) from e

    async def search_companies(self, query: str, page_size: int = 20) -> list[CompanySummary]:
        """Search for companies by name."""
        if not query or not query.strip():
            raise ValueError("Search query must not be empty")
        if page_size < 1:
            raise ValueError("page_size must be at least 1")

        params = {"q": query.strip(), "items_per_page": page_size}
        payload = await self._get("search", "/search/companies", params=params)
        return self._normalize(
            "search",
            lambda: [normalize_search_item(item) for item in extract_items(payload, "items")],
        )

    async def fetch_company(self, company_number: str) -> CompanyRecord:
        """Get the company profile.

        A missing company surfaces as a ``RegistryError`` with
        ``status_code == 404``; it is not treated differently here.
        """
        payload = await self._get("fetch_company", f"/company/{company_number}")
        return self._normalize("fetch_company", normalize_company, payload, self.sic_lookup)

    async def fetch_officers(self, company_number: str) -> list[Officer]:
        payload = await self._get("fetch_officers", f"/company/{company_number}/officers")
        return self._normalize(
            "fetch_officers",
            lambda: [normalize_officer(item) for item in extract_items(payload, "items")],
        )

    async def fetch_filing_history(
        self, company_number: str, page_size: int = 35
    ) -> list[FilingEntry]:
        """Get filing history, most recent first."""
        if page_size < 1:
            raise ValueError("page_size must be at least 1")

        payload = await self._get(
            "fetch_filing_history",
            f"/company/{company_number}/filing-history",
            params={"items_per_page": page_size},
        )
        return self._normalize(
            "fetch_filing_history",
            lambda: [normalize_filing(item) for item in extract_items(payload, "items")],
        )

    async def fetch_controlling_persons(self, company_number: str) -> list[dict]:
        """Get persons with significant control as raw registry records.

        PSC records vary a lot by kind (individual, corporate entity, legal
        person, super-secure), so they are passed through unnormalized.
        """
        payload = await self._get(
            "fetch_controlling_persons",
            f"/company/{company_number}/persons-with-significant-control",
        )
        items = self._normalize("fetch_controlling_persons", extract_items, payload, "items")
        return [item for item in items if isinstance(item, dict)]

    async def aclose(self):
        await self.transport.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.aclose()
