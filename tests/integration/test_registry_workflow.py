"""Integration tests for verification and aggregation.

Real clients talk to ``httpx.MockTransport`` registries, so requests go
through the transport, the normalizers and the services together.
"""

import asyncio
from datetime import date, datetime, timezone

import httpx
import pytest

from src.api.companies_house import CompaniesHouseClient
from src.api.errors import RegistryError
from src.api.land_registry import LandRegistryClient
from src.services.compliance import ComplianceVerifier
from src.services.ownership import OwnershipValidator
from src.services.pricing import PriceAggregator
from src.services.risk import CompanyRiskAssessor
from src.utils.retry import with_retry

TODAY = date(2026, 10, 17)
NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


class TestVerificationWorkflow:
    def _verify(self, transport, company_number="12345678"):
        async def scenario():
            async with CompaniesHouseClient(
                "test-key", base_url="https://ch.test", transport=transport
            ) as client:
                return await ComplianceVerifier(client, clock=lambda: TODAY).verify(company_number)

        return asyncio.run(scenario())

    def test_company_in_good_standing(self, make_transport, company_profile, filing_history):
        transport = make_transport(
            {
                "/company/12345678": company_profile,
                "/company/12345678/filing-history": filing_history,
            }
        )

        verdict = self._verify(transport)

        assert verdict.is_in_good_standing is True
        assert verdict.issues == ()
        paths = sorted(request.url.path for request in transport.requests)
        assert paths == ["/company/12345678", "/company/12345678/filing-history"]

    def test_struck_off_company_with_overdue_filings(self, make_transport, company_profile):
        company_profile["company_status"] = "active"
        company_profile["accounts"]["next_due"] = "2025-09-30"
        company_profile["confirmation_statement"]["next_due"] = "2025-03-16"
        filings = {
            "items": [
                {"description": "First Gazette notice for compulsory strike-off", "date": "2026-09-01"}
            ]
        }
        transport = make_transport(
            {"/company/12345678": company_profile, "/company/12345678/filing-history": filings}
        )

        verdict = self._verify(transport)

        assert verdict.issues == (
            "Accounts are overdue",
            "Confirmation statement is overdue",
            "Recent strike-off or dissolution notice found",
        )
        assert verdict.is_in_good_standing is False

    def test_unknown_company(self, make_transport, filing_history):
        transport = make_transport({"/company/00000000/filing-history": filing_history})

        with pytest.raises(RegistryError) as exc_info:
            self._verify(transport, "00000000")

        assert exc_info.value.is_not_found

    def test_retry_wrapper_recovers_from_outage(self, make_transport, company_profile, filing_history):
        """Test an orchestration-level retry repeats the whole verification."""
        responses = [httpx.Response(503), httpx.Response(200, json=company_profile)]

        def handler(request):
            if request.url.path.endswith("filing-history"):
                return httpx.Response(200, json=filing_history)
            return responses.pop(0)

        async def scenario():
            async with CompaniesHouseClient(
                "test-key", base_url="https://ch.test", transport=httpx.MockTransport(handler)
            ) as client:
                verifier = ComplianceVerifier(client, clock=lambda: TODAY)
                return await with_retry(verifier.verify, attempts=2, min_wait=0, max_wait=0)(
                    "12345678"
                )

        assert asyncio.run(scenario()).is_in_good_standing is True
        assert responses == []


class TestRiskWorkflow:
    def _assess(self, transport):
        async def scenario():
            async with CompaniesHouseClient(
                "test-key", base_url="https://ch.test", transport=transport
            ) as client:
                return await CompanyRiskAssessor(client, clock=lambda: TODAY).assess("12345678")

        return asyncio.run(scenario())

    def test_established_property_company(self, make_transport, company_profile):
        transport = make_transport(
            {
                "/company/12345678": company_profile,
                "/company/12345678/officers": {
                    "items": [{"name": "SMITH, John", "officer_role": "director"}]
                },
            }
        )

        result = self._assess(transport)

        assert result.is_legitimate is True
        assert result.risk_score == 0
        assert result.company_age == 11
        assert result.last_filing_date == date(2025, 12, 31)

    def test_dormant_shell_company(self, make_transport, company_profile):
        company_profile["company_status"] = "dissolved"
        company_profile["sic_codes"] = ["99999"]
        transport = make_transport(
            {
                "/company/12345678": company_profile,
                "/company/12345678/officers": {"items": []},
            }
        )

        result = self._assess(transport)

        assert result.is_legitimate is False
        assert result.risk_factors == (
            "Company is not active",
            "No officers found",
            "No property-related business activities",
        )
        assert result.risk_score == 95


class TestPricingWorkflow:
    def _client(self, transport):
        return LandRegistryClient("test-key", base_url="https://lr.test", transport=transport)

    def test_aggregate_postcode(self, make_transport, price_paid_items):
        transport = make_transport({"/def/ppi": price_paid_items})

        async def scenario():
            async with self._client(transport) as client:
                return await PriceAggregator(client, clock=lambda: NOW).aggregate("sw1a 1aa")

        stats = asyncio.run(scenario())

        assert stats.average_price == 415000
        assert stats.median_price == 450000
        assert stats.price_range.min == 380000
        assert stats.price_range.max == 450000
        assert stats.sample_size == 2
        assert stats.computed_at == NOW

    def test_no_sales(self, make_transport):
        transport = make_transport({"/def/ppi": {"result": {"items": []}}})

        async def scenario():
            async with self._client(transport) as client:
                return await PriceAggregator(client, clock=lambda: NOW).aggregate("EX1 1AA")

        stats = asyncio.run(scenario())

        assert stats.sample_size == 0
        assert stats.average_price == stats.median_price == 0

    def test_registry_outage_is_not_an_empty_sample(self, make_transport):
        transport = make_transport({"/def/ppi": httpx.Response(503)})

        async def scenario():
            async with self._client(transport) as client:
                return await PriceAggregator(client).aggregate("EX1 1AA")

        with pytest.raises(RegistryError):
            asyncio.run(scenario())

    def test_validate_owner(self, make_transport):
        transport = make_transport(
            {
                "/def/ccod/DN123456": {
                    "titleNumber": "DN123456",
                    "proprietors": [{"name": "ACME PROPERTY HOLDINGS LIMITED"}],
                }
            }
        )

        async def scenario():
            async with self._client(transport) as client:
                return await OwnershipValidator(client).validate("DN123456", "Acme Property Holdings Ltd")

        result = asyncio.run(scenario())

        assert result.is_valid is True
        assert result.confidence == 100
