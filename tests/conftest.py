"""Pytest configuration and fixtures.

Registry HTTP traffic is served by ``httpx.MockTransport`` so no test ever
touches the network.
"""

from typing import Any

import httpx
import pytest


@pytest.fixture
def mock_env(monkeypatch):
    """Set up environment variables for tests.

    This fixture can be used to override default test environment variables
    for specific test cases.
    """
    monkeypatch.setenv("COMPANIES_HOUSE_API_KEY", "test-ch-key")
    monkeypatch.setenv("LAND_REGISTRY_API_KEY", "test-lr-key")


@pytest.fixture
def make_transport():
    """Build a MockTransport serving JSON bodies keyed by URL path.

    Values may also be an ``httpx.Response`` or an exception instance to
    raise. Unknown paths answer 404. Every request is recorded in
    ``transport.requests``.
    """

    def _make(routes: dict[str, Any]) -> httpx.MockTransport:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            body = routes.get(request.url.path)
            if body is None:
                return httpx.Response(404, json={"errors": [{"error": "not-found"}]})
            if isinstance(body, Exception):
                raise body
            if isinstance(body, httpx.Response):
                return body
            return httpx.Response(200, json=body)

        transport = httpx.MockTransport(handler)
        transport.requests = requests
        return transport

    return _make


@pytest.fixture
def company_profile() -> dict:
    """Companies House profile of an active company."""
    return {
        "company_number": "12345678",
        "company_name": "ACME PROPERTY HOLDINGS LTD",
        "company_status": "active",
        "type": "ltd",
        "date_of_creation": "2015-03-02",
        "registered_office_address": {
            "address_line_1": "1 High Street",
            "address_line_2": "Suite 4",
            "locality": "London",
            "region": "Greater London",
            "postal_code": "SW1A 1AA",
            "country": "England",
        },
        "sic_codes": ["68100", "99999"],
        "accounts": {
            "next_due": "2027-09-30",
            "last_accounts": {"made_up_to": "2025-12-31"},
        },
        "confirmation_statement": {
            "next_due": "2027-03-16",
            "last_made_up_to": "2026-03-02",
        },
    }


@pytest.fixture
def filing_history() -> dict:
    return {
        "items": [
            {
                "transaction_id": "MzAwMDAwMDAwMQ",
                "type": "AA",
                "description": "Accounts for a small company made up to 31 December 2025",
                "date": "2026-06-01",
                "category": "accounts",
            },
            {
                "transaction_id": "MzAwMDAwMDAwMg",
                "type": "CS01",
                "description": "Confirmation statement made on 2 March 2026 with no updates",
                "date": "2026-03-10",
                "category": "confirmation-statement",
                "subcategory": "annual-return",
            },
        ]
    }


@pytest.fixture
def price_paid_items() -> dict:
    return {
        "result": {
            "items": [
                {
                    "postcode": "SW1A 1AA",
                    "address": "10 HIGH STREET, LONDON",
                    "date": "2025-05-20",
                    "price": 450000,
                    "propertyType": "F",
                    "oldNew": "N",
                    "duration": "L",
                    "paon": "10",
                    "saon": "",
                    "street": "HIGH STREET",
                    "locality": "",
                    "town": "LONDON",
                    "district": "CITY OF WESTMINSTER",
                    "county": "GREATER LONDON",
                },
                {
                    "postcode": "SW1A 1AA",
                    "address": "12 HIGH STREET, LONDON",
                    "date": "2024-11-02",
                    "price": 380000,
                    "propertyType": "F",
                    "oldNew": "Y",
                    "duration": "F",
                },
            ]
        }
    }
