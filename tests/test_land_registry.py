"""Tests for HM Land Registry client."""

import asyncio
from datetime import date

import httpx
import pytest

from src.api.errors import InvalidPostcodeError, NormalizationError, RegistryError
from src.api.land_registry import LandRegistryClient


def _run(client: LandRegistryClient, coro_factory):
    async def scenario():
        async with client:
            return await coro_factory(client)

    return asyncio.run(scenario())


class TestLandRegistryClient:
    """Test Land Registry client."""

    @pytest.fixture
    def client_for(self, make_transport):
        def _client(routes, **kwargs):
            transport = make_transport(routes)
            client = LandRegistryClient(
                "test-api-key", base_url="https://lr.test", transport=transport, **kwargs
            )
            return client, transport

        return _client

    def test_fetch_prices_by_postcode(self, client_for, price_paid_items):
        client, transport = client_for({"/def/ppi": price_paid_items})

        observations = _run(client, lambda c: c.fetch_prices_by_postcode("sw1a 1aa"))

        assert [obs.price for obs in observations] == [450000, 380000]
        params = transport.requests[0].url.params
        assert params["postcode"] == "SW1A1AA"
        assert params["limit"] == "100"

    def test_postcode_whitespace_stripped(self, client_for):
        client, transport = client_for({"/def/ppi": {"result": {"items": []}}})

        _run(client, lambda c: c.fetch_prices_by_postcode("  ex1\t 1aa ", limit=5))

        params = transport.requests[0].url.params
        assert params["postcode"] == "EX11AA"
        assert params["limit"] == "5"

    def test_invalid_postcode_rejected_before_request(self, client_for):
        client, transport = client_for({})

        with pytest.raises(InvalidPostcodeError):
            _run(client, lambda c: c.fetch_prices_by_postcode("NOT A POSTCODE"))

        assert transport.requests == []

    def test_invalid_postcode_sent_when_validation_disabled(self, client_for):
        client, transport = client_for(
            {"/def/ppi": {"result": {"items": []}}}, validate_postcodes=False
        )

        result = _run(client, lambda c: c.fetch_prices_by_postcode("not a postcode"))

        assert result == []
        assert transport.requests[0].url.params["postcode"] == "NOTAPOSTCODE"

    def test_sale_date_window_sent(self, client_for):
        client, transport = client_for({"/def/ppi": {"result": {"items": []}}})

        _run(
            client,
            lambda c: c.fetch_prices_by_postcode(
                "SW1A 1AA", from_date=date(2024, 1, 1), to_date=date(2024, 12, 31)
            ),
        )

        params = transport.requests[0].url.params
        assert params["min_date"] == "2024-01-01"
        assert params["max_date"] == "2024-12-31"

    def test_sale_date_window_omitted_by_default(self, client_for):
        client, transport = client_for({"/def/ppi": {"result": {"items": []}}})

        _run(client, lambda c: c.fetch_prices_by_postcode("SW1A 1AA"))

        params = transport.requests[0].url.params
        assert "min_date" not in params
        assert "max_date" not in params

    def test_reversed_sale_date_window_rejected(self, client_for):
        client, transport = client_for({})

        with pytest.raises(ValueError):
            _run(
                client,
                lambda c: c.fetch_prices_by_postcode(
                    "SW1A 1AA", from_date=date(2025, 1, 1), to_date=date(2024, 1, 1)
                ),
            )

        assert transport.requests == []

    def test_normalize_passes_keyword_arguments(self, client_for):
        client, _ = client_for({})

        def shape(payload, *, key):
            if key not in payload:
                raise NormalizationError("missing key")
            return payload[key]

        assert client._normalize("op", shape, {"a": 1}, key="a") == 1
        with pytest.raises(RegistryError) as exc_info:
            client._normalize("op", shape, {}, key="a")
        assert exc_info.value.kind == "normalization"

    def test_missing_result_is_empty(self, client_for):
        client, _ = client_for({"/def/ppi": {}})

        assert _run(client, lambda c: c.fetch_prices_by_postcode("SW1A 1AA")) == []

    def test_fetch_prices_by_address(self, client_for, price_paid_items):
        client, transport = client_for({"/def/ppi": price_paid_items})

        observations = _run(client, lambda c: c.fetch_prices_by_address("HIGH STREET"))

        assert len(observations) == 2
        params = transport.requests[0].url.params
        assert params["street"] == "HIGH STREET"
        assert params["limit"] == "50"

    def test_fetch_title_record(self, client_for):
        client, _ = client_for(
            {
                "/def/ccod/DN123456": {
                    "titleNumber": "DN123456",
                    "address": "10 High Street, Exeter",
                    "tenure": "Leasehold",
                    "proprietors": [{"name": "ACME LTD", "address": "1 High Street"}],
                }
            }
        )

        title = _run(client, lambda c: c.fetch_title_record("DN123456"))

        assert title.title_number == "DN123456"
        assert title.proprietors[0].name == "ACME LTD"

    def test_fetch_ownership_history_returns_raw_records(self, client_for):
        history = [{"name": "ACME LTD", "dateAdded": "2019-05-01"}]
        client, _ = client_for({"/def/ccod/DN123456/proprietors": {"result": {"items": history}}})

        assert _run(client, lambda c: c.fetch_ownership_history("DN123456")) == history

    def test_failure_is_registry_error(self, client_for):
        client, _ = client_for({"/def/ppi": httpx.Response(500)})

        with pytest.raises(RegistryError) as exc_info:
            _run(client, lambda c: c.fetch_prices_by_postcode("SW1A 1AA"))

        assert exc_info.value.registry == "property"
        assert exc_info.value.operation == "fetch_prices_by_postcode"

    def test_malformed_items_is_registry_error(self, client_for):
        client, _ = client_for({"/def/ppi": {"result": {"items": "nope"}}})

        with pytest.raises(RegistryError) as exc_info:
            _run(client, lambda c: c.fetch_prices_by_postcode("SW1A 1AA"))

        assert exc_info.value.kind == "normalization"
