"""Map raw registry JSON onto the internal models.

Absent optional fields fall back to defaults ("" / () / None). Only payloads
that are not the expected shape at all raise ``NormalizationError``.
"""

import logging
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from src.api.errors import NormalizationError
from src.domain.models import (
    Address,
    Charge,
    CompanyRecord,
    CompanyStatus,
    CompanySummary,
    FilingEntry,
    Officer,
    PriceObservation,
    Proprietor,
    Restriction,
    SicCode,
    Tenure,
    TitleRecord,
)
from src.utils.dates import parse_date
from src.utils.sic_codes import SicCodeLookup, StaticSicCodeLookup

logger = logging.getLogger(__name__)


def _require_mapping(value: Any, what: str) -> Mapping:
    if not isinstance(value, Mapping):
        raise NormalizationError(
            f"Expected {what} to be an object, got {type(value).__name__}", payload=value
        )
    return value


def _optional_mapping(raw: Mapping, key: str) -> Mapping:
    """Nested object at ``key``, or an empty mapping when absent."""
    value = raw.get(key)
    if value is None:
        return {}
    return _require_mapping(value, key)


def _list_field(raw: Mapping, key: str) -> list:
    value = raw.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise NormalizationError(
            f"Expected '{key}' to be a list, got {type(value).__name__}", payload=raw
        )
    return value


def _text(raw: Mapping, key: str) -> str:
    value = raw.get(key)
    if value is None:
        return ""
    return str(value).strip()


def _optional_text(raw: Mapping, key: str) -> Optional[str]:
    value = _text(raw, key)
    return value or None


def _optional_int(raw: Mapping, key: str) -> Optional[int]:
    value = raw.get(key)
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-numeric %s: %r", key, value)
        return None


def _build(model, what: str, raw: Any, **fields):
    try:
        return model(**fields)
    except ValidationError as e:
        raise NormalizationError(f"Invalid {what}: {e}", payload=raw) from e


def extract_items(payload: Any, *path: str) -> list:
    """Return the list found by walking ``path`` into a payload.

    Missing keys along the way yield an empty list; ``extract_items(p, "result",
    "items")`` reads ``p["result"]["items"]``.
    """
    current = _require_mapping(payload, "response")
    for key in path[:-1]:
        current = _optional_mapping(current, key)
    return _list_field(current, path[-1])


def normalize_address(raw: Any) -> Address:
    if raw is None:
        return Address()
    raw = _require_mapping(raw, "address")
    return Address(
        line1=_text(raw, "address_line_1"),
        line2=_optional_text(raw, "address_line_2"),
        locality=_text(raw, "locality"),
        region=_optional_text(raw, "region"),
        postal_code=_text(raw, "postal_code"),
        country=_text(raw, "country"),
    )


def normalize_company(raw: Any, sic_lookup: Optional[SicCodeLookup] = None) -> CompanyRecord:
    """Normalize a Companies House company profile."""
    raw = _require_mapping(raw, "company profile")
    lookup = sic_lookup or StaticSicCodeLookup()

    company_number = _text(raw, "company_number")
    if not company_number:
        raise NormalizationError("Company profile has no company_number", payload=raw)

    accounts = _optional_mapping(raw, "accounts")
    last_accounts = _optional_mapping(accounts, "last_accounts")
    confirmation = _optional_mapping(raw, "confirmation_statement")
    status_raw = _text(raw, "company_status")

    sic_codes = tuple(
        SicCode(code=str(code).strip(), description=lookup.describe(str(code).strip()))
        for code in _list_field(raw, "sic_codes")
    )

    return _build(
        CompanyRecord,
        "company profile",
        raw,
        company_number=company_number,
        company_name=_text(raw, "company_name"),
        status=CompanyStatus.from_raw(status_raw),
        status_raw=status_raw,
        company_type=_text(raw, "type"),
        date_of_creation=parse_date(raw.get("date_of_creation")),
        date_of_cessation=parse_date(raw.get("date_of_cessation")),
        registered_office_address=normalize_address(raw.get("registered_office_address")),
        sic_codes=sic_codes,
        accounts_next_due=parse_date(accounts.get("next_due")),
        accounts_last_made_up=parse_date(
            last_accounts.get("made_up_to") or accounts.get("last_made_up")
        ),
        confirmation_statement_next_due=parse_date(confirmation.get("next_due")),
        confirmation_statement_last_made_up=parse_date(confirmation.get("last_made_up_to")),
    )


def normalize_search_item(raw: Any) -> CompanySummary:
    raw = _require_mapping(raw, "search item")
    address = _optional_mapping(raw, "address")
    return _build(
        CompanySummary,
        "search item",
        raw,
        company_number=_text(raw, "company_number"),
        title=_text(raw, "title"),
        company_status=_text(raw, "company_status"),
        company_type=_text(raw, "company_type"),
        date_of_creation=parse_date(raw.get("date_of_creation")),
        address_snippet=_text(raw, "address_snippet"),
        postal_code=_text(address, "postal_code"),
        description=_text(raw, "description"),
    )


def normalize_officer(raw: Any) -> Officer:
    raw = _require_mapping(raw, "officer")
    birth = _optional_mapping(raw, "date_of_birth")
    return _build(
        Officer,
        "officer",
        raw,
        name=_text(raw, "name"),
        officer_role=_text(raw, "officer_role"),
        birth_year=_optional_int(birth, "year"),
        birth_month=_optional_int(birth, "month"),
        nationality=_text(raw, "nationality"),
        country_of_residence=_text(raw, "country_of_residence"),
        occupation=_text(raw, "occupation"),
        appointed_on=parse_date(raw.get("appointed_on")),
        resigned_on=parse_date(raw.get("resigned_on")),
        address=normalize_address(raw.get("address")),
    )


def normalize_filing(raw: Any) -> FilingEntry:
    raw = _require_mapping(raw, "filing history item")
    return _build(
        FilingEntry,
        "filing history item",
        raw,
        transaction_id=_text(raw, "transaction_id"),
        type=_text(raw, "type"),
        description=_text(raw, "description"),
        filing_date=parse_date(raw.get("date")),
        category=_text(raw, "category"),
        subcategory=_optional_text(raw, "subcategory"),
    )


def _parse_price(value: Any) -> Optional[int]:
    """Whole-pound price from an int, integral float or digit string."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        cleaned = value.strip().replace(",", "").lstrip("£")
        if cleaned.isdigit():
            return int(cleaned)
    return None


def normalize_price_observation(raw: Any) -> Optional[PriceObservation]:
    """Normalize a Price Paid item.

    Returns None when the item carries no positive whole-pound price; such
    rows cannot be counted and are skipped by callers.
    """
    raw = _require_mapping(raw, "price paid item")
    price = _parse_price(raw.get("price", raw.get("pricePaid")))
    if price is None or price <= 0:
        logger.warning("Skipping price paid item without a usable price: %r", raw.get("price"))
        return None

    new_build = _text(raw, "oldNew") or _text(raw, "newBuild")
    return _build(
        PriceObservation,
        "price paid item",
        raw,
        postcode=_text(raw, "postcode"),
        address=_text(raw, "address"),
        sale_date=parse_date(raw.get("date")),
        price=price,
        property_type=_text(raw, "propertyType"),
        new_build=new_build.upper() in ("Y", "TRUE"),
        tenure=Tenure.from_raw(_text(raw, "duration") or _text(raw, "tenure")),
        paon=_text(raw, "paon"),
        saon=_text(raw, "saon"),
        street=_text(raw, "street"),
        locality=_text(raw, "locality"),
        town=_text(raw, "town"),
        district=_text(raw, "district"),
        county=_text(raw, "county"),
    )


def normalize_price_items(items: list) -> list[PriceObservation]:
    observations = (normalize_price_observation(item) for item in items)
    return [obs for obs in observations if obs is not None]


def normalize_title(raw: Any) -> TitleRecord:
    """Normalize a Land Registry title register entry."""
    raw = _require_mapping(raw, "title record")

    proprietors = tuple(
        Proprietor(name=_text(p, "name"), address=_text(p, "address"))
        for p in (_require_mapping(item, "proprietor") for item in _list_field(raw, "proprietors"))
    )
    charges = tuple(
        Charge(type=_text(c, "type"), date=_text(c, "date"), details=_text(c, "details"))
        for c in (_require_mapping(item, "charge") for item in _list_field(raw, "charges"))
    )
    restrictions = tuple(
        Restriction(type=_text(r, "type"), details=_text(r, "details"))
        for r in (_require_mapping(item, "restriction") for item in _list_field(raw, "restrictions"))
    )

    return _build(
        TitleRecord,
        "title record",
        raw,
        title_number=_text(raw, "titleNumber"),
        address=_text(raw, "address"),
        tenure=Tenure.from_raw(_text(raw, "tenure")),
        proprietors=proprietors,
        charges=charges,
        restrictions=restrictions,
        price_history=tuple(normalize_price_items(_list_field(raw, "priceData"))),
    )
