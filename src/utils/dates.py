"""Lenient date parsing for registry payloads."""

import logging
import re
from datetime import date, datetime
from typing import Optional, Union

from dateutil import parser as dateutil_parser

logger = logging.getLogger(__name__)

# Year-month only, e.g. "2024-01"
PARTIAL_DATE_PATTERN = re.compile(r"^\d{4}-\d{1,2}$")

PLACEHOLDER_VALUES = ("n/a", "na", "none", "null", "-", "tbc", "tbd", "unknown")


def parse_date(value: Union[str, date, None]) -> Optional[date]:
    """Parse a registry date, returning None when it is absent or unusable.

    Companies House and the Price Paid data use ISO dates ("2024-01-15"),
    sometimes with a time part ("2024-01-15T00:00:00Z"). Other formats are
    accepted through dateutil; ambiguous dates such as 01/02/2024 are read
    day first.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None

    cleaned = value.strip()

    if cleaned.lower() in PLACEHOLDER_VALUES:
        return None

    if PARTIAL_DATE_PATTERN.match(cleaned):
        return None

    try:
        return date.fromisoformat(cleaned[:10])
    except ValueError:
        pass

    try:
        return dateutil_parser.parse(cleaned, dayfirst=True, fuzzy=False).date()
    except (ValueError, TypeError, OverflowError) as e:
        logger.warning("Could not parse date '%s': %s", value, e)
        return None
