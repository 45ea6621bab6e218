import re

# Applied to the normalized form, so the optional space never appears
UK_POSTCODE_PATTERN = re.compile(r"^[A-Z]{1,2}[0-9][A-Z0-9]? ?[0-9][A-Z]{2}$", re.IGNORECASE)


def normalize_postcode(postcode: str) -> str:
    """Upper-case a postcode and strip all whitespace.

    "sw1a 1aa" -> "SW1A1AA"
    """
    return re.sub(r"\s+", "", postcode).upper()


def is_valid_postcode(postcode: str) -> bool:
    """Check that a postcode has the shape of a UK postcode."""
    return bool(UK_POSTCODE_PATTERN.match(normalize_postcode(postcode)))
