import re


def normalize_company_name(name: str) -> str:
    """Normalize company name for matching.

    - Uppercase
    - Remove "THE" prefix
    - Standardize LTD/LIMITED
    - Standardize &/AND
    - Remove extra whitespace
    """
    normalized = name.upper().strip()

    # Remove "THE" prefix
    normalized = re.sub(r"^THE\s+", "", normalized)

    # Standardize LIMITED/LTD
    normalized = re.sub(r"\bLIMITED\b", "LTD", normalized)

    # Standardize AND/&
    normalized = re.sub(r"\s*&\s*", " AND ", normalized)

    # Remove punctuation except alphanumeric and spaces
    normalized = re.sub(r"[^\w\s]", "", normalized)

    # Collapse multiple spaces
    normalized = re.sub(r"\s+", " ", normalized).strip()

    return normalized


def normalize_person_name(name: str) -> str:
    """Normalize a person's name for matching.

    Companies House lists officers as "SURNAME, Forenames"; the comma is
    dropped and the surname moved last so both orderings compare equal.
    """
    cleaned = name.strip()
    if "," in cleaned:
        surname, _, forenames = cleaned.partition(",")
        cleaned = f"{forenames} {surname}"
    cleaned = re.sub(r"[^\w\s]", "", cleaned.lower())
    return re.sub(r"\s+", " ", cleaned).strip()


def names_overlap(name1: str, name2: str) -> bool:
    """Check whether either normalized person name contains the other."""
    first = normalize_person_name(name1)
    second = normalize_person_name(name2)
    if not first or not second:
        return False
    return first in second or second in first


def names_match(name1: str, name2: str) -> bool:
    """Check if two company names match after normalization."""
    return normalize_company_name(name1) == normalize_company_name(name2)
