"""SIC code descriptions.

Clients take any object with a ``describe(code) -> str`` method, so a full
classification table can be swapped in without touching them.
"""

from typing import Mapping, Optional, Protocol

PROPERTY_SIC_CODES = {
    "68100": "Buying and selling of own real estate",
    "68200": "Renting and operating of own or leased real estate",
    "68209": "Other letting and operating of own or leased real estate",
    "68310": "Real estate agencies",
    "68320": "Management of real estate on a fee or contract basis",
}


class SicCodeLookup(Protocol):
    def describe(self, code: str) -> str: ...


class StaticSicCodeLookup:
    """Lookup backed by an in-memory table.

    Codes missing from the table describe themselves as the raw code.
    """

    def __init__(self, descriptions: Optional[Mapping[str, str]] = None):
        self.descriptions = dict(PROPERTY_SIC_CODES if descriptions is None else descriptions)

    def describe(self, code: str) -> str:
        return self.descriptions.get(code.strip(), code)
