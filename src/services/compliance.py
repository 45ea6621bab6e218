"""Company compliance verification against Companies House."""

import logging
from datetime import date
from typing import Callable, Optional

from src.api.companies_house import CompaniesHouseClient
from src.domain.models import ComplianceVerdict, CompanyRecord, FilingEntry
from src.utils.concurrency import gather_or_cancel

logger = logging.getLogger(__name__)

RECENT_FILINGS = 10

ACCOUNTS_OVERDUE = "Accounts are overdue"
CONFIRMATION_OVERDUE = "Confirmation statement is overdue"
STRIKE_OFF_NOTICE = "Recent strike-off or dissolution notice found"

STRIKE_OFF_KEYWORDS = ("strike", "dissolution")


# Due dates run from midnight, so a date due today is already past.
def _is_overdue(due: Optional[date], today: date) -> bool:
    return due is not None and due <= today


def find_issues(
    company: CompanyRecord, filings: list[FilingEntry], today: date
) -> list[str]:
    """Evaluate the compliance rules, returning issues in rule order."""
    issues = []

    if _is_overdue(company.accounts_next_due, today):
        issues.append(ACCOUNTS_OVERDUE)

    if _is_overdue(company.confirmation_statement_next_due, today):
        issues.append(CONFIRMATION_OVERDUE)

    if any(
        keyword in filing.description.lower()
        for filing in filings
        for keyword in STRIKE_OFF_KEYWORDS
    ):
        issues.append(STRIKE_OFF_NOTICE)

    return issues


class ComplianceVerifier:
    """Decides whether a company is active and in good standing."""

    def __init__(
        self,
        companies_house: CompaniesHouseClient,
        clock: Callable[[], date] = date.today,
    ):
        self.companies_house = companies_house
        self.clock = clock

    async def verify(self, company_number: str) -> ComplianceVerdict:
        """Verify a company.

        The profile and the recent filings are fetched concurrently; if
        either fetch fails the other is cancelled and the ``RegistryError``
        propagates. There is no partial verdict.
        """
        company, filings = await gather_or_cancel(
            self.companies_house.fetch_company(company_number),
            self.companies_house.fetch_filing_history(company_number, page_size=RECENT_FILINGS),
        )

        is_active = company.status_raw == "active"
        issues = find_issues(company, filings[:RECENT_FILINGS], self.clock())

        verdict = ComplianceVerdict(
            is_active=is_active,
            is_in_good_standing=is_active and not issues,
            status_label=company.status_raw,
            issues=tuple(issues),
        )
        logger.info(
            "Verified company %s: status=%s issues=%d",
            company_number,
            verdict.status_label,
            len(verdict.issues),
        )
        return verdict
