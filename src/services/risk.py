"""Company legitimacy screening against Companies House."""

import logging
from datetime import date
from typing import Callable, Optional

from src.api.companies_house import CompaniesHouseClient
from src.domain.models import CompanyRecord, CompanyRiskAssessment, Officer
from src.utils.concurrency import gather_or_cancel
from src.utils.sic_codes import PROPERTY_SIC_CODES

logger = logging.getLogger(__name__)

NOT_ACTIVE = "Company is not active"
RECENTLY_INCORPORATED = "Company is less than 1 year old"
NO_OFFICERS = "No officers found"
STALE_ACCOUNTS = "Accounts not filed within last year"
NO_PROPERTY_ACTIVITY = "No property-related business activities"

# Points added per factor.
RISK_WEIGHTS = {
    NOT_ACTIVE: 50,
    RECENTLY_INCORPORATED: 20,
    NO_OFFICERS: 30,
    STALE_ACCOUNTS: 25,
    NO_PROPERTY_ACTIVITY: 15,
}

MAX_RISK_SCORE = 100
LEGITIMACY_THRESHOLD = 50
DAYS_PER_YEAR = 365


def company_age_years(created: Optional[date], today: date) -> Optional[int]:
    if created is None:
        return None
    return (today - created).days // DAYS_PER_YEAR


def find_risk_factors(
    company: CompanyRecord, officers: list[Officer], today: date
) -> list[str]:
    """Return the risk factors that apply to a company, in weight order.

    A company with no creation date is not penalised for age, and one that
    has never filed accounts is not penalised for stale accounts.
    """
    factors = []

    if company.status_raw != "active":
        factors.append(NOT_ACTIVE)

    age = company_age_years(company.date_of_creation, today)
    if age is not None and age < 1:
        factors.append(RECENTLY_INCORPORATED)

    if not officers:
        factors.append(NO_OFFICERS)

    last_accounts = company.accounts_last_made_up
    if last_accounts is not None and (today - last_accounts).days > DAYS_PER_YEAR:
        factors.append(STALE_ACCOUNTS)

    if not any(sic.code in PROPERTY_SIC_CODES for sic in company.sic_codes):
        factors.append(NO_PROPERTY_ACTIVITY)

    return factors


class CompanyRiskAssessor:
    """Scores how likely a company is to be a legitimate property business."""

    def __init__(
        self,
        companies_house: CompaniesHouseClient,
        clock: Callable[[], date] = date.today,
    ):
        self.companies_house = companies_house
        self.clock = clock

    async def assess(self, company_number: str) -> CompanyRiskAssessment:
        """Fetch the profile and officers concurrently and score the company.

        A company is legitimate when its uncapped score is below 50; the
        reported score is capped at 100.
        """
        company, officers = await gather_or_cancel(
            self.companies_house.fetch_company(company_number),
            self.companies_house.fetch_officers(company_number),
        )

        today = self.clock()
        factors = find_risk_factors(company, officers, today)
        score = sum(RISK_WEIGHTS[factor] for factor in factors)

        assessment = CompanyRiskAssessment(
            is_active=company.status_raw == "active",
            is_legitimate=score < LEGITIMACY_THRESHOLD,
            risk_score=min(score, MAX_RISK_SCORE),
            risk_factors=tuple(factors),
            company_age=company_age_years(company.date_of_creation, today),
            last_filing_date=company.accounts_last_made_up,
        )
        logger.info(
            "Assessed company %s: risk_score=%d legitimate=%s",
            company_number,
            assessment.risk_score,
            assessment.is_legitimate,
        )
        return assessment
