"""Checks whether a person holds a role in a company."""

import logging

from src.api.companies_house import CompaniesHouseClient
from src.domain.models import PersonAssociation
from src.utils.concurrency import gather_or_cancel
from src.utils.name_matching import names_overlap

logger = logging.getLogger(__name__)

PSC_ROLE = "Person with Significant Control"
OFFICER_WEIGHT = 30
PSC_WEIGHT = 40
MAX_CONFIDENCE = 100


class AssociationChecker:
    """Matches a person against a company's officers and PSCs."""

    def __init__(self, companies_house: CompaniesHouseClient):
        self.companies_house = companies_house

    async def check_person_association(
        self, company_number: str, person_name: str
    ) -> PersonAssociation:
        """Each matching officer adds 30 to the confidence and each matching
        person with significant control adds 40, capped at 100.
        """
        if not person_name or not person_name.strip():
            raise ValueError("Person name must not be empty")

        officers, controllers = await gather_or_cancel(
            self.companies_house.fetch_officers(company_number),
            self.companies_house.fetch_controlling_persons(company_number),
        )

        roles: list[str] = []
        confidence = 0

        for officer in officers:
            if names_overlap(officer.name, person_name):
                roles.append(officer.officer_role or "officer")
                confidence += OFFICER_WEIGHT

        for psc in controllers:
            if names_overlap(str(psc.get("name") or ""), person_name):
                roles.append(PSC_ROLE)
                confidence += PSC_WEIGHT

        unique_roles = tuple(dict.fromkeys(roles))
        logger.info(
            "Person association for %s: %d role(s) found", company_number, len(unique_roles)
        )
        return PersonAssociation(
            is_associated=bool(unique_roles),
            roles=unique_roles,
            confidence=min(confidence, MAX_CONFIDENCE),
        )
