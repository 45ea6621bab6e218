import logging

from src.api.land_registry import LandRegistryClient
from src.domain.models import OwnershipCheck
from src.utils.name_matching import names_match, names_overlap

logger = logging.getLogger(__name__)


def _is_owner(proprietor_name: str, owner_name: str) -> bool:
    return names_match(proprietor_name, owner_name) or names_overlap(proprietor_name, owner_name)


class OwnershipValidator:
    """Checks a claimed owner against the proprietors on a title."""

    def __init__(self, land_registry: LandRegistryClient):
        self.land_registry = land_registry

    async def validate(self, title_number: str, owner_name: str) -> OwnershipCheck:
        if not owner_name or not owner_name.strip():
            raise ValueError("Owner name must not be empty")

        title = await self.land_registry.fetch_title_record(title_number)
        matches = [p for p in title.proprietors if _is_owner(p.name, owner_name)]

        if not matches:
            logger.info("No proprietor on %s matches the claimed owner", title_number)
            return OwnershipCheck(
                is_valid=False, confidence=0, details="No matching proprietors found"
            )

        confidence = round(len(matches) / len(title.proprietors) * 100)
        return OwnershipCheck(
            is_valid=True,
            confidence=confidence,
            details=f"Found {len(matches)} matching proprietor(s)",
        )
