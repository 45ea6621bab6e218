"""Area price statistics from Land Registry Price Paid data."""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from src.api.land_registry import LandRegistryClient
from src.domain.models import PriceObservation, PriceRange, PriceStatistics

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _round_half_up(numerator: int, denominator: int) -> int:
    return (2 * numerator + denominator) // (2 * denominator)


def compute_price_statistics(prices: list[int], computed_at: datetime) -> PriceStatistics:
    """Describe a sample of prices.

    The median is the element at index ``count // 2`` of the sorted sample,
    which for an even count is the upper of the two middle values rather
    than their mean. Existing consumers depend on this, so it is kept.
    """
    if not prices:
        return PriceStatistics(computed_at=computed_at)

    ordered = sorted(prices)
    count = len(ordered)

    return PriceStatistics(
        average_price=_round_half_up(sum(ordered), count),
        median_price=ordered[count // 2],
        price_range=PriceRange(min=ordered[0], max=ordered[-1]),
        sample_size=count,
        computed_at=computed_at,
    )


class PriceAggregator:
    """Computes price statistics for a postcode."""

    def __init__(
        self,
        land_registry: LandRegistryClient,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.land_registry = land_registry
        self.clock = clock

    async def aggregate(
        self, postcode: str, property_type: Optional[str] = None
    ) -> PriceStatistics:
        """Aggregate sale prices for a postcode.

        Only an empty result produces the zero-sample statistics; registry
        errors propagate unchanged.
        """
        observations = await self.land_registry.fetch_prices_by_postcode(postcode)

        if property_type:
            wanted = property_type.strip().lower()
            observations = [
                obs for obs in observations if obs.property_type.lower() == wanted
            ]

        stats = compute_price_statistics(_prices(observations), self.clock())
        logger.info(
            "Aggregated %d sales for %s: average=%d median=%d",
            stats.sample_size,
            postcode,
            stats.average_price,
            stats.median_price,
        )
        return stats


def _prices(observations: list[PriceObservation]) -> list[int]:
    return [obs.price for obs in observations]
