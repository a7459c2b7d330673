"""Estimate resolver: orchestrates the data client, comparable finder and underwriting.

Flow: formatted address → address lookup → market lookup → property search
→ neighborhood within the widest tier → event history → comparables → rent and flip underwrite
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import Sequence

from quickoffer.config import settings
from quickoffer.data.base import PropertyDataSource
from quickoffer.data.parcl_labs import ParclLabsClient
from quickoffer.data.reference import DATABASE_ERRORS, ReferenceDataService
from quickoffer.data.repository import PropertyRepository
from quickoffer.engine.comparables import (
    PricePerSqftStats,
    find_comparables,
    price_per_sqft_stats,
    tiers_from_config,
    validate_tiers,
)
from quickoffer.engine.distance import filter_within_radius
from quickoffer.engine.search import event_date_range, property_filters
from quickoffer.engine.underwrite import calculate_flip_underwrite, calculate_rent_underwrite
from quickoffer.models.property import (
    ComparableProperty,
    ComparablesResult,
    GeoProperty,
    SINGLE_FAMILY,
    StrategyTier,
)
from quickoffer.models.underwrite import FlipUnderwrite, RentUnderwrite, UnderwriteValues

logger = logging.getLogger(__name__)


class AddressFormatError(ValueError):
    """The address is not of the form "street, city, ST zip"."""


class PropertyNotFoundError(LookupError):
    """The data source has no property or market for the address."""


@dataclass(frozen=True)
class ParsedAddress:
    street: str
    city: str
    state: str
    zip_code: str


@dataclass(frozen=True)
class PropertyAnalysis:
    target: GeoProperty
    comparables: ComparablesResult
    stats: PricePerSqftStats


def parse_address(formatted_address: str) -> ParsedAddress:
    """Split "123 Main St, Columbus, OH 43215" into lookup fields.

    The street is upper-cased and whitespace is removed from the city, the
    form the address search endpoint matches against.
    """
    parts = [p.strip() for p in (formatted_address or "").split(",")]
    if len(parts) < 3:
        raise AddressFormatError(f"Invalid address format: {formatted_address!r}")

    street = parts[0].upper()
    city = "".join(parts[1].split())
    state_zip = parts[2].split()
    if not street or not city or len(state_zip) < 2:
        raise AddressFormatError(f"Invalid address format: {formatted_address!r}")

    return ParsedAddress(street=street, city=city, state=state_zip[0].upper(), zip_code=state_zip[1])


def _no_comparables(target: GeoProperty, radius: float = 0.0, months: int = 0) -> PropertyAnalysis:
    return PropertyAnalysis(
        target=target,
        comparables=ComparablesResult(properties=(), radius_used=radius, months_used=months),
        stats=price_per_sqft_stats(()),
    )


class EstimateResolver:
    def __init__(
        self,
        data_source: PropertyDataSource | None = None,
        reference: ReferenceDataService | None = None,
        property_repository: PropertyRepository | None = None,
        tiers: Sequence[StrategyTier] | None = None,
        min_comparables: int | None = None,
    ):
        self.data_source = data_source or ParclLabsClient()
        self.reference = reference or ReferenceDataService(None)
        self.property_repository = property_repository
        self.tiers = tiers_from_config(settings.comparable_tiers) if tiers is None else tuple(tiers)
        validate_tiers(self.tiers)
        # Candidates and events are fetched once, wide enough for every tier
        self.search_radius_miles = max(t.radius_miles for t in self.tiers)
        self.history_months = max(t.lookback_months for t in self.tiers)
        self.min_comparables = settings.min_comparables if min_comparables is None else min_comparables

    async def _save_target(self, target: GeoProperty) -> None:
        if self.property_repository is None:
            return
        try:
            await self.property_repository.save(target)
        except DATABASE_ERRORS as e:
            logger.warning("Failed to save property %s: %s", target.property_id, e)

    async def resolve(self, formatted_address: str, today: date | None = None) -> PropertyAnalysis:
        """Resolve an address into its target property and comparables.

        Raises:
            AddressFormatError: the address cannot be parsed.
            PropertyNotFoundError: no property or market matches the address.
        """
        parsed = parse_address(formatted_address)
        logger.info("Resolving %s, %s %s", parsed.street, parsed.city, parsed.state)

        target = await self.data_source.search_address(
            parsed.street, parsed.city, parsed.state, parsed.zip_code,
        )
        if target is None:
            logger.warning("No property data found for %s, %s", parsed.street, parsed.city)
            raise PropertyNotFoundError("Could not retrieve property data")

        if target.property_type and target.property_type != SINGLE_FAMILY:
            logger.info("Non single-family property %s (%s), skipping comparables",
                        target.property_id, target.property_type)
            return _no_comparables(target)

        market_id = await self.data_source.search_markets(parsed.zip_code, parsed.state)
        if not market_id:
            logger.warning("No market found for %s %s", parsed.zip_code, parsed.state)
            raise PropertyNotFoundError("Could not retrieve market data")

        await self._save_target(target)

        candidates = await self.data_source.search_properties(market_id, property_filters(target))
        neighborhood = filter_within_radius(target, candidates, self.search_radius_miles)
        property_ids = list(dict.fromkeys(p.property_id for p in neighborhood))
        logger.info("%d of %d candidates within %.1fmi of %s",
                    len(property_ids), len(candidates), self.search_radius_miles, target.property_id)

        if not property_ids:
            logger.warning("No neighborhood properties for %s", target.property_id)
            return _no_comparables(target, self.search_radius_miles, self.history_months)

        start_date, end_date = event_date_range(self.history_months, today)
        events = await self.data_source.get_event_history(property_ids, start_date, end_date)

        result = find_comparables(
            target, neighborhood, events,
            tiers=self.tiers, min_count=self.min_comparables, today=today,
        )
        return PropertyAnalysis(
            target=target,
            comparables=result,
            stats=price_per_sqft_stats(result.properties),
        )

    async def _rent_scenario(
        self,
        comparables: Sequence[ComparableProperty],
        condition: str | None,
        square_footage: int | None,
        state: str | None,
        county: str | None,
    ) -> RentUnderwrite:
        market = await self.reference.market_inputs(state, county)
        rehab = await self.reference.rehab_range(condition, square_footage)
        return calculate_rent_underwrite(comparables, market, rehab)

    async def _flip_scenario(
        self,
        comparables: Sequence[ComparableProperty],
        condition: str | None,
        square_footage: int | None,
    ) -> FlipUnderwrite:
        reference = await self.reference.calculation_reference()
        rehab = await self.reference.rehab_range(condition, square_footage)
        return calculate_flip_underwrite(comparables, reference, rehab)

    async def underwrite(
        self,
        comparables: Sequence[ComparableProperty],
        condition: str | None = None,
        square_footage: int | None = None,
        state: str | None = None,
        county: str | None = None,
    ) -> UnderwriteValues:
        """Rent-hold and flip values for a comparable set, computed concurrently."""
        rent, flip = await asyncio.gather(
            self._rent_scenario(comparables, condition, square_footage, state, county),
            self._flip_scenario(comparables, condition, square_footage),
        )
        logger.info("Underwrite: rent %s, ARV %s", rent.rent, flip.after_repair_value)
        return UnderwriteValues(rent=rent, flip=flip)

    async def estimate(
        self,
        formatted_address: str,
        condition: str | None = None,
        today: date | None = None,
    ) -> tuple[PropertyAnalysis, UnderwriteValues]:
        """Resolve an address and underwrite it against its comparables."""
        analysis = await self.resolve(formatted_address, today=today)
        target = analysis.target
        values = await self.underwrite(
            analysis.comparables.properties,
            condition=condition,
            square_footage=target.square_footage,
            state=target.state,
            county=target.county,
        )
        return analysis, values
