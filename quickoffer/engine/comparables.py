"""Comparable property discovery.

Walks an ordered list of (radius, lookback) tiers, narrowest first, and
returns the first tier that yields enough comparables. Each property
contributes at most one comparable: its most recent qualifying sale or
rental listing.

Pure functions. No I/O.
"""

import calendar
import logging
import statistics
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Iterable, Sequence

from quickoffer.engine.distance import distance_between, filter_within_radius
from quickoffer.models.property import (
    ComparableProperty,
    ComparablesResult,
    EventHistoryItem,
    GeoProperty,
    StrategyTier,
)

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")

DEFAULT_TIERS: tuple[StrategyTier, ...] = (
    StrategyTier(radius_miles=0.5, lookback_months=3),
    StrategyTier(radius_miles=0.75, lookback_months=6),
    StrategyTier(radius_miles=1.0, lookback_months=6),
    StrategyTier(radius_miles=1.5, lookback_months=6),
)

MIN_COMPARABLES = 10


@dataclass(frozen=True)
class PricePerSqftStats:
    median: Decimal
    average: Decimal
    sample_size: int


def tiers_from_config(pairs: Iterable[Sequence[float]]) -> tuple[StrategyTier, ...]:
    """Build tiers from (radius_miles, lookback_months) pairs."""
    tiers = tuple(StrategyTier(radius_miles=float(r), lookback_months=int(m)) for r, m in pairs)
    validate_tiers(tiers)
    return tiers


def validate_tiers(tiers: Sequence[StrategyTier]) -> None:
    if not tiers:
        raise ValueError("At least one comparable search tier is required")
    for prev, curr in zip(tiers, tiers[1:]):
        if curr.radius_miles < prev.radius_miles or curr.lookback_months < prev.lookback_months:
            raise ValueError(
                f"Tiers must widen monotonically: {prev} is followed by {curr}"
            )


def months_before(today: date, months: int) -> date:
    """Same calendar day `months` earlier, clamped to the end of shorter months."""
    total = today.year * 12 + (today.month - 1) - months
    year, month_index = divmod(total, 12)
    month = month_index + 1
    day = min(today.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def _latest_per_property(
    events: Iterable[EventHistoryItem],
    property_ids: set[str],
    cutoff: date,
    qualifies: Callable[[EventHistoryItem], bool],
) -> dict[str, EventHistoryItem]:
    latest: dict[str, EventHistoryItem] = {}
    for event in events:
        if event.property_id not in property_ids or event.event_date < cutoff:
            continue
        if not qualifies(event):
            continue
        existing = latest.get(event.property_id)
        if existing is None or event.event_date > existing.event_date:
            latest[event.property_id] = event
    return latest


def comparables_for_tier(
    target: GeoProperty,
    candidates: Sequence[GeoProperty],
    events: Sequence[EventHistoryItem],
    tier: StrategyTier,
    today: date | None = None,
) -> ComparablesResult:
    """Comparables within one tier's radius and lookback window, nearest first."""
    cutoff = months_before(today or date.today(), tier.lookback_months)

    nearby = filter_within_radius(target, candidates, tier.radius_miles)
    by_id: dict[str, GeoProperty] = {}
    for prop in nearby:
        by_id.setdefault(prop.property_id, prop)
    property_ids = set(by_id)

    sales = _latest_per_property(events, property_ids, cutoff, lambda e: e.is_sale)
    rentals = _latest_per_property(events, property_ids, cutoff, lambda e: e.is_rental_listing)

    logger.debug(
        "Tier %.2fmi/%dmo: %d nearby, %d with sales, %d with rentals",
        tier.radius_miles, tier.lookback_months, len(property_ids), len(sales), len(rentals),
    )

    # Sales are merged first, so an equal-dated rental never displaces a sale.
    merged: dict[str, EventHistoryItem] = {}
    for event in (*sales.values(), *rentals.values()):
        existing = merged.get(event.property_id)
        if existing is None or event.event_date > existing.event_date:
            merged[event.property_id] = event

    comparables = [
        ComparableProperty(
            property=by_id[property_id],
            event=event,
            distance_miles=distance_between(target, by_id[property_id]),
        )
        for property_id, event in merged.items()
    ]
    comparables.sort(key=lambda c: c.distance_miles)

    return ComparablesResult(
        properties=tuple(comparables),
        radius_used=tier.radius_miles,
        months_used=tier.lookback_months,
    )


def find_comparables(
    target: GeoProperty,
    candidates: Sequence[GeoProperty],
    events: Sequence[EventHistoryItem],
    tiers: Sequence[StrategyTier] | None = None,
    min_count: int | None = None,
    today: date | None = None,
) -> ComparablesResult:
    """Find comparables using the narrowest tier that yields enough of them.

    Args:
        target: Subject property (must carry coordinates).
        candidates: Properties returned by the neighborhood search.
        events: Event history for the candidates.
        tiers: Ordered search tiers; defaults to DEFAULT_TIERS.
        min_count: Comparables needed to stop early; defaults to MIN_COMPARABLES.
        today: Reference date for lookback windows.

    Returns:
        The first tier result with at least min_count comparables, otherwise
        the result of the widest tier.
    """
    tiers = tuple(tiers) if tiers is not None else DEFAULT_TIERS
    validate_tiers(tiers)
    threshold = MIN_COMPARABLES if min_count is None else min_count
    today = today or date.today()

    logger.info(
        "Finding comparables for %s: %d candidates, %d events",
        target.property_id, len(candidates), len(events),
    )

    result = None
    for tier in tiers:
        result = comparables_for_tier(target, candidates, events, tier, today=today)
        if len(result.properties) >= threshold:
            logger.info(
                "Found %d comparables at %.2fmi/%dmo",
                len(result.properties), tier.radius_miles, tier.lookback_months,
            )
            return result
        logger.info(
            "Only %d comparables at %.2fmi/%dmo, widening search",
            len(result.properties), tier.radius_miles, tier.lookback_months,
        )

    return result


def price_per_sqft_stats(comparables: Iterable[ComparableProperty]) -> PricePerSqftStats:
    """Median and mean sale price per square foot across sale comparables."""
    values = [
        Decimal(str(c.event.price)) / Decimal(c.property.square_footage)
        for c in comparables
        if c.event.is_sale and c.event.price and c.property.square_footage > 0
    ]
    if not values:
        return PricePerSqftStats(median=Decimal("0"), average=Decimal("0"), sample_size=0)

    return PricePerSqftStats(
        median=Decimal(statistics.median(values)).quantize(TWO_PLACES, ROUND_HALF_UP),
        average=Decimal(statistics.mean(values)).quantize(TWO_PLACES, ROUND_HALF_UP),
        sample_size=len(values),
    )
