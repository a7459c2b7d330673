"""Rent-hold and flip underwriting from a comparable set.

The representative rent is the third-highest rental listing and the
after-repair value is the second-highest sale, which keeps the one or two
priciest outliers from driving the offer.

Pure functions. No I/O: market inputs, calculation reference and rehab
range are looked up by the caller.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Sequence

from quickoffer.models.property import ComparableProperty, EventType, LISTED_RENT, SOLD
from quickoffer.models.underwrite import (
    CalculationReference,
    ConditionCosts,
    DEFAULT_FLIP_UNDERWRITE,
    DEFAULT_REHAB_RANGE,
    DEFAULT_RENT_UNDERWRITE,
    FlipUnderwrite,
    MarketUnderwriteInputs,
    RehabRange,
    RentUnderwrite,
)

logger = logging.getLogger(__name__)

RENT_RANK = 3
ARV_RANK = 2
STANDARD_CONDITION = "standard"


def _is_rental(comp: ComparableProperty) -> bool:
    return comp.event.event_type == EventType.RENTAL or comp.event.event_name == LISTED_RENT


def _is_sale(comp: ComparableProperty) -> bool:
    return comp.event.event_type == EventType.SALE or comp.event.event_name == SOLD


def _by_price_desc(comps: Iterable[ComparableProperty]) -> list[ComparableProperty]:
    return sorted(comps, key=lambda c: c.price or Decimal("0"), reverse=True)


def select_ranked_price(
    comps: Sequence[ComparableProperty],
    rank: int,
    default: Decimal,
) -> Decimal:
    """Price at `rank` (1-based) in descending price order.

    With fewer than `rank` comparables the lowest available price is used;
    with none, or a missing price at the chosen position, `default`.
    """
    top = _by_price_desc(comps)[:rank]
    if not top:
        return default
    chosen = top[rank - 1] if len(top) >= rank else top[-1]
    return Decimal(str(chosen.price)) if chosen.price else default


def select_representative_rent(
    comparables: Iterable[ComparableProperty],
    default: Decimal = DEFAULT_RENT_UNDERWRITE.rent,
) -> Decimal:
    rentals = [c for c in comparables if _is_rental(c)]
    rent = select_ranked_price(rentals, RENT_RANK, default)
    logger.debug("Selected rent %s from %d rental comparables", rent, len(rentals))
    return rent


def select_after_repair_value(
    comparables: Iterable[ComparableProperty],
    default: Decimal = DEFAULT_FLIP_UNDERWRITE.after_repair_value,
) -> Decimal:
    sales = [c for c in comparables if _is_sale(c)]
    arv = select_ranked_price(sales, ARV_RANK, default)
    logger.debug("Selected ARV %s from %d sale comparables", arv, len(sales))
    return arv


def calculate_rehab_range(
    costs: ConditionCosts,
    condition: str,
    square_footage: int | None,
) -> RehabRange:
    """Scale per-sqft condition costs by square footage.

    The standard condition carries flat per-unit costs that are returned as-is.
    """
    if not square_footage or square_footage <= 0:
        logger.warning("Invalid square footage %r, using default rehab range", square_footage)
        return RehabRange(
            low_rehab=DEFAULT_REHAB_RANGE.low_rehab,
            high_rehab=DEFAULT_REHAB_RANGE.high_rehab,
            condition=costs.condition,
        )

    if condition.strip().lower() == STANDARD_CONDITION:
        return RehabRange(low_rehab=costs.low_cost, high_rehab=costs.high_cost, condition=costs.condition)

    sqft = Decimal(square_footage)
    return RehabRange(
        low_rehab=(costs.low_cost * sqft).quantize(Decimal("1"), ROUND_HALF_UP),
        high_rehab=(costs.high_cost * sqft).quantize(Decimal("1"), ROUND_HALF_UP),
        condition=costs.condition,
    )


def calculate_rent_underwrite(
    comparables: Sequence[ComparableProperty],
    market: MarketUnderwriteInputs,
    rehab: RehabRange,
) -> RentUnderwrite:
    return RentUnderwrite(
        rent=select_representative_rent(comparables),
        expense=market.operating_expense,
        cap_rate=market.cap_rate,
        low_rehab=rehab.low_rehab,
        high_rehab=rehab.high_rehab,
    )


def calculate_flip_underwrite(
    comparables: Sequence[ComparableProperty],
    reference: CalculationReference,
    rehab: RehabRange,
) -> FlipUnderwrite:
    defaults = DEFAULT_FLIP_UNDERWRITE
    return FlipUnderwrite(
        selling_costs=reference.commission_rate or defaults.selling_costs,
        holding_costs=reference.total_closing_holding_costs or defaults.holding_costs,
        margin=reference.margin_percentage or defaults.margin,
        low_rehab=rehab.low_rehab,
        high_rehab=rehab.high_rehab,
        after_repair_value=select_after_repair_value(comparables),
    )
