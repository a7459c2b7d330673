"""Underwriting inputs and slider values.

Percentages are stored as whole-number percents (8.0 means 8%), matching the
reference tables they are loaded from.
"""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class MarketUnderwriteInputs:
    cap_rate: Decimal
    operating_expense: Decimal
    reference_market: str = "Default"


@dataclass(frozen=True)
class CalculationReference:
    interest_rate: Decimal
    total_closing_holding_costs: Decimal
    margin_percentage: Decimal
    commission_rate: Decimal


@dataclass(frozen=True)
class ConditionCosts:
    condition: str
    low_cost: Decimal
    high_cost: Decimal


@dataclass(frozen=True)
class RehabRange:
    low_rehab: Decimal
    high_rehab: Decimal
    condition: str = "Default"


@dataclass(frozen=True)
class RentUnderwrite:
    rent: Decimal
    expense: Decimal
    cap_rate: Decimal
    low_rehab: Decimal
    high_rehab: Decimal


@dataclass(frozen=True)
class FlipUnderwrite:
    selling_costs: Decimal
    holding_costs: Decimal
    margin: Decimal
    low_rehab: Decimal
    high_rehab: Decimal
    after_repair_value: Decimal


@dataclass(frozen=True)
class UnderwriteValues:
    rent: RentUnderwrite
    flip: FlipUnderwrite


DEFAULT_RENT_UNDERWRITE = RentUnderwrite(
    rent=Decimal("2500"),
    expense=Decimal("40"),
    cap_rate=Decimal("8.0"),
    low_rehab=Decimal("50"),
    high_rehab=Decimal("75"),
)

DEFAULT_FLIP_UNDERWRITE = FlipUnderwrite(
    selling_costs=Decimal("10"),
    holding_costs=Decimal("6"),
    margin=Decimal("25"),
    low_rehab=Decimal("50"),
    high_rehab=Decimal("75"),
    after_repair_value=Decimal("250000"),
)

DEFAULT_UNDERWRITE_VALUES = UnderwriteValues(
    rent=DEFAULT_RENT_UNDERWRITE,
    flip=DEFAULT_FLIP_UNDERWRITE,
)

DEFAULT_MARKET_INPUTS = MarketUnderwriteInputs(
    cap_rate=Decimal("8.0"),
    operating_expense=Decimal("40.0"),
    reference_market="Default",
)

DEFAULT_CALCULATION_REFERENCE = CalculationReference(
    interest_rate=Decimal("7.0"),
    total_closing_holding_costs=Decimal("4.0"),
    margin_percentage=Decimal("20.0"),
    commission_rate=Decimal("6.0"),
)

DEFAULT_CONDITION_COSTS = ConditionCosts(
    condition="Default",
    low_cost=Decimal("20.0"),
    high_cost=Decimal("40.0"),
)

DEFAULT_REHAB_RANGE = RehabRange(
    low_rehab=Decimal("50"),
    high_rehab=Decimal("75"),
    condition="Default",
)
