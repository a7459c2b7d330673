"""Tests for rent-hold and flip underwriting."""

from datetime import date
from decimal import Decimal

import pytest

from quickoffer.engine.underwrite import (
    calculate_flip_underwrite,
    calculate_rehab_range,
    calculate_rent_underwrite,
    select_after_repair_value,
    select_representative_rent,
)
from quickoffer.models.property import ComparableProperty, EventHistoryItem
from quickoffer.models.underwrite import (
    CalculationReference,
    ConditionCosts,
    DEFAULT_CONDITION_COSTS,
    DEFAULT_REHAB_RANGE,
    MarketUnderwriteInputs,
    RehabRange,
)


@pytest.fixture
def comp(make_property, make_sale, make_rental):
    """Build a comparable from an event kind and price."""
    counter = iter(range(1000))

    def _comp(kind: str, price: int | None, distance: float = 0.3) -> ComparableProperty:
        pid = f"p{next(counter)}"
        event = make_sale(pid, price) if kind == "sale" else make_rental(pid, price)
        return ComparableProperty(property=make_property(pid, 0.0, 0.001), event=event, distance_miles=distance)
    return _comp


@pytest.fixture
def market() -> MarketUnderwriteInputs:
    return MarketUnderwriteInputs(cap_rate=Decimal("7.5"), operating_expense=Decimal("35"), reference_market="Columbus")


@pytest.fixture
def reference() -> CalculationReference:
    return CalculationReference(
        interest_rate=Decimal("7.0"),
        total_closing_holding_costs=Decimal("4.0"),
        margin_percentage=Decimal("20.0"),
        commission_rate=Decimal("6.0"),
    )


@pytest.fixture
def rehab() -> RehabRange:
    return RehabRange(low_rehab=Decimal("30000"), high_rehab=Decimal("45000"), condition="Medium")


class TestRepresentativeRent:
    def test_third_highest_of_three(self, comp):
        rentals = [comp("rental", 3000), comp("rental", 2800), comp("rental", 2200)]
        assert select_representative_rent(rentals) == Decimal("2200")

    def test_third_highest_of_many(self, comp):
        rentals = [comp("rental", p) for p in (1800, 3000, 2100, 2800, 2500, 1500)]
        assert select_representative_rent(rentals) == Decimal("2500")

    def test_two_rentals_uses_lowest(self, comp):
        assert select_representative_rent([comp("rental", 3000), comp("rental", 2600)]) == Decimal("2600")

    def test_one_rental(self, comp):
        assert select_representative_rent([comp("rental", 1900)]) == Decimal("1900")

    def test_no_rentals_default(self, comp):
        assert select_representative_rent([comp("sale", 300000)]) == Decimal("2500")

    def test_sales_ignored(self, comp):
        comps = [comp("sale", 900000), comp("rental", 2000), comp("sale", 800000), comp("rental", 2400)]
        assert select_representative_rent(comps) == Decimal("2000")

    def test_missing_price_at_rank_falls_back(self, comp):
        rentals = [comp("rental", 3000), comp("rental", 2800), comp("rental", None)]
        assert select_representative_rent(rentals) == Decimal("2500")


class TestAfterRepairValue:
    def test_single_sale(self, comp):
        assert select_after_repair_value([comp("sale", 300000)]) == Decimal("300000")

    def test_second_highest(self, comp):
        sales = [comp("sale", p) for p in (250000, 410000, 390000, 200000)]
        assert select_after_repair_value(sales) == Decimal("390000")

    def test_no_sales_default(self, comp):
        assert select_after_repair_value([comp("rental", 2000)]) == Decimal("250000")

    def test_empty_default(self):
        assert select_after_repair_value([]) == Decimal("250000")


class TestRehabRange:
    def test_scales_by_square_footage(self):
        costs = ConditionCosts("Medium", Decimal("20.5"), Decimal("33.25"))
        rehab = calculate_rehab_range(costs, "Medium", 1500)
        assert rehab.low_rehab == Decimal("30750")
        assert rehab.high_rehab == Decimal("49875")
        assert rehab.condition == "Medium"

    def test_rounds_half_up(self):
        costs = ConditionCosts("Light", Decimal("10.25"), Decimal("10.75"))
        rehab = calculate_rehab_range(costs, "Light", 2)
        assert rehab.low_rehab == Decimal("21")   # 20.5
        assert rehab.high_rehab == Decimal("22")  # 21.5

    def test_standard_condition_unscaled(self):
        costs = ConditionCosts("Standard", Decimal("12"), Decimal("18"))
        rehab = calculate_rehab_range(costs, "STANDARD", 1500)
        assert rehab.low_rehab == Decimal("12")
        assert rehab.high_rehab == Decimal("18")

    @pytest.mark.parametrize("sqft", [0, -100, None])
    def test_invalid_square_footage_default(self, sqft):
        rehab = calculate_rehab_range(DEFAULT_CONDITION_COSTS, "Medium", sqft)
        assert rehab.low_rehab == DEFAULT_REHAB_RANGE.low_rehab
        assert rehab.high_rehab == DEFAULT_REHAB_RANGE.high_rehab


class TestRentUnderwrite:
    def test_combines_rent_market_and_rehab(self, comp, market, rehab):
        rentals = [comp("rental", 3000), comp("rental", 2800), comp("rental", 2200)]
        result = calculate_rent_underwrite(rentals, market, rehab)
        assert result.rent == Decimal("2200")
        assert result.cap_rate == Decimal("7.5")
        assert result.expense == Decimal("35")
        assert result.low_rehab == Decimal("30000")
        assert result.high_rehab == Decimal("45000")

    def test_no_rentals_still_uses_market(self, market, rehab):
        result = calculate_rent_underwrite([], market, rehab)
        assert result.rent == Decimal("2500")
        assert result.cap_rate == Decimal("7.5")


class TestFlipUnderwrite:
    def test_single_sale_arv(self, comp, reference, rehab):
        result = calculate_flip_underwrite([comp("sale", 300000)], reference, rehab)
        assert result.after_repair_value == Decimal("300000")
        assert result.selling_costs == Decimal("6.0")
        assert result.holding_costs == Decimal("4.0")
        assert result.margin == Decimal("20.0")
        assert result.low_rehab == Decimal("30000")

    def test_zero_reference_values_use_flip_defaults(self, comp, rehab):
        zero = CalculationReference(Decimal("0"), Decimal("0"), Decimal("0"), Decimal("0"))
        result = calculate_flip_underwrite([comp("sale", 300000)], zero, rehab)
        assert result.selling_costs == Decimal("10")
        assert result.holding_costs == Decimal("6")
        assert result.margin == Decimal("25")

    def test_no_sales_default_arv(self, comp, reference, rehab):
        result = calculate_flip_underwrite([comp("rental", 2000)], reference, rehab)
        assert result.after_repair_value == Decimal("250000")


class TestEventClassification:
    def test_type_or_name_marks_rental(self, make_property):
        prop = make_property("p", 0.0, 0.001)
        by_name = ComparableProperty(
            property=prop,
            event=EventHistoryItem("p", "", "LISTED_RENT", date(2025, 5, 1), Decimal("2700")),
            distance_miles=0.1,
        )
        assert select_representative_rent([by_name]) == Decimal("2700")
