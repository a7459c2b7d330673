"""Tests for the fail-open reference data service."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from quickoffer.data.reference import ReferenceDataService
from quickoffer.data.repository import ReferenceRepository
from quickoffer.models.underwrite import (
    DEFAULT_CALCULATION_REFERENCE,
    DEFAULT_CONDITION_COSTS,
    DEFAULT_MARKET_INPUTS,
    DEFAULT_REHAB_RANGE,
)


@pytest.fixture
def service(seeded):
    return ReferenceDataService(ReferenceRepository(seeded))


@pytest.fixture
def empty_source():
    source = AsyncMock()
    source.get_market_underwrite_inputs.return_value = None
    source.get_default_market_underwrite_inputs.return_value = None
    source.get_calculation_reference.return_value = None
    source.get_condition_costs.return_value = None
    source.get_default_condition_costs.return_value = None
    return source


@pytest.fixture
def broken_source():
    err = OperationalError("SELECT 1", {}, Exception("connection refused"))
    source = AsyncMock()
    source.get_market_underwrite_inputs.side_effect = err
    source.get_default_market_underwrite_inputs.side_effect = err
    source.get_calculation_reference.side_effect = err
    source.get_condition_costs.side_effect = err
    source.get_default_condition_costs.side_effect = err
    return source


class TestMarketInputs:
    async def test_county_match(self, service):
        inputs = await service.market_inputs("OH", "Franklin")
        assert inputs.reference_market == "Columbus"
        assert inputs.cap_rate == Decimal("7.5")

    async def test_normalizes_state_and_county(self, service):
        inputs = await service.market_inputs("oh", "  Franklin ")
        assert inputs.reference_market == "Columbus"

    async def test_unknown_county_uses_default_row(self, service):
        inputs = await service.market_inputs("TX", "Travis")
        assert inputs.reference_market == "National"
        assert inputs.operating_expense == Decimal("42")

    @pytest.mark.parametrize("state,county", [(None, "Franklin"), ("OH", None), ("", "")])
    async def test_missing_location_uses_default_row(self, service, state, county):
        inputs = await service.market_inputs(state, county)
        assert inputs.reference_market == "National"

    async def test_empty_tables_use_constants(self, empty_source):
        inputs = await ReferenceDataService(empty_source).market_inputs("OH", "Franklin")
        assert inputs == DEFAULT_MARKET_INPUTS
        assert inputs.cap_rate == Decimal("8.0")
        assert inputs.operating_expense == Decimal("40.0")

    async def test_database_error_uses_constants(self, broken_source):
        assert await ReferenceDataService(broken_source).market_inputs("OH", "Franklin") == DEFAULT_MARKET_INPUTS

    async def test_connection_refused_uses_constants(self, empty_source):
        empty_source.get_market_underwrite_inputs.side_effect = ConnectionRefusedError()
        assert await ReferenceDataService(empty_source).market_inputs("OH", "Franklin") == DEFAULT_MARKET_INPUTS


class TestCalculationReference:
    async def test_latest_active(self, service):
        ref = await service.calculation_reference()
        assert ref.commission_rate == Decimal("5.5")

    async def test_missing_uses_constants(self, empty_source):
        ref = await ReferenceDataService(empty_source).calculation_reference()
        assert ref == DEFAULT_CALCULATION_REFERENCE

    async def test_error_uses_constants(self, broken_source):
        ref = await ReferenceDataService(broken_source).calculation_reference()
        assert ref.interest_rate == Decimal("7.0")
        assert ref.total_closing_holding_costs == Decimal("4.0")
        assert ref.margin_percentage == Decimal("20.0")
        assert ref.commission_rate == Decimal("6.0")


class TestConditionCosts:
    async def test_exact_condition(self, service):
        costs = await service.condition_costs("Medium")
        assert costs.low_cost == Decimal("25")

    async def test_unknown_condition_falls_back_to_standard(self, service):
        costs = await service.condition_costs("Luxury")
        assert costs.condition == "Standard"

    async def test_unknown_condition_without_rows_uses_constants(self, empty_source):
        costs = await ReferenceDataService(empty_source).condition_costs("Luxury")
        assert costs == DEFAULT_CONDITION_COSTS
        assert (costs.low_cost, costs.high_cost) == (Decimal("20.0"), Decimal("40.0"))

    async def test_error_uses_constants(self, broken_source):
        assert await ReferenceDataService(broken_source).condition_costs("Medium") == DEFAULT_CONDITION_COSTS


class TestRehabRange:
    async def test_scaled(self, service):
        rehab = await service.rehab_range("Medium", 1500)
        assert rehab.low_rehab == Decimal("37500")
        assert rehab.high_rehab == Decimal("52500")

    async def test_standard_unscaled(self, service):
        rehab = await service.rehab_range("Standard", 1500)
        assert (rehab.low_rehab, rehab.high_rehab) == (Decimal("15"), Decimal("25"))

    @pytest.mark.parametrize("condition,sqft", [(None, 1500), ("", 1500), ("Medium", 0), ("Medium", None)])
    async def test_missing_inputs_default(self, service, condition, sqft):
        rehab = await service.rehab_range(condition, sqft)
        assert rehab == DEFAULT_REHAB_RANGE


class TestWithoutDatabase:
    async def test_all_defaults(self):
        service = ReferenceDataService(None)
        assert await service.market_inputs("OH", "Franklin") == DEFAULT_MARKET_INPUTS
        assert await service.calculation_reference() == DEFAULT_CALCULATION_REFERENCE
        assert await service.condition_costs("Medium") == DEFAULT_CONDITION_COSTS
        rehab = await service.rehab_range("Medium", 1000)
        assert (rehab.low_rehab, rehab.high_rehab) == (Decimal("20000"), Decimal("40000"))
