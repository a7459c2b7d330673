"""Reference data lookups with hard-coded fallbacks.

Each lookup degrades to a default instead of failing, whether the row is
missing or the database is unavailable.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from quickoffer.data.base import ReferenceDataSource
from quickoffer.engine.underwrite import calculate_rehab_range
from quickoffer.models.underwrite import (
    CalculationReference,
    ConditionCosts,
    DEFAULT_CALCULATION_REFERENCE,
    DEFAULT_CONDITION_COSTS,
    DEFAULT_MARKET_INPUTS,
    DEFAULT_REHAB_RANGE,
    MarketUnderwriteInputs,
    RehabRange,
)

logger = logging.getLogger(__name__)

# Connection failures surface as OSError from the driver, not wrapped by SQLAlchemy
DATABASE_ERRORS = (SQLAlchemyError, OSError)


class ReferenceDataService:
    def __init__(self, source: ReferenceDataSource | None):
        self.source = source

    async def _default_market_inputs(self) -> MarketUnderwriteInputs:
        if self.source is None:
            return DEFAULT_MARKET_INPUTS
        try:
            inputs = await self.source.get_default_market_underwrite_inputs()
        except DATABASE_ERRORS as e:
            logger.warning("Default market lookup failed, using hard-coded inputs: %s", e)
            return DEFAULT_MARKET_INPUTS
        return inputs or DEFAULT_MARKET_INPUTS

    async def market_inputs(self, state: str | None, county: str | None) -> MarketUnderwriteInputs:
        """Cap rate and operating expense for the reference market covering a county."""
        state = (state or "").strip().upper()
        county = (county or "").strip()
        if not state or not county:
            logger.warning("Missing state or county (%r, %r), using default market", state, county)
            return await self._default_market_inputs()

        if self.source is None:
            return DEFAULT_MARKET_INPUTS
        try:
            inputs = await self.source.get_market_underwrite_inputs(state, county)
        except DATABASE_ERRORS as e:
            logger.warning("Market lookup failed for %s, %s: %s", county, state, e)
            return DEFAULT_MARKET_INPUTS

        if inputs is None:
            return await self._default_market_inputs()
        return inputs

    async def calculation_reference(self) -> CalculationReference:
        if self.source is None:
            return DEFAULT_CALCULATION_REFERENCE
        try:
            reference = await self.source.get_calculation_reference()
        except DATABASE_ERRORS as e:
            logger.warning("Calculation reference lookup failed: %s", e)
            return DEFAULT_CALCULATION_REFERENCE
        return reference or DEFAULT_CALCULATION_REFERENCE

    async def condition_costs(self, condition: str | None) -> ConditionCosts:
        """Per-sqft costs: exact condition, then Standard, then any active row, then 20/40."""
        if self.source is None:
            return DEFAULT_CONDITION_COSTS
        try:
            costs = None
            if condition:
                costs = await self.source.get_condition_costs(condition)
            if costs is None:
                costs = await self.source.get_default_condition_costs()
        except DATABASE_ERRORS as e:
            logger.warning("Condition cost lookup failed for %r: %s", condition, e)
            return DEFAULT_CONDITION_COSTS
        return costs or DEFAULT_CONDITION_COSTS

    async def rehab_range(self, condition: str | None, square_footage: int | None) -> RehabRange:
        if not condition or not square_footage or square_footage <= 0:
            logger.info("Condition or square footage missing, using default rehab range")
            return DEFAULT_REHAB_RANGE

        costs = await self.condition_costs(condition)
        rehab = calculate_rehab_range(costs, condition, square_footage)
        logger.debug(
            "Rehab range for %s at %d sqft: %s-%s",
            condition, square_footage, rehab.low_rehab, rehab.high_rehab,
        )
        return rehab
