"""Async SQLAlchemy repositories for reference data, property snapshots and buyers.

Repositories return None on a miss and let database errors propagate; the
fail-open policy lives in ReferenceDataService.
"""

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from quickoffer.models.db import (
    InvestorRecord,
    MarketCalculationReference,
    MarketReference,
    MarketReferenceCounty,
    MarketUnderwriteInput,
    PropertyConditionCost,
    PropertyRecord,
)
from quickoffer.models.property import GeoProperty
from quickoffer.models.underwrite import CalculationReference, ConditionCosts, MarketUnderwriteInputs

logger = logging.getLogger(__name__)

STANDARD_CONDITION = "Standard"


def _dec(value, default: str = "0") -> Decimal:
    """NULL and zero columns fall back to the default."""
    return Decimal(str(value)) if value else Decimal(default)


class ReferenceRepository:
    """Reference table lookups, one short-lived session per query.

    Lookups for the rent and flip scenarios run concurrently, so they never
    share a session.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def _first(self, stmt):
        async with self.session_factory() as session:
            return (await session.execute(stmt)).first()

    async def _scalar(self, stmt):
        async with self.session_factory() as session:
            return (await session.execute(stmt)).scalar_one_or_none()

    async def get_market_underwrite_inputs(
        self, state: str, county: str
    ) -> MarketUnderwriteInputs | None:
        stmt = (
            select(MarketReference.name, MarketUnderwriteInput.cap_rate, MarketUnderwriteInput.operating_expense)
            .select_from(MarketReferenceCounty)
            .join(MarketReference, MarketReferenceCounty.market_reference_id == MarketReference.id)
            .join(MarketUnderwriteInput, MarketUnderwriteInput.market_reference_id == MarketReference.id)
            .where(MarketReferenceCounty.state == state, MarketReferenceCounty.county == county)
            .order_by(MarketUnderwriteInput.id)
            .limit(1)
        )
        row = await self._first(stmt)
        if row is None:
            logger.warning("No market data found for %s, %s", county, state)
            return None

        logger.info("Found market %s for %s, %s", row.name, county, state)
        return MarketUnderwriteInputs(
            cap_rate=_dec(row.cap_rate),
            operating_expense=_dec(row.operating_expense),
            reference_market=row.name,
        )

    async def get_default_market_underwrite_inputs(self) -> MarketUnderwriteInputs | None:
        stmt = (
            select(MarketReference.name, MarketUnderwriteInput.cap_rate, MarketUnderwriteInput.operating_expense)
            .select_from(MarketUnderwriteInput)
            .join(MarketReference, MarketUnderwriteInput.market_reference_id == MarketReference.id)
            .order_by(MarketUnderwriteInput.id)
            .limit(1)
        )
        row = await self._first(stmt)
        if row is None:
            return None
        return MarketUnderwriteInputs(
            cap_rate=_dec(row.cap_rate, "8.0"),
            operating_expense=_dec(row.operating_expense, "40.0"),
            reference_market=row.name or "Default",
        )

    async def get_calculation_reference(self) -> CalculationReference | None:
        stmt = (
            select(MarketCalculationReference)
            .where(MarketCalculationReference.is_active.is_(True))
            .order_by(MarketCalculationReference.created_at.desc(), MarketCalculationReference.id.desc())
            .limit(1)
        )
        record = await self._scalar(stmt)
        if record is None:
            logger.warning("No active calculation reference found")
            return None
        return CalculationReference(
            interest_rate=_dec(record.interest_rate, "7.0"),
            total_closing_holding_costs=_dec(record.total_closing_holding_costs, "4.0"),
            margin_percentage=_dec(record.margin_percentage, "20.0"),
            commission_rate=_dec(record.commission_rate, "6.0"),
        )

    async def _active_condition(self, condition: str | None) -> PropertyConditionCost | None:
        stmt = select(PropertyConditionCost).where(PropertyConditionCost.is_active.is_(True))
        if condition is not None:
            stmt = stmt.where(PropertyConditionCost.property_condition == condition)
        stmt = stmt.order_by(PropertyConditionCost.id).limit(1)
        return await self._scalar(stmt)

    async def get_condition_costs(self, condition: str) -> ConditionCosts | None:
        record = await self._active_condition(condition)
        if record is None:
            logger.warning("No condition cost data for %r", condition)
            return None
        return ConditionCosts(
            condition=record.property_condition,
            low_cost=_dec(record.low_cost),
            high_cost=_dec(record.high_cost),
        )

    async def get_default_condition_costs(self) -> ConditionCosts | None:
        """Standard condition costs, else any active row."""
        record = await self._active_condition(STANDARD_CONDITION)
        if record is None:
            record = await self._active_condition(None)
        if record is None:
            return None
        return ConditionCosts(
            condition=record.property_condition,
            low_cost=_dec(record.low_cost, "20.0"),
            high_cost=_dec(record.high_cost, "40.0"),
        )


class PropertyRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def save(self, prop: GeoProperty) -> PropertyRecord:
        record = PropertyRecord(
            parcl_property_id=prop.property_id,
            address=prop.address,
            city=prop.city,
            state=prop.state,
            county=prop.county,
            zip_code=prop.zip_code,
            bathrooms=prop.bathrooms,
            bedrooms=prop.bedrooms,
            square_footage=prop.square_footage,
            year_built=prop.year_built,
            latitude=Decimal(str(prop.latitude)) if prop.latitude is not None else None,
            longitude=Decimal(str(prop.longitude)) if prop.longitude is not None else None,
            owner_name=prop.owner_name,
        )
        self.session.add(record)
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return record


class BuyerRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_active_buyers(self) -> list[InvestorRecord]:
        """Active buyers, one per company: the row with the most recent purchases."""
        stmt = (
            select(InvestorRecord)
            .where(InvestorRecord.active.is_(True))
            .order_by(
                InvestorRecord.company_name,
                InvestorRecord.purchases_last_12_months.desc(),
                InvestorRecord.id,
            )
        )
        records = (await self.session.execute(stmt)).scalars().all()

        buyers: list[InvestorRecord] = []
        seen: set[str] = set()
        for record in records:
            if record.company_name in seen:
                continue
            seen.add(record.company_name)
            buyers.append(record)
        return buyers

    async def get_buyer(self, buyer_id: int) -> InvestorRecord | None:
        return await self.session.get(InvestorRecord, buyer_id)
