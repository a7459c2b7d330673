"""Shared test fixtures.

Geometry: the target sits at (0, 0) on the equator, where 0.01° of longitude
is about 0.69 miles, so candidate distances are easy to reason about.
Reference date: 2025-06-15. Database fixtures run against a throwaway SQLite file.
"""

from datetime import date, datetime
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from quickoffer.config import settings
from quickoffer.models.db import (
    Base,
    InvestorRecord,
    MarketCalculationReference,
    MarketReference,
    MarketReferenceCounty,
    MarketUnderwriteInput,
    PropertyConditionCost,
)
from quickoffer.models.property import EventHistoryItem, EventType, GeoProperty, LISTED_RENT, SOLD

TODAY = date(2025, 6, 15)


@pytest.fixture(autouse=True)
def no_redis_cache(monkeypatch):
    """Tests never talk to Redis."""
    monkeypatch.setattr(settings, "cache_enabled", False)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def make_property():
    def _make(property_id: str, lat: float | None = 0.0, lon: float | None = 0.0, **kwargs) -> GeoProperty:
        fields = {
            "address": f"{property_id.upper()} MAIN ST",
            "city": "Columbus",
            "state": "OH",
            "zip_code": "43215",
            "county": "Franklin",
            "bedrooms": 3,
            "bathrooms": Decimal("2"),
            "square_footage": 1500,
            "year_built": 1985,
            "property_type": "SINGLE_FAMILY",
        }
        fields.update(kwargs)
        return GeoProperty(property_id=property_id, latitude=lat, longitude=lon, **fields)
    return _make


@pytest.fixture
def make_sale():
    def _make(property_id: str, price: int | None, event_date: date = date(2025, 5, 1)) -> EventHistoryItem:
        return EventHistoryItem(
            property_id=property_id,
            event_type=EventType.SALE,
            event_name=SOLD,
            event_date=event_date,
            price=Decimal(price) if price is not None else None,
        )
    return _make


@pytest.fixture
def make_rental():
    def _make(property_id: str, price: int | None, event_date: date = date(2025, 5, 1)) -> EventHistoryItem:
        return EventHistoryItem(
            property_id=property_id,
            event_type=EventType.RENTAL,
            event_name=LISTED_RENT,
            event_date=event_date,
            price=Decimal(price) if price is not None else None,
        )
    return _make


@pytest.fixture
def target(make_property) -> GeoProperty:
    """3 bed / 2 bath, 1,500 sqft single-family home built in 1985."""
    return make_property("target", 0.0, 0.0)


@pytest.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'quickoffer.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def seeded(session_factory):
    """National default market, Columbus (Franklin County, OH), three calculation
    references, condition costs and a handful of investors."""
    async with session_factory() as session:
        national = MarketReference(name="National")
        columbus = MarketReference(name="Columbus")
        session.add_all([national, columbus])
        await session.flush()

        session.add_all([
            MarketUnderwriteInput(market_reference_id=national.id, cap_rate=Decimal("8.5"),
                                  operating_expense=Decimal("42")),
            MarketUnderwriteInput(market_reference_id=columbus.id, cap_rate=Decimal("7.5"),
                                  operating_expense=Decimal("35")),
            MarketReferenceCounty(market_reference_id=columbus.id, state="OH", county="Franklin"),
            MarketCalculationReference(
                created_at=datetime(2024, 1, 1), interest_rate=Decimal("6.5"),
                total_closing_holding_costs=Decimal("3"), margin_percentage=Decimal("15"),
                commission_rate=Decimal("5"), is_active=True,
            ),
            MarketCalculationReference(
                created_at=datetime(2025, 1, 1), interest_rate=Decimal("7.25"),
                total_closing_holding_costs=Decimal("4.5"), margin_percentage=Decimal("18"),
                commission_rate=Decimal("5.5"), is_active=True,
            ),
            MarketCalculationReference(
                created_at=datetime(2025, 6, 1), interest_rate=Decimal("9"),
                total_closing_holding_costs=Decimal("9"), margin_percentage=Decimal("9"),
                commission_rate=Decimal("9"), is_active=False,
            ),
            PropertyConditionCost(property_condition="Standard", low_cost=Decimal("15"),
                                  high_cost=Decimal("25"), is_active=True),
            PropertyConditionCost(property_condition="Medium", low_cost=Decimal("25"),
                                  high_cost=Decimal("35"), is_active=True),
            PropertyConditionCost(property_condition="Heavy", low_cost=Decimal("40"),
                                  high_cost=Decimal("60"), is_active=False),
            InvestorRecord(company_name="Acme Homes", purchases_last_12_months=5, active=True,
                           investor_profile={"markets": ["Columbus"]}),
            InvestorRecord(company_name="Acme Homes", purchases_last_12_months=12, active=True,
                           investor_profile={"markets": ["Columbus", "Dayton"]}),
            InvestorRecord(company_name="Beta Capital", purchases_last_12_months=3, active=True),
            InvestorRecord(company_name="Gamma Partners", purchases_last_12_months=20, active=False),
        ])
        await session.commit()
    return session_factory
