"""SQLAlchemy ORM models for PostgreSQL persistence."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String,
    Integer,
    Numeric,
    DateTime,
    Boolean,
    ForeignKey,
    JSON,
    func,
)
from sqlalchemy.orm import DeclarativeBase, relationship, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class PropertyRecord(Base):
    __tablename__ = "properties"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    parcl_property_id: Mapped[str] = mapped_column(String(50), index=True)
    address: Mapped[str] = mapped_column(String(255))
    city: Mapped[str] = mapped_column(String(100))
    state: Mapped[str] = mapped_column(String(2))
    county: Mapped[str] = mapped_column(String(100), default="")
    zip_code: Mapped[str] = mapped_column(String(10))

    bathrooms: Mapped[Decimal] = mapped_column(Numeric(3, 1), default=0)
    bedrooms: Mapped[int] = mapped_column(Integer, default=0)
    square_footage: Mapped[int] = mapped_column(Integer, default=0)
    year_built: Mapped[int] = mapped_column(Integer, default=0)
    latitude: Mapped[Decimal | None] = mapped_column(Numeric(10, 7), nullable=True)
    longitude: Mapped[Decimal | None] = mapped_column(Numeric(10, 7), nullable=True)
    owner_name: Mapped[str] = mapped_column(String(255), default="")


class MarketReference(Base):
    __tablename__ = "market_reference"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100))

    counties: Mapped[list["MarketReferenceCounty"]] = relationship(back_populates="market_reference")
    underwrite_inputs: Mapped[list["MarketUnderwriteInput"]] = relationship(back_populates="market_reference")


class MarketReferenceCounty(Base):
    __tablename__ = "market_reference_counties"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    market_reference_id: Mapped[int] = mapped_column(ForeignKey("market_reference.id"))
    state: Mapped[str] = mapped_column(String(2), index=True)
    county: Mapped[str] = mapped_column(String(100), index=True)

    market_reference: Mapped["MarketReference"] = relationship(back_populates="counties")


class MarketUnderwriteInput(Base):
    __tablename__ = "market_underwrite_inputs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    market_reference_id: Mapped[int] = mapped_column(ForeignKey("market_reference.id"))
    cap_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2))
    operating_expense: Mapped[Decimal] = mapped_column(Numeric(5, 2))

    market_reference: Mapped["MarketReference"] = relationship(back_populates="underwrite_inputs")


class MarketCalculationReference(Base):
    __tablename__ = "market_calculation_reference"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    interest_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2))
    total_closing_holding_costs: Mapped[Decimal] = mapped_column(Numeric(5, 2))
    margin_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2))
    commission_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)


class PropertyConditionCost(Base):
    __tablename__ = "property_condition_cost"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    property_condition: Mapped[str] = mapped_column(String(50), index=True)
    low_cost: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    high_cost: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)


class InvestorRecord(Base):
    __tablename__ = "investors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    company_name: Mapped[str] = mapped_column(String(255), index=True)
    # Free-form buy box: markets, property types, price range, purchase history
    investor_profile: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    purchases_last_12_months: Mapped[int] = mapped_column(Integer, default=0)
    active: Mapped[bool] = mapped_column(Boolean, default=True)
