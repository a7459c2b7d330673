"""Pydantic schemas for API request/response models."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from quickoffer.models.property import ComparableProperty, EventHistoryItem, GeoProperty


# ---- Request schemas ----

class AnalyzeRequest(BaseModel):
    address: str = Field(..., description='Formatted address, e.g. "123 Main St, Columbus, OH 43215"')


class EstimateRequest(AnalyzeRequest):
    condition: str | None = Field(None, description="Property condition used for the rehab range")


# ---- Shared schemas ----

class PropertyResponse(BaseModel):
    property_id: str
    address: str
    city: str
    state: str
    zip_code: str
    county: str = ""
    latitude: float | None = None
    longitude: float | None = None
    bedrooms: int = 0
    bathrooms: Decimal = Decimal("0")
    square_footage: int = 0
    year_built: int = 0
    property_type: str = ""
    owner_name: str = ""

    @classmethod
    def from_domain(cls, prop: GeoProperty) -> "PropertyResponse":
        return cls(
            property_id=prop.property_id,
            address=prop.address,
            city=prop.city,
            state=prop.state,
            zip_code=prop.zip_code,
            county=prop.county,
            latitude=prop.latitude,
            longitude=prop.longitude,
            bedrooms=prop.bedrooms,
            bathrooms=prop.bathrooms,
            square_footage=prop.square_footage,
            year_built=prop.year_built,
            property_type=prop.property_type,
            owner_name=prop.owner_name,
        )


class EventDetails(BaseModel):
    event_type: str
    event_name: str
    event_date: date
    price: Decimal | None = None


class ComparableSchema(PropertyResponse):
    """A comparable as returned by the analysis and accepted by the calculator."""
    event: EventDetails
    distance_miles: float = 0.0

    @classmethod
    def from_comparable(cls, comp: ComparableProperty) -> "ComparableSchema":
        base = PropertyResponse.from_domain(comp.property).model_dump()
        return cls(
            **base,
            event=EventDetails(
                event_type=getattr(comp.event.event_type, "value", comp.event.event_type),
                event_name=comp.event.event_name,
                event_date=comp.event.event_date,
                price=comp.event.price,
            ),
            distance_miles=comp.distance_miles,
        )

    def to_domain(self) -> ComparableProperty:
        prop = GeoProperty(
            property_id=self.property_id,
            latitude=self.latitude,
            longitude=self.longitude,
            address=self.address,
            city=self.city,
            state=self.state,
            zip_code=self.zip_code,
            county=self.county,
            bedrooms=self.bedrooms,
            bathrooms=self.bathrooms,
            square_footage=self.square_footage,
            year_built=self.year_built,
            property_type=self.property_type,
            owner_name=self.owner_name,
        )
        event = EventHistoryItem(
            property_id=self.property_id,
            event_type=self.event.event_type,
            event_name=self.event.event_name,
            event_date=self.event.event_date,
            price=self.event.price,
        )
        return ComparableProperty(property=prop, event=event, distance_miles=self.distance_miles)


class UnderwriteCalculateRequest(BaseModel):
    comparables: list[ComparableSchema] = Field(default_factory=list)
    condition: str | None = None
    square_footage: int | None = None
    state: str | None = None
    county: str | None = None


# ---- Response schemas ----

class PricePerSqftResponse(BaseModel):
    median: Decimal
    average: Decimal
    sample_size: int


class AnalysisResponse(BaseModel):
    target_property: PropertyResponse
    comparable_properties: list[ComparableSchema]
    radius_used: float
    months_used: int
    price_per_sqft: PricePerSqftResponse


class RentUnderwriteResponse(BaseModel):
    rent: Decimal
    expense: Decimal
    cap_rate: Decimal
    low_rehab: Decimal
    high_rehab: Decimal


class FlipUnderwriteResponse(BaseModel):
    selling_costs: Decimal
    holding_costs: Decimal
    margin: Decimal
    low_rehab: Decimal
    high_rehab: Decimal
    after_repair_value: Decimal


class UnderwriteResponse(BaseModel):
    rent: RentUnderwriteResponse
    flip: FlipUnderwriteResponse


class EstimateResponse(BaseModel):
    analysis: AnalysisResponse
    underwrite: UnderwriteResponse


class BuyerResponse(BaseModel):
    id: int
    company_name: str
    investor_profile: dict | None = None
    purchases_last_12_months: int = 0
    active: bool = True
