from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum


class EventType(str, Enum):
    SALE = "SALE"
    RENTAL = "RENTAL"


SOLD = "SOLD"
LISTED_RENT = "LISTED_RENT"
SINGLE_FAMILY = "SINGLE_FAMILY"


@dataclass(frozen=True)
class GeoProperty:
    property_id: str
    latitude: float | None
    longitude: float | None
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    county: str = ""
    bedrooms: int = 0
    bathrooms: Decimal = Decimal("0")
    square_footage: int = 0
    year_built: int = 0
    property_type: str = ""
    owner_name: str = ""

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass(frozen=True)
class EventHistoryItem:
    property_id: str
    event_type: str
    event_name: str
    event_date: date
    price: Decimal | None = None

    @property
    def is_sale(self) -> bool:
        return self.event_type == EventType.SALE and self.event_name == SOLD

    @property
    def is_rental_listing(self) -> bool:
        return self.event_type == EventType.RENTAL and self.event_name == LISTED_RENT


@dataclass(frozen=True)
class ComparableProperty:
    property: GeoProperty
    event: EventHistoryItem
    distance_miles: float

    @property
    def price(self) -> Decimal | None:
        return self.event.price


@dataclass(frozen=True)
class StrategyTier:
    radius_miles: float
    lookback_months: int


@dataclass(frozen=True)
class ComparablesResult:
    properties: tuple[ComparableProperty, ...]
    radius_used: float
    months_used: int


@dataclass(frozen=True)
class PropertyFilter:
    property_type: str
    min_beds: int
    max_beds: int
    min_baths: int
    max_baths: int
    min_sqft: int
    max_sqft: int
    min_year_built: int
    max_year_built: int
    event_history_sale_flag: bool = True
