"""Protocol definitions for data sources.

Each protocol defines the interface that concrete data source implementations must satisfy.
"""

from datetime import date
from typing import Protocol, runtime_checkable

from quickoffer.models.property import EventHistoryItem, GeoProperty, PropertyFilter
from quickoffer.models.underwrite import CalculationReference, ConditionCosts, MarketUnderwriteInputs


@runtime_checkable
class PropertyDataSource(Protocol):
    async def search_address(
        self, address: str, city: str, state: str, zip_code: str
    ) -> GeoProperty | None:
        """Look up a single property by street address."""
        ...

    async def search_markets(self, zip_code: str, state: str) -> str | None:
        """Resolve the market id covering a ZIP code."""
        ...

    async def search_properties(
        self, market_id: str, filters: PropertyFilter
    ) -> list[GeoProperty]:
        """Find properties in a market matching attribute filters."""
        ...

    async def get_event_history(
        self, property_ids: list[str], start_date: date | None = None, end_date: date | None = None
    ) -> list[EventHistoryItem]:
        """Fetch sale and rental events for a set of properties."""
        ...


@runtime_checkable
class ReferenceDataSource(Protocol):
    async def get_market_underwrite_inputs(
        self, state: str, county: str
    ) -> MarketUnderwriteInputs | None:
        """Cap rate and operating expense for the market covering a county."""
        ...

    async def get_default_market_underwrite_inputs(self) -> MarketUnderwriteInputs | None:
        """Market inputs to use when the county has no reference market."""
        ...

    async def get_calculation_reference(self) -> CalculationReference | None:
        """Latest active flip calculation reference."""
        ...

    async def get_condition_costs(self, condition: str) -> ConditionCosts | None:
        """Per-sqft rehab costs for a property condition."""
        ...

    async def get_default_condition_costs(self) -> ConditionCosts | None:
        """Rehab costs to use when the condition is unknown."""
        ...
