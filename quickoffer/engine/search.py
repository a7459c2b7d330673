"""Neighborhood search parameters derived from the subject property."""

import math
from datetime import date

from quickoffer.engine.comparables import months_before
from quickoffer.models.property import GeoProperty, PropertyFilter, SINGLE_FAMILY

SQFT_LOWER_FACTOR = 0.8
SQFT_UPPER_FACTOR = 1.05
YEAR_BUILT_WINDOW = 20


def property_filters(target: GeoProperty) -> PropertyFilter:
    """Attribute filters for properties similar to the target.

    Missing attributes fall back to a typical 3 bed / 1 bath starter home.
    """
    beds = target.bedrooms or 3
    baths = math.floor(target.bathrooms) or 1
    sqft = target.square_footage

    if target.year_built:
        min_year, max_year = target.year_built - YEAR_BUILT_WINDOW, target.year_built + YEAR_BUILT_WINDOW
    else:
        min_year, max_year = 1950, 1960

    return PropertyFilter(
        property_type=target.property_type or SINGLE_FAMILY,
        min_beds=beds,
        max_beds=beds,
        min_baths=baths,
        max_baths=baths,
        min_sqft=math.floor(sqft * SQFT_LOWER_FACTOR) if sqft else 800,
        max_sqft=math.ceil(sqft * SQFT_UPPER_FACTOR) if sqft else 1050,
        min_year_built=min_year,
        max_year_built=max_year,
        event_history_sale_flag=True,
    )


def event_date_range(months: int, today: date | None = None) -> tuple[date, date]:
    """(start, end) window covering the last `months` calendar months."""
    end = today or date.today()
    return months_before(end, months), end
