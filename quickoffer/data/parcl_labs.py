"""Parcl Labs API client for address lookup, markets, property search and event history.

A 404 from any endpoint means "nothing found" and is returned as an empty
result. Other HTTP or transport failures are logged and also degrade to an
empty result so the estimate can fall back to defaults.
"""

import logging
from datetime import date
from decimal import Decimal, InvalidOperation

import httpx

from quickoffer.config import settings
from quickoffer.data.cache import cached
from quickoffer.models.property import EventHistoryItem, GeoProperty, PropertyFilter

logger = logging.getLogger(__name__)

MAX_PAGES = 10


def _to_float(value) -> float | None:
    try:
        return float(value) if value is not None and value != "" else None
    except (TypeError, ValueError):
        return None


def _to_int(value) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def _to_decimal(value) -> Decimal | None:
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


def _to_date(value) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def parse_property(item: dict) -> GeoProperty | None:
    property_id = item.get("parcl_property_id")
    if not property_id:
        return None

    return GeoProperty(
        property_id=str(property_id),
        latitude=_to_float(item.get("latitude")),
        longitude=_to_float(item.get("longitude")),
        address=item.get("address") or "",
        city=item.get("city") or "",
        state=item.get("state_abbreviation") or "",
        zip_code=str(item.get("zip_code") or ""),
        county=item.get("county") or "",
        bedrooms=_to_int(item.get("bedrooms")),
        bathrooms=_to_decimal(item.get("bathrooms")) or Decimal("0"),
        square_footage=_to_int(item.get("square_footage")),
        year_built=_to_int(item.get("year_built")),
        property_type=item.get("property_type") or "",
        owner_name=item.get("current_entity_owner_name") or "",
    )


def parse_event(item: dict) -> EventHistoryItem | None:
    property_id = item.get("parcl_property_id")
    event_date = _to_date(item.get("event_date"))
    if not property_id or event_date is None:
        return None

    return EventHistoryItem(
        property_id=str(property_id),
        event_type=item.get("event_type") or "",
        event_name=item.get("event_name") or "",
        event_date=event_date,
        price=_to_decimal(item.get("price")),
    )


class ParclLabsClient:
    def __init__(self, api_key: str | None = None, base_url: str | None = None):
        self.api_key = api_key or settings.parcl_labs_api_key
        self.base_url = (base_url or settings.parcl_labs_base_url).rstrip("/")
        self.headers = {"Authorization": self.api_key, "Content-Type": "application/json"}
        if not self.api_key:
            logger.warning("Parcl Labs API key is not set")

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: dict | None = None,
        json: dict | list | None = None,
    ) -> dict:
        url = endpoint if endpoint.startswith("http") else f"{self.base_url}{endpoint}"
        async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
            resp = await client.request(method, url, headers=self.headers, params=params, json=json)
            if resp.status_code == 404:
                logger.warning("Parcl Labs %s %s returned 404, treating as empty", method, endpoint)
                return {"items": []}
            resp.raise_for_status()
            logger.debug("Parcl Labs %s %s -> %s", method, endpoint, resp.status_code)
            try:
                return resp.json()
            except ValueError as e:
                logger.warning("Parcl Labs %s %s returned a non-JSON body, treating as empty: %s", method, endpoint, e)
                return {"items": []}

    async def _collect_items(self, first_page: dict) -> list[dict]:
        """Follow `links.next` until exhausted or MAX_PAGES is reached."""
        items = list(first_page.get("items") or [])
        next_url = (first_page.get("links") or {}).get("next")
        pages = 1
        while next_url and pages < MAX_PAGES:
            page = await self._request("GET", next_url)
            items.extend(page.get("items") or [])
            next_url = (page.get("links") or {}).get("next")
            pages += 1
        if next_url:
            logger.warning("Stopped paging after %d pages", pages)
        return items

    async def search_address(
        self, address: str, city: str, state: str, zip_code: str
    ) -> GeoProperty | None:
        payload = [{"address": address, "city": city, "state_abbreviation": state, "zip_code": zip_code}]
        try:
            data = await self._request("POST", "/v1/property/search_address", json=payload)
        except httpx.HTTPError as e:
            logger.warning("Address search failed for %s, %s: %s", address, city, e)
            return None

        for item in data.get("items") or []:
            prop = parse_property(item)
            if prop is not None:
                return prop
        return None

    @cached("parcl:markets", ttl_seconds=settings.market_cache_ttl_seconds)
    async def search_markets(self, zip_code: str, state: str) -> str | None:
        params = {"query": zip_code, "state_abbreviation": state, "location_type": "ZIP5"}
        try:
            data = await self._request("GET", "/v1/search/markets", params=params)
        except httpx.HTTPError as e:
            logger.warning("Market search failed for %s %s: %s", zip_code, state, e)
            return None

        items = data.get("items") or []
        parcl_id = items[0].get("parcl_id") if items else None
        return str(parcl_id) if parcl_id else None

    async def search_properties(self, market_id: str, filters: PropertyFilter) -> list[GeoProperty]:
        params = {
            "parcl_id": market_id,
            "property_type": filters.property_type,
            "square_footage_min": filters.min_sqft,
            "square_footage_max": filters.max_sqft,
            "bedrooms_min": filters.min_beds,
            "bedrooms_max": filters.max_beds,
            "bathrooms_min": filters.min_baths,
            "bathrooms_max": filters.max_baths,
            "year_built_min": filters.min_year_built,
            "year_built_max": filters.max_year_built,
            "event_history_sale_flag": str(filters.event_history_sale_flag).lower(),
        }
        try:
            first_page = await self._request("GET", "/v1/property/search", params=params)
            items = await self._collect_items(first_page)
        except httpx.HTTPError as e:
            logger.warning("Property search failed for market %s: %s", market_id, e)
            return []

        properties = [p for p in (parse_property(item) for item in items) if p is not None]
        logger.info("Property search for market %s returned %d properties", market_id, len(properties))
        return properties

    async def get_event_history(
        self,
        property_ids: list[str],
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[EventHistoryItem]:
        if not property_ids:
            return []

        payload: dict = {"parcl_property_id": list(property_ids)}
        if start_date:
            payload["start_date"] = start_date.isoformat()
        if end_date:
            payload["end_date"] = end_date.isoformat()

        try:
            data = await self._request("POST", "/v1/property/event_history", json=payload)
        except httpx.HTTPError as e:
            logger.warning("Event history failed for %d properties: %s", len(property_ids), e)
            return []

        raw_items = data.get("items") or []
        events = [e for e in (parse_event(item) for item in raw_items) if e is not None]
        if len(events) < len(raw_items):
            logger.debug("Dropped %d malformed events", len(raw_items) - len(events))
        return events
