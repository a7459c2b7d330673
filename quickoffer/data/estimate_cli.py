"""CLI for running a quick offer estimate against live data.

Usage:
    python -m quickoffer.data.estimate_cli "123 Main St, Columbus, OH 43215"
    python -m quickoffer.data.estimate_cli "..." --condition Heavy --no-db
    python -m quickoffer.data.estimate_cli "..." --json
"""

import argparse
import asyncio
import logging
import sys

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from quickoffer.config import settings
from quickoffer.data.cache import close_redis
from quickoffer.data.reference import ReferenceDataService
from quickoffer.data.repository import ReferenceRepository
from quickoffer.data.resolver import (
    AddressFormatError,
    EstimateResolver,
    PropertyAnalysis,
    PropertyNotFoundError,
)
from quickoffer.models.underwrite import UnderwriteValues


def print_analysis(analysis: PropertyAnalysis) -> None:
    target = analysis.target
    result = analysis.comparables
    print(f"\n{'=' * 60}")
    print(f"  Target: {target.address}, {target.city}, {target.state} {target.zip_code}")
    print(f"{'=' * 60}")
    print(f"  {target.bedrooms} bd / {target.bathrooms} ba, {target.square_footage:,} sqft, built {target.year_built}")
    print(f"  Type: {target.property_type or 'unknown'}   County: {target.county or 'unknown'}")
    print(f"  Comparables: {len(result.properties)} within {result.radius_used} mi / {result.months_used} mo")
    if analysis.stats.sample_size:
        print(f"  $/sqft: median ${analysis.stats.median:,.2f}, mean ${analysis.stats.average:,.2f}")
    print()

    for comp in result.properties:
        price = f"${comp.price:,.0f}" if comp.price else "N/A"
        print(f"  {comp.distance_miles:5.2f} mi  {comp.event.event_name:<12} {comp.event.event_date}  {price:>10}  {comp.property.address}")
    print()


def print_underwrite(values: UnderwriteValues) -> None:
    rent, flip = values.rent, values.flip
    print(f"  Rent:  ${rent.rent:,.0f}/mo   cap {rent.cap_rate}%   expense {rent.expense}%")
    print(f"         rehab ${rent.low_rehab:,.0f} – ${rent.high_rehab:,.0f}")
    print(f"  Flip:  ARV ${flip.after_repair_value:,.0f}   selling {flip.selling_costs}%   "
          f"holding {flip.holding_costs}%   margin {flip.margin}%")
    print(f"         rehab ${flip.low_rehab:,.0f} – ${flip.high_rehab:,.0f}")
    print()


async def main() -> None:
    parser = argparse.ArgumentParser(description="Quick offer estimate CLI")
    parser.add_argument("address", help='Formatted address, e.g. "123 Main St, Columbus, OH 43215"')
    parser.add_argument("--condition", default=None, help="Property condition for the rehab range")
    parser.add_argument("--no-db", action="store_true", help="Skip reference tables and use built-in defaults")
    parser.add_argument("--json", action="store_true", help="Print the estimate as JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else settings.log_level)

    engine = None
    reference = ReferenceDataService(None)
    if not args.no_db:
        engine = create_async_engine(settings.database_url, echo=settings.debug)
        reference = ReferenceDataService(ReferenceRepository(async_sessionmaker(engine, expire_on_commit=False)))

    resolver = EstimateResolver(reference=reference)
    try:
        analysis, values = await resolver.estimate(args.address, condition=args.condition)
    except (AddressFormatError, PropertyNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        await close_redis()
        if engine is not None:
            await engine.dispose()

    if args.json:
        # Imported here so the plain-text path does not load FastAPI
        from quickoffer.api.routes.properties import analysis_to_response
        from quickoffer.api.routes.underwrite import underwrite_to_response
        from quickoffer.api.schemas import EstimateResponse

        response = EstimateResponse(
            analysis=analysis_to_response(analysis),
            underwrite=underwrite_to_response(values),
        )
        print(response.model_dump_json(indent=2))
        return

    print_analysis(analysis)
    print_underwrite(values)


if __name__ == "__main__":
    asyncio.run(main())
