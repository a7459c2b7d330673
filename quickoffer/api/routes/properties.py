"""Property analysis routes: address → target property and comparables."""

from fastapi import APIRouter, Depends, HTTPException

from quickoffer.api.deps import get_resolver
from quickoffer.api.schemas import (
    AnalysisResponse,
    AnalyzeRequest,
    ComparableSchema,
    PricePerSqftResponse,
    PropertyResponse,
)
from quickoffer.data.resolver import (
    AddressFormatError,
    EstimateResolver,
    PropertyAnalysis,
    PropertyNotFoundError,
)

router = APIRouter(prefix="/api/v1/property", tags=["property"])


def analysis_to_response(analysis: PropertyAnalysis) -> AnalysisResponse:
    result = analysis.comparables
    return AnalysisResponse(
        target_property=PropertyResponse.from_domain(analysis.target),
        comparable_properties=[ComparableSchema.from_comparable(c) for c in result.properties],
        radius_used=result.radius_used,
        months_used=result.months_used,
        price_per_sqft=PricePerSqftResponse(
            median=analysis.stats.median,
            average=analysis.stats.average,
            sample_size=analysis.stats.sample_size,
        ),
    )


@router.post("/analyze", response_model=AnalysisResponse)
async def analyze_property(
    req: AnalyzeRequest,
    resolver: EstimateResolver = Depends(get_resolver),
):
    """Look up a property and find comparable sales and rentals around it."""
    try:
        analysis = await resolver.resolve(req.address)
    except AddressFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PropertyNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return analysis_to_response(analysis)
