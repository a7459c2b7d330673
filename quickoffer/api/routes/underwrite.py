"""Underwrite slider routes."""

from fastapi import APIRouter, Depends

from quickoffer.api.deps import get_resolver
from quickoffer.api.schemas import (
    FlipUnderwriteResponse,
    RentUnderwriteResponse,
    UnderwriteCalculateRequest,
    UnderwriteResponse,
)
from quickoffer.data.resolver import EstimateResolver
from quickoffer.models.underwrite import DEFAULT_UNDERWRITE_VALUES, UnderwriteValues

router = APIRouter(prefix="/api/v1/underwrite", tags=["underwrite"])


def underwrite_to_response(values: UnderwriteValues) -> UnderwriteResponse:
    rent, flip = values.rent, values.flip
    return UnderwriteResponse(
        rent=RentUnderwriteResponse(
            rent=rent.rent,
            expense=rent.expense,
            cap_rate=rent.cap_rate,
            low_rehab=rent.low_rehab,
            high_rehab=rent.high_rehab,
        ),
        flip=FlipUnderwriteResponse(
            selling_costs=flip.selling_costs,
            holding_costs=flip.holding_costs,
            margin=flip.margin,
            low_rehab=flip.low_rehab,
            high_rehab=flip.high_rehab,
            after_repair_value=flip.after_repair_value,
        ),
    )


@router.get("/defaults", response_model=UnderwriteResponse)
async def get_default_values():
    """Default slider values used before any comparables are known."""
    return underwrite_to_response(DEFAULT_UNDERWRITE_VALUES)


@router.post("/calculate", response_model=UnderwriteResponse)
async def calculate_underwrite(
    req: UnderwriteCalculateRequest,
    resolver: EstimateResolver = Depends(get_resolver),
):
    """Rent and flip slider values from a comparable set and address data."""
    values = await resolver.underwrite(
        [c.to_domain() for c in req.comparables],
        condition=req.condition,
        square_footage=req.square_footage,
        state=req.state,
        county=req.county,
    )
    return underwrite_to_response(values)
