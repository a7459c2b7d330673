"""One-shot estimate: analysis plus underwrite for an address."""

from fastapi import APIRouter, Depends, HTTPException

from quickoffer.api.deps import get_resolver
from quickoffer.api.routes.properties import analysis_to_response
from quickoffer.api.routes.underwrite import underwrite_to_response
from quickoffer.api.schemas import EstimateRequest, EstimateResponse
from quickoffer.data.resolver import AddressFormatError, EstimateResolver, PropertyNotFoundError

router = APIRouter(prefix="/api/v1", tags=["estimate"])


@router.post("/estimate", response_model=EstimateResponse)
async def estimate(
    req: EstimateRequest,
    resolver: EstimateResolver = Depends(get_resolver),
):
    try:
        analysis, values = await resolver.estimate(req.address, condition=req.condition)
    except AddressFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PropertyNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return EstimateResponse(
        analysis=analysis_to_response(analysis),
        underwrite=underwrite_to_response(values),
    )
