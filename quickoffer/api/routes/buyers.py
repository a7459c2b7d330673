"""Buyer routes."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from quickoffer.api.deps import get_db
from quickoffer.api.schemas import BuyerResponse
from quickoffer.data.repository import BuyerRepository
from quickoffer.models.db import InvestorRecord

router = APIRouter(prefix="/api/v1/buyers", tags=["buyers"])


def _buyer_to_response(record: InvestorRecord) -> BuyerResponse:
    return BuyerResponse(
        id=record.id,
        company_name=record.company_name,
        investor_profile=record.investor_profile,
        purchases_last_12_months=record.purchases_last_12_months,
        active=record.active,
    )


@router.get("/active", response_model=list[BuyerResponse])
async def get_active_buyers(db: AsyncSession = Depends(get_db)):
    """Active buyers, one per company."""
    buyers = await BuyerRepository(db).get_active_buyers()
    return [_buyer_to_response(b) for b in buyers]


@router.get("/{buyer_id}", response_model=BuyerResponse)
async def get_buyer(buyer_id: int, db: AsyncSession = Depends(get_db)):
    buyer = await BuyerRepository(db).get_buyer(buyer_id)
    if buyer is None:
        raise HTTPException(status_code=404, detail=f"Buyer {buyer_id} not found")
    return _buyer_to_response(buyer)
