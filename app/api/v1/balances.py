"""Balance endpoints"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.balance import BalanceReport
from app.services.balance_service import BalanceService

router = APIRouter(prefix="/trips/{trip_id}/balances", tags=["Balances"])


@router.get("", response_model=BalanceReport)
async def get_balances(trip_id: UUID, db: AsyncSession = Depends(get_db)):
    """
    Get net balances and suggested payments for a trip.

    Each currency is an independent ledger: balances are keyed by currency,
    then by participant (positive = the group owes the participant), and
    every suggested payment carries its currency.

    Args:
        trip_id: Trip UUID
        db: Database session

    Returns:
        Balances and settlement plan
    """
    return await BalanceService.get_balance_report(trip_id, db, use_cache=True)
