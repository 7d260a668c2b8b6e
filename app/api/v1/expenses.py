"""Expense endpoints"""
import hashlib
import json
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.database import get_db
from app.schemas.balance import SpendingSummary
from app.schemas.expense import (ExpenseCreate, ExpenseListResponse,
                                 ExpenseResponse, ExpenseUpdate)
from app.services.balance_service import BalanceService
from app.services.cache_service import CacheService
from app.services.ledger_service import LedgerService

router = APIRouter(prefix="/trips/{trip_id}/expenses", tags=["Expenses"])


def idempotency_cache_key(
    trip_id: UUID, idempotency_key: str, expense_data: ExpenseCreate
) -> str:
    """Cache key of a replayable expense creation, bound to the request body"""
    body_digest = hashlib.sha256(expense_data.model_dump_json().encode()).hexdigest()
    return f"idempotency:expense:{trip_id}:{idempotency_key}:{body_digest}"


@router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    trip_id: UUID,
    expense_data: ExpenseCreate,
    db: AsyncSession = Depends(get_db),
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key")
):
    """
    Create a new expense and materialize its shares.

    Supports idempotency via the `Idempotency-Key` header to prevent duplicate
    expense creation. If the same key is sent with the same body within the
    idempotency TTL, the original response is returned; a different body
    creates a new expense.

    Args:
        trip_id: Trip UUID
        expense_data: Expense creation data
        db: Database session
        idempotency_key: Optional idempotency key for preventing duplicates

    Returns:
        Created expense with its shares

    Raises:
        400: If amount or split set is invalid
        422: If payer or a sharer is not a participant of the trip
    """
    cache_key = None
    if idempotency_key:
        cache_key = idempotency_cache_key(trip_id, idempotency_key, expense_data)
        cached_response = await CacheService.get(cache_key)
        if cached_response:
            return ExpenseResponse(**json.loads(cached_response))

    expense = await LedgerService.add_expense(db, trip_id, expense_data)
    response = ExpenseResponse.from_expense(expense)

    if cache_key:
        await CacheService.set(
            cache_key,
            json.dumps(response.model_dump(mode="json")),
            ttl=get_settings().idempotency_ttl,
        )

    return response


@router.get("", response_model=ExpenseListResponse)
async def list_expenses(
    trip_id: UUID,
    currency: Optional[str] = Query(
        None, pattern="^[A-Za-z]{3}$", description="Filter by currency code"
    ),
    db: AsyncSession = Depends(get_db)
):
    """
    List the expenses of a trip, most recent first.

    Args:
        trip_id: Trip UUID
        currency: Optional currency filter
        db: Database session

    Returns:
        Expenses with their shares
    """
    if currency:
        currency = currency.upper()

    expenses = await LedgerService.list_expenses(db, trip_id, currency=currency)

    return ExpenseListResponse(
        items=[ExpenseResponse.from_expense(expense) for expense in expenses],
        total_items=len(expenses),
    )


@router.get("/summary", response_model=SpendingSummary)
async def get_spending_summary(
    trip_id: UUID,
    db: AsyncSession = Depends(get_db)
):
    """
    Get spending totals of a trip per currency and category.

    Args:
        trip_id: Trip UUID
        db: Database session

    Returns:
        Spending summary
    """
    return await BalanceService.get_spending_summary(trip_id, db)


@router.get("/{expense_id}", response_model=ExpenseResponse)
async def get_expense(
    trip_id: UUID,
    expense_id: UUID,
    db: AsyncSession = Depends(get_db)
):
    """
    Get a single expense of a trip.

    Raises:
        404: If expense not found
    """
    expense = await LedgerService.get_expense(db, trip_id, expense_id)
    return ExpenseResponse.from_expense(expense)


@router.put("/{expense_id}", response_model=ExpenseResponse)
async def replace_expense(
    trip_id: UUID,
    expense_id: UUID,
    expense_data: ExpenseUpdate,
    db: AsyncSession = Depends(get_db)
):
    """
    Replace an expense. Shares are recomputed from scratch.

    Args:
        trip_id: Trip UUID
        expense_id: Expense UUID
        expense_data: Complete new expense data
        db: Database session

    Returns:
        Replaced expense with its shares

    Raises:
        400: If amount or split set is invalid
        404: If expense not found
        422: If payer or a sharer is not a participant of the trip
    """
    expense = await LedgerService.replace_expense(db, trip_id, expense_id, expense_data)
    return ExpenseResponse.from_expense(expense)


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_expense(
    trip_id: UUID,
    expense_id: UUID,
    db: AsyncSession = Depends(get_db)
):
    """
    Delete an expense together with its shares.

    Raises:
        404: If expense not found
    """
    await LedgerService.remove_expense(db, trip_id, expense_id)
    return None
