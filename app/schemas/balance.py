"""Balance schemas"""
from decimal import Decimal
from typing import Dict, List
from uuid import UUID

from pydantic import BaseModel


class SuggestedPayment(BaseModel):
    """Payment that, with the rest of the plan, settles a currency ledger"""
    from_participant_id: UUID
    from_name: str
    to_participant_id: UUID
    to_name: str
    amount: Decimal
    amount_minor: int
    currency: str


class BalanceReport(BaseModel):
    """Net balances and settlement plan of a trip, one ledger per currency"""
    trip_id: UUID
    # currency -> participant ID -> signed balance (positive = is owed)
    balances: Dict[str, Dict[UUID, Decimal]]
    suggested_payments: List[SuggestedPayment]


class CurrencySpending(BaseModel):
    """Spending totals of one currency"""
    currency: str
    total: Decimal
    expense_count: int
    by_category: Dict[str, Decimal]


class SpendingSummary(BaseModel):
    """Spending totals of a trip"""
    trip_id: UUID
    currencies: List[CurrencySpending]
