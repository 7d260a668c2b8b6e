"""Expense schemas"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.models.expense import Expense, ExpenseCategory
from app.utils.money import from_minor_units, normalize_currency


class ExpenseBase(BaseModel):
    """Base expense schema"""

    title: str = Field(..., max_length=200, min_length=1)
    # Decimal string in major units, e.g. "12.50"
    amount: Optional[str] = None
    # Alternative to amount: integer count of minor units
    amount_minor: Optional[int] = None
    currency: Optional[str] = None
    payer_participant_id: UUID
    participant_ids_to_split: List[UUID]
    spent_at: Optional[datetime] = None
    category: Optional[ExpenseCategory] = None

    @field_validator("amount", mode="before")
    @classmethod
    def convert_amount(cls, v):
        """Keep amount as text so no precision is lost before conversion"""
        if v is None or isinstance(v, bool):
            return v
        if isinstance(v, (int, float, Decimal)):
            return str(v)
        return v

    @field_validator("amount_minor", mode="before")
    @classmethod
    def reject_bool_amount_minor(cls, v):
        """Reject booleans masquerading as integers"""
        if isinstance(v, bool):
            raise ValueError("amount_minor must be an integer")
        return v

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: Optional[str]) -> Optional[str]:
        """Validate and upper-case currency code"""
        if v is None:
            return v
        return normalize_currency(v)

    @model_validator(mode="after")
    def validate_single_amount(self):
        """Exactly one of amount / amount_minor must be given"""
        if (self.amount is None) == (self.amount_minor is None):
            raise ValueError("Provide exactly one of 'amount' or 'amount_minor'")
        return self


class ExpenseCreate(ExpenseBase):
    """Schema for creating an expense"""


class ExpenseUpdate(ExpenseBase):
    """Schema for replacing an expense (all fields, shares recomputed)"""


class ParticipantSummary(BaseModel):
    """Participant reference embedded in responses"""

    id: UUID
    name: str

    model_config = ConfigDict(from_attributes=True)


class ExpenseShareResponse(BaseModel):
    """Response schema for an expense share"""

    participant: ParticipantSummary
    amount: Decimal
    amount_minor: int
    is_settled_externally: bool


class ExpenseResponse(BaseModel):
    """Complete expense response schema"""

    id: UUID
    trip_id: UUID
    title: str
    amount: Decimal
    amount_minor: int
    currency: str
    payer: ParticipantSummary
    spent_at: datetime
    category: Optional[ExpenseCategory] = None
    shares: List[ExpenseShareResponse]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_expense(cls, expense: Expense) -> "ExpenseResponse":
        """
        Build a response from an expense with payer and shares loaded.

        Args:
            expense: Expense ORM object

        Returns:
            ExpenseResponse with display decimals
        """
        return cls(
            id=expense.id,
            trip_id=expense.trip_id,
            title=expense.title,
            amount=from_minor_units(expense.amount_minor, expense.currency),
            amount_minor=expense.amount_minor,
            currency=expense.currency,
            payer=ParticipantSummary.model_validate(expense.payer),
            spent_at=expense.spent_at,
            category=expense.category,
            shares=[
                ExpenseShareResponse(
                    participant=ParticipantSummary.model_validate(share.participant),
                    amount=from_minor_units(share.amount_minor, expense.currency),
                    amount_minor=share.amount_minor,
                    is_settled_externally=share.is_settled_externally,
                )
                for share in expense.shares
            ],
            created_at=expense.created_at,
            updated_at=expense.updated_at,
        )


class ExpenseListResponse(BaseModel):
    """Response schema for expense list"""

    items: List[ExpenseResponse]
    total_items: int
