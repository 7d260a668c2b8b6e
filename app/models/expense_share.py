"""Expense share model"""
import uuid

from sqlalchemy import (BigInteger, Boolean, CheckConstraint, Column,
                        ForeignKey, Integer, UniqueConstraint, Uuid)
from sqlalchemy.orm import relationship

from app.database import Base


class ExpenseShare(Base):
    """One participant's portion of an expense"""

    __tablename__ = "expense_shares"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    expense_id = Column(Uuid, ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False, index=True)
    participant_id = Column(Uuid, ForeignKey("participants.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    amount_minor = Column(BigInteger, nullable=False)
    # Informational only, not read by balance calculation
    is_settled_externally = Column(Boolean, default=False, nullable=False)

    # Constraints
    __table_args__ = (
        UniqueConstraint('expense_id', 'participant_id', name='uq_expense_share_participant'),
        CheckConstraint('amount_minor >= 0', name='check_share_amount_non_negative'),
    )

    # Relationships
    expense = relationship("Expense", back_populates="shares")
    participant = relationship("Participant", back_populates="shares")

    def __repr__(self) -> str:
        return f"<ExpenseShare(expense_id={self.expense_id}, participant_id={self.participant_id}, amount_minor={self.amount_minor})>"
