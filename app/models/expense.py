"""Expense model"""
import enum
import uuid
from datetime import datetime

from sqlalchemy import (BigInteger, CheckConstraint, Column, DateTime, Enum,
                        ForeignKey, String, Uuid)
from sqlalchemy.orm import relationship

from app.database import Base


class ExpenseCategory(str, enum.Enum):
    """Enum for expense categories"""
    FOOD = "food"
    LODGING = "lodging"
    TRANSPORT = "transport"
    ENTERTAINMENT = "entertainment"
    SHOPPING = "shopping"
    HEALTH = "health"
    COMMUNICATION = "communication"
    TAXES = "taxes"
    OTHER = "other"


class Expense(Base):
    """Single payment event within a trip"""

    __tablename__ = "expenses"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    trip_id = Column(Uuid, nullable=False, index=True)
    title = Column(String(200), nullable=False)
    amount_minor = Column(BigInteger, nullable=False)
    currency = Column(String(3), nullable=False, index=True)
    payer_participant_id = Column(Uuid, ForeignKey("participants.id", ondelete="RESTRICT"), nullable=False, index=True)
    spent_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    category = Column(Enum(ExpenseCategory, values_callable=lambda e: [c.value for c in e]), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Constraints
    __table_args__ = (
        CheckConstraint('amount_minor > 0', name='check_amount_minor_positive'),
    )

    # Relationships
    payer = relationship("Participant", back_populates="expenses_paid")
    shares = relationship(
        "ExpenseShare",
        back_populates="expense",
        cascade="all, delete-orphan",
        order_by="ExpenseShare.position",
    )

    def __repr__(self) -> str:
        return f"<Expense(id={self.id}, title={self.title}, amount_minor={self.amount_minor}, currency={self.currency})>"
