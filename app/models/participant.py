"""Participant model"""
import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, String, Uuid
from sqlalchemy.orm import relationship

from app.database import Base


class Participant(Base):
    """
    Member of a trip.

    Rows are owned by the participant directory; the ledger only reads them
    to check that payers and sharers belong to the trip.
    """

    __tablename__ = "participants"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    trip_id = Column(Uuid, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    linked_account_id = Column(String(255), nullable=True, index=True)
    is_owner = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    expenses_paid = relationship("Expense", back_populates="payer")
    shares = relationship("ExpenseShare", back_populates="participant")

    def __repr__(self) -> str:
        return f"<Participant(id={self.id}, trip_id={self.trip_id}, name={self.name})>"
