"""SQLAlchemy models"""
from app.models.participant import Participant
from app.models.expense import Expense, ExpenseCategory
from app.models.expense_share import ExpenseShare

__all__ = ["Participant", "Expense", "ExpenseShare", "ExpenseCategory"]
