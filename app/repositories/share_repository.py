"""Expense share data access"""
from typing import List
from uuid import UUID

from sqlalchemy import delete as sql_delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.expense_share import ExpenseShare


class ShareRepository:
    """Repository for ExpenseShare database operations"""

    @staticmethod
    async def create_batch(db: AsyncSession, shares: List[ExpenseShare]) -> List[ExpenseShare]:
        """
        Create multiple shares in a batch.

        Args:
            db: Database session
            shares: List of ExpenseShare objects

        Returns:
            List of created shares
        """
        db.add_all(shares)
        await db.flush()
        return shares

    @staticmethod
    async def delete_by_expense(db: AsyncSession, expense_id: UUID) -> int:
        """
        Delete all shares of an expense.

        Args:
            db: Database session
            expense_id: Expense UUID

        Returns:
            Number of shares deleted
        """
        result = await db.execute(
            sql_delete(ExpenseShare).where(ExpenseShare.expense_id == expense_id)
        )
        await db.flush()
        return result.rowcount
