"""Expense data access"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.expense import Expense
from app.models.expense_share import ExpenseShare


class ExpenseRepository:
    """Repository for Expense database operations"""

    @staticmethod
    async def create(db: AsyncSession, expense: Expense) -> Expense:
        """
        Create a new expense (with any shares attached to it).

        Args:
            db: Database session
            expense: Expense object to create

        Returns:
            Created expense
        """
        db.add(expense)
        await db.flush()
        return expense

    @staticmethod
    async def get_by_id(
        db: AsyncSession,
        expense_id: UUID,
        trip_id: Optional[UUID] = None,
        for_update: bool = False,
    ) -> Optional[Expense]:
        """
        Get expense by ID.

        Args:
            db: Database session
            expense_id: Expense UUID
            trip_id: Optional trip the expense must belong to
            for_update: Lock the row until the transaction ends

        Returns:
            Expense if found, None otherwise
        """
        query = select(Expense).where(Expense.id == expense_id)
        if trip_id is not None:
            query = query.where(Expense.trip_id == trip_id)
        if for_update:
            query = query.with_for_update()

        result = await db.execute(query)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_with_shares(
        db: AsyncSession, expense_id: UUID
    ) -> Optional[Expense]:
        """
        Get expense with payer and shares eagerly loaded.

        Args:
            db: Database session
            expense_id: Expense UUID

        Returns:
            Expense with shares if found, None otherwise
        """
        result = await db.execute(
            select(Expense)
            .where(Expense.id == expense_id)
            .options(
                selectinload(Expense.shares).selectinload(ExpenseShare.participant),
                selectinload(Expense.payer),
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def list_by_trip(
        db: AsyncSession,
        trip_id: UUID,
        currency: Optional[str] = None,
    ) -> List[Expense]:
        """
        Get all expenses of a trip.

        Ordered by spent_at descending; ties keep insertion order.

        Args:
            db: Database session
            trip_id: Trip UUID
            currency: Optional currency filter

        Returns:
            List of expenses with payer and shares loaded
        """
        query = select(Expense).where(Expense.trip_id == trip_id)

        if currency:
            query = query.where(Expense.currency == currency)

        query = query.order_by(
            Expense.spent_at.desc(), Expense.created_at.asc(), Expense.id.asc()
        )

        query = query.options(
            selectinload(Expense.shares).selectinload(ExpenseShare.participant),
            selectinload(Expense.payer),
        ).execution_options(populate_existing=True)

        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def delete(db: AsyncSession, expense: Expense) -> None:
        """
        Delete an expense; its shares are removed by cascade.

        Args:
            db: Database session
            expense: Expense to delete
        """
        await db.delete(expense)
        await db.flush()
