"""Expense ledger business logic"""
import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.exceptions import InvalidAmount, NotFoundError, UnknownParticipant
from app.models.expense import Expense
from app.models.expense_share import ExpenseShare
from app.repositories.expense_repository import ExpenseRepository
from app.repositories.participant_repository import ParticipantRepository
from app.repositories.share_repository import ShareRepository
from app.schemas.expense import ExpenseBase
from app.services.cache_service import CacheService
from app.services.split_allocator import SplitAllocator
from app.utils.money import MAX_AMOUNT_MINOR, to_minor_units

logger = logging.getLogger(__name__)


def balance_cache_key(trip_id: UUID) -> str:
    """Cache key of a trip's balance report"""
    return f"balances:{trip_id}"


class LedgerService:
    """Service for adding, replacing, removing and listing trip expenses"""

    @staticmethod
    def resolve_currency(expense_data: ExpenseBase) -> str:
        """Currency of the request, falling back to the configured default"""
        return expense_data.currency or get_settings().default_currency

    @staticmethod
    def resolve_amount_minor(expense_data: ExpenseBase, currency: str) -> int:
        """
        Amount of the request in minor units.

        Args:
            expense_data: Expense input
            currency: Resolved currency code

        Returns:
            Positive amount in minor units

        Raises:
            InvalidAmount: If the amount is not a positive, finite value
                representable in the currency's minor unit and at most
                MAX_AMOUNT_MINOR
        """
        if expense_data.amount_minor is not None:
            amount_minor = expense_data.amount_minor
        else:
            amount_minor = to_minor_units(expense_data.amount, currency)

        if amount_minor <= 0:
            raise InvalidAmount(f"Amount must be positive, got {amount_minor} minor units")
        if amount_minor > MAX_AMOUNT_MINOR:
            raise InvalidAmount(
                f"Amount must be at most {MAX_AMOUNT_MINOR} minor units"
            )

        return amount_minor

    @staticmethod
    def normalize_timestamp(value: Optional[datetime]) -> datetime:
        """Convert a timestamp to naive UTC, defaulting to now"""
        if value is None:
            return datetime.now(timezone.utc).replace(tzinfo=None)
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    @staticmethod
    async def validate_participants(
        db: AsyncSession, trip_id: UUID, expense_data: ExpenseBase
    ) -> None:
        """
        Validate that payer and sharers are participants of the trip.

        Args:
            db: Database session
            trip_id: Trip UUID
            expense_data: Expense input

        Raises:
            UnknownParticipant: If any ID is not a participant of the trip
        """
        payer_id = expense_data.payer_participant_id
        unknown = []
        if not await ParticipantRepository.participant_exists(db, trip_id, payer_id):
            unknown.append(str(payer_id))

        known_ids = await ParticipantRepository.list_participant_ids(db, trip_id)
        for participant_id in expense_data.participant_ids_to_split:
            if participant_id not in known_ids and str(participant_id) not in unknown:
                unknown.append(str(participant_id))

        if unknown:
            raise UnknownParticipant(
                f"Participants not found in trip {trip_id}: {', '.join(unknown)}",
                details={"participant_ids": unknown},
            )

    @staticmethod
    async def prepare_shares(
        db: AsyncSession, trip_id: UUID, expense_data: ExpenseBase
    ) -> tuple[str, int, List[ExpenseShare]]:
        """
        Validate input and materialize shares, without writing anything.

        Args:
            db: Database session
            trip_id: Trip UUID
            expense_data: Expense input

        Returns:
            Tuple of (currency, amount in minor units, unsaved shares)
        """
        currency = LedgerService.resolve_currency(expense_data)
        amount_minor = LedgerService.resolve_amount_minor(expense_data, currency)

        allocation = SplitAllocator.allocate(
            amount_minor, expense_data.participant_ids_to_split
        )

        await LedgerService.validate_participants(db, trip_id, expense_data)

        shares = [
            ExpenseShare(
                participant_id=participant_id,
                position=position,
                amount_minor=share_minor,
                is_settled_externally=False,
            )
            for position, (participant_id, share_minor) in enumerate(allocation.items())
        ]

        return currency, amount_minor, shares

    @staticmethod
    async def add_expense(
        db: AsyncSession, trip_id: UUID, expense_data: ExpenseBase
    ) -> Expense:
        """
        Add an expense to a trip's ledger.

        Args:
            db: Database session
            trip_id: Trip UUID
            expense_data: Expense creation data

        Returns:
            Created expense with payer and shares loaded

        Raises:
            InvalidAmount: If amount is invalid
            InvalidSplit: If split set is empty or has duplicates
            UnknownParticipant: If payer or a sharer is not in the trip
        """
        currency, amount_minor, shares = await LedgerService.prepare_shares(
            db, trip_id, expense_data
        )

        async with db.begin_nested():
            expense = Expense(
                trip_id=trip_id,
                title=expense_data.title,
                amount_minor=amount_minor,
                currency=currency,
                payer_participant_id=expense_data.payer_participant_id,
                spent_at=LedgerService.normalize_timestamp(expense_data.spent_at),
                category=expense_data.category,
                shares=shares,
            )
            created_expense = await ExpenseRepository.create(db, expense)

        await db.commit()
        await CacheService.delete(balance_cache_key(trip_id))

        logger.info(
            "Added expense %s to trip %s: %s %s split %d ways",
            created_expense.id, trip_id, amount_minor, currency, len(shares),
        )

        return await ExpenseRepository.get_with_shares(db, created_expense.id)

    @staticmethod
    async def get_expense(db: AsyncSession, trip_id: UUID, expense_id: UUID) -> Expense:
        """
        Get one expense of a trip.

        Raises:
            NotFoundError: If the expense does not exist in the trip
        """
        expense = await ExpenseRepository.get_by_id(db, expense_id, trip_id=trip_id)
        if not expense:
            raise NotFoundError(f"Expense {expense_id} not found")

        return await ExpenseRepository.get_with_shares(db, expense_id)

    @staticmethod
    async def replace_expense(
        db: AsyncSession, trip_id: UUID, expense_id: UUID, expense_data: ExpenseBase
    ) -> Expense:
        """
        Replace every field of an expense and recompute its shares.

        Args:
            db: Database session
            trip_id: Trip UUID
            expense_id: Expense UUID
            expense_data: New expense data

        Returns:
            Replaced expense with payer and shares loaded

        Raises:
            NotFoundError: If the expense does not exist in the trip
            InvalidAmount: If amount is invalid
            InvalidSplit: If split set is empty or has duplicates
            UnknownParticipant: If payer or a sharer is not in the trip
        """
        existing = await ExpenseRepository.get_by_id(db, expense_id, trip_id=trip_id)
        if not existing:
            raise NotFoundError(f"Expense {expense_id} not found")

        currency, amount_minor, shares = await LedgerService.prepare_shares(
            db, trip_id, expense_data
        )

        async with db.begin_nested():
            # Serializes concurrent replace/remove of the same expense
            expense = await ExpenseRepository.get_by_id(
                db, expense_id, trip_id=trip_id, for_update=True
            )
            if not expense:
                raise NotFoundError(f"Expense {expense_id} not found")

            expense.title = expense_data.title
            expense.amount_minor = amount_minor
            expense.currency = currency
            expense.payer_participant_id = expense_data.payer_participant_id
            expense.spent_at = LedgerService.normalize_timestamp(expense_data.spent_at)
            expense.category = expense_data.category
            expense.updated_at = datetime.now(timezone.utc).replace(tzinfo=None)

            await ShareRepository.delete_by_expense(db, expense_id)

            for share in shares:
                share.expense_id = expense_id
            await ShareRepository.create_batch(db, shares)

        await db.commit()
        await CacheService.delete(balance_cache_key(trip_id))

        logger.info(
            "Replaced expense %s in trip %s: %s %s split %d ways",
            expense_id, trip_id, amount_minor, currency, len(shares),
        )

        return await ExpenseRepository.get_with_shares(db, expense_id)

    @staticmethod
    async def remove_expense(db: AsyncSession, trip_id: UUID, expense_id: UUID) -> None:
        """
        Remove an expense and its shares.

        Args:
            db: Database session
            trip_id: Trip UUID
            expense_id: Expense UUID

        Raises:
            NotFoundError: If the expense does not exist in the trip
        """
        async with db.begin_nested():
            expense = await ExpenseRepository.get_by_id(
                db, expense_id, trip_id=trip_id, for_update=True
            )
            if not expense:
                raise NotFoundError(f"Expense {expense_id} not found")

            await ExpenseRepository.delete(db, expense)

        await db.commit()
        await CacheService.delete(balance_cache_key(trip_id))

        logger.info("Removed expense %s from trip %s", expense_id, trip_id)

    @staticmethod
    async def list_expenses(
        db: AsyncSession, trip_id: UUID, currency: Optional[str] = None
    ) -> List[Expense]:
        """
        List a trip's expenses, most recent first.

        Args:
            db: Database session
            trip_id: Trip UUID
            currency: Optional currency filter

        Returns:
            Expenses ordered by spent_at descending, ties in insertion order
        """
        return await ExpenseRepository.list_by_trip(db, trip_id, currency=currency)
