"""Trip balance and settlement reporting"""

import logging
from decimal import Decimal
from typing import Dict, List
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.models.expense import Expense
from app.repositories.participant_repository import ParticipantRepository
from app.schemas.balance import (BalanceReport, CurrencySpending,
                                 SpendingSummary, SuggestedPayment)
from app.services.balance_calculator import BalanceCalculator
from app.services.cache_service import CacheService
from app.services.ledger_service import LedgerService, balance_cache_key
from app.services.settlement_optimizer import (SettlementOptimizer,
                                               SettlementTransaction)
from app.utils.money import from_minor_units

logger = logging.getLogger(__name__)

UNCATEGORIZED = "uncategorized"


class BalanceService:
    """Service for balance calculation operations"""

    @staticmethod
    def _serialize_report(report: BalanceReport) -> str:
        """
        Serialize a balance report to JSON.

        Args:
            report: Balance report

        Returns:
            JSON string
        """
        return report.model_dump_json()

    @staticmethod
    def _deserialize_report(json_str: str) -> BalanceReport:
        """
        Deserialize a balance report from JSON.

        Args:
            json_str: JSON string

        Returns:
            Balance report
        """
        return BalanceReport.model_validate_json(json_str)

    @staticmethod
    def build_ledgers(
        expenses: List[Expense], sort_by_magnitude: bool = False
    ) -> Dict[str, tuple[Dict[UUID, int], List[SettlementTransaction]]]:
        """
        Compute balances and a settlement plan for every currency.

        Args:
            expenses: Expenses of one trip
            sort_by_magnitude: Passed through to the settlement optimizer

        Returns:
            Mapping currency -> (balances in minor units, settlement plan)

        Raises:
            LedgerInconsistency: If any currency ledger does not sum to zero
        """
        ledgers = {}
        for currency, currency_expenses in BalanceCalculator.group_by_currency(expenses).items():
            balances = BalanceCalculator.compute_balances(currency_expenses)
            plan = SettlementOptimizer.settle(balances, sort_by_magnitude=sort_by_magnitude)
            ledgers[currency] = (balances, plan)

        return ledgers

    @staticmethod
    async def _calculate_report(trip_id: UUID, db: AsyncSession) -> BalanceReport:
        """
        Calculate the balance report of a trip from its stored expenses.

        Args:
            trip_id: Trip UUID
            db: Database session

        Returns:
            BalanceReport with display decimals and participant names
        """
        expenses = await LedgerService.list_expenses(db, trip_id)

        ledgers = BalanceService.build_ledgers(
            expenses, sort_by_magnitude=get_settings().settlement_sort_by_magnitude
        )

        participant_ids = set()
        for balances, _ in ledgers.values():
            participant_ids.update(balances)
        participants = await ParticipantRepository.get_by_ids(db, participant_ids)
        names = {participant.id: participant.name for participant in participants}

        report_balances: Dict[str, Dict[UUID, Decimal]] = {}
        suggested_payments: List[SuggestedPayment] = []

        for currency, (balances, plan) in ledgers.items():
            report_balances[currency] = {
                participant_id: from_minor_units(amount, currency)
                for participant_id, amount in balances.items()
            }
            for transaction in plan:
                suggested_payments.append(
                    SuggestedPayment(
                        from_participant_id=transaction.from_participant_id,
                        from_name=names.get(transaction.from_participant_id, "Unknown"),
                        to_participant_id=transaction.to_participant_id,
                        to_name=names.get(transaction.to_participant_id, "Unknown"),
                        amount=from_minor_units(transaction.amount_minor, currency),
                        amount_minor=transaction.amount_minor,
                        currency=currency,
                    )
                )

        return BalanceReport(
            trip_id=trip_id,
            balances=report_balances,
            suggested_payments=suggested_payments,
        )

    @staticmethod
    async def get_balance_report(
        trip_id: UUID, db: AsyncSession, use_cache: bool = True
    ) -> BalanceReport:
        """
        Get balances and suggested payments of a trip.

        Args:
            trip_id: Trip UUID
            db: Database session
            use_cache: Whether to use cache (default: True)

        Returns:
            BalanceReport

        Raises:
            LedgerInconsistency: If stored expenses break the zero-sum invariant
        """
        if not use_cache:
            return await BalanceService._calculate_report(trip_id, db)

        cache_key = balance_cache_key(trip_id)
        cached_data = await CacheService.get(cache_key)

        if cached_data:
            try:
                return BalanceService._deserialize_report(cached_data)
            except PydanticValidationError:
                logger.warning("Discarding unreadable cached balances for trip %s", trip_id)

        report = await BalanceService._calculate_report(trip_id, db)
        await CacheService.set(
            cache_key,
            BalanceService._serialize_report(report),
            ttl=get_settings().balance_cache_ttl,
        )
        return report

    @staticmethod
    async def get_spending_summary(trip_id: UUID, db: AsyncSession) -> SpendingSummary:
        """
        Get spending totals of a trip per currency and category.

        Args:
            trip_id: Trip UUID
            db: Database session

        Returns:
            SpendingSummary
        """
        expenses = await LedgerService.list_expenses(db, trip_id)

        currencies: List[CurrencySpending] = []
        for currency, currency_expenses in BalanceCalculator.group_by_currency(expenses).items():
            total_minor = 0
            by_category_minor: Dict[str, int] = {}
            for expense in currency_expenses:
                total_minor += expense.amount_minor
                category = expense.category.value if expense.category else UNCATEGORIZED
                by_category_minor[category] = (
                    by_category_minor.get(category, 0) + expense.amount_minor
                )

            currencies.append(
                CurrencySpending(
                    currency=currency,
                    total=from_minor_units(total_minor, currency),
                    expense_count=len(currency_expenses),
                    by_category={
                        category: from_minor_units(amount, currency)
                        for category, amount in sorted(by_category_minor.items())
                    },
                )
            )

        return SpendingSummary(trip_id=trip_id, currencies=currencies)
