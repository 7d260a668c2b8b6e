"""Net balance calculation"""

import logging
from collections import OrderedDict
from typing import Dict, Iterable, List
from uuid import UUID

from app.core.exceptions import LedgerInconsistency
from app.models.expense import Expense

logger = logging.getLogger(__name__)


class BalanceCalculator:
    """Folds expenses into a net balance per participant"""

    @staticmethod
    def group_by_currency(expenses: Iterable[Expense]) -> Dict[str, List[Expense]]:
        """
        Partition expenses into independent per-currency ledgers.

        Args:
            expenses: Expenses of one trip

        Returns:
            Mapping currency code -> expenses in that currency, sorted by code
        """
        grouped: Dict[str, List[Expense]] = {}
        for expense in expenses:
            grouped.setdefault(expense.currency, []).append(expense)

        return OrderedDict(sorted(grouped.items()))

    @staticmethod
    def compute_balances(expenses: Iterable[Expense]) -> Dict[UUID, int]:
        """
        Compute each participant's net position in minor units.

        The payer is credited with the full amount and every sharer
        (payer included) is debited with their share. Positive means the
        group owes the participant.

        Args:
            expenses: Expenses of a single currency

        Returns:
            Mapping participant ID -> signed balance in minor units

        Raises:
            LedgerInconsistency: If expenses mix currencies or the balances
                do not sum to zero
        """
        balances: Dict[UUID, int] = {}
        currencies = set()

        for expense in expenses:
            currencies.add(expense.currency)

            payer_id = expense.payer_participant_id
            balances[payer_id] = balances.get(payer_id, 0) + expense.amount_minor

            for share in expense.shares:
                participant_id = share.participant_id
                balances[participant_id] = (
                    balances.get(participant_id, 0) - share.amount_minor
                )

        if len(currencies) > 1:
            raise LedgerInconsistency(
                "Cannot net balances across currencies",
                details={"currencies": sorted(currencies)},
            )

        total = sum(balances.values())
        if total != 0:
            logger.debug(
                "Balances do not sum to zero (residual %s minor units, currency %s)",
                total,
                next(iter(currencies), None),
            )
            raise LedgerInconsistency(
                f"Balances sum to {total} minor units instead of zero",
                details={"residual_minor": total},
            )

        return balances
