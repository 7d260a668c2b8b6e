"""Debt settlement planning"""

import logging
from typing import Dict, List, Mapping
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.exceptions import LedgerInconsistency

logger = logging.getLogger(__name__)


class SettlementTransaction(BaseModel):
    """Suggested payment from a debtor to a creditor"""

    from_participant_id: UUID
    to_participant_id: UUID
    amount_minor: int = Field(..., gt=0)

    model_config = ConfigDict(frozen=True)


class SettlementOptimizer:
    """Greedy two-pointer matching of debtors against creditors"""

    @staticmethod
    def settle(
        balances: Mapping[UUID, int], sort_by_magnitude: bool = False
    ) -> List[SettlementTransaction]:
        """
        Produce payments that bring every balance to zero.

        Debtors and creditors are matched in input order (or by descending
        amount when ``sort_by_magnitude`` is set, ties keeping input order).
        Balances are integer minor units, so a party is settled once its
        remaining amount is exactly zero.

        Args:
            balances: Mapping participant ID -> signed balance in minor units
            sort_by_magnitude: Match largest debts and credits first

        Returns:
            List of settlement transactions

        Raises:
            LedgerInconsistency: If balances do not sum to zero
        """
        residual = sum(balances.values())
        if residual != 0:
            logger.debug(
                "Refusing to settle balances with residual %s minor units", residual
            )
            raise LedgerInconsistency(
                f"Cannot settle balances summing to {residual} minor units",
                details={"residual_minor": residual},
            )

        debtors = [[pid, -amount] for pid, amount in balances.items() if amount < 0]
        creditors = [[pid, amount] for pid, amount in balances.items() if amount > 0]

        if sort_by_magnitude:
            # sort() is stable, equal amounts keep input order
            debtors.sort(key=lambda party: party[1], reverse=True)
            creditors.sort(key=lambda party: party[1], reverse=True)

        transactions: List[SettlementTransaction] = []
        i = 0
        j = 0

        while i < len(debtors) and j < len(creditors):
            debtor = debtors[i]
            creditor = creditors[j]

            amount = min(debtor[1], creditor[1])
            if amount > 0:
                transactions.append(
                    SettlementTransaction(
                        from_participant_id=debtor[0],
                        to_participant_id=creditor[0],
                        amount_minor=amount,
                    )
                )

            debtor[1] -= amount
            creditor[1] -= amount

            if debtor[1] == 0:
                i += 1
            if creditor[1] == 0:
                j += 1

        replayed = SettlementOptimizer.replay(transactions)
        expected = {pid: amount for pid, amount in balances.items() if amount != 0}
        if replayed != expected:
            logger.debug("Settlement plan does not reproduce balances")
            raise LedgerInconsistency("Settlement plan does not reproduce balances")

        return transactions

    @staticmethod
    def replay(transactions: List[SettlementTransaction]) -> Dict[UUID, int]:
        """
        Net effect of a settlement plan per participant.

        Each amount counts negative for the sender and positive for the
        receiver, so a correct plan replays to the original balances.

        Args:
            transactions: Settlement plan

        Returns:
            Mapping participant ID -> balance the plan settles, zeros omitted
        """
        effect: Dict[UUID, int] = {}
        for transaction in transactions:
            effect[transaction.from_participant_id] = (
                effect.get(transaction.from_participant_id, 0) - transaction.amount_minor
            )
            effect[transaction.to_participant_id] = (
                effect.get(transaction.to_participant_id, 0) + transaction.amount_minor
            )

        return {pid: amount for pid, amount in effect.items() if amount != 0}
