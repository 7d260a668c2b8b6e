"""Unit tests for net balance calculation"""

import itertools
import random
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from app.core.exceptions import LedgerInconsistency
from app.services.balance_calculator import BalanceCalculator
from app.services.split_allocator import SplitAllocator


def make_expense(payer_id, amount_minor, split_ids, currency="BRL"):
    """Build an expense double with shares from the split allocator"""
    expense = MagicMock()
    expense.payer_participant_id = payer_id
    expense.amount_minor = amount_minor
    expense.currency = currency

    shares = []
    for participant_id, share_minor in SplitAllocator.allocate(amount_minor, split_ids).items():
        share = MagicMock()
        share.participant_id = participant_id
        share.amount_minor = share_minor
        share.is_settled_externally = False
        shares.append(share)
    expense.shares = shares

    return expense


@pytest.fixture
def people():
    """Three participant IDs"""
    return uuid4(), uuid4(), uuid4()


class TestComputeBalances:
    """Test BalanceCalculator.compute_balances"""

    def test_single_expense_example(self, people):
        """Test A pays 100 split among A, B, C"""
        a, b, c = people

        balances = BalanceCalculator.compute_balances([make_expense(a, 100, [a, b, c])])

        assert balances == {a: 66, b: -33, c: -33}

    def test_payer_not_in_split(self, people):
        """Test payer who consumed nothing is owed the full amount"""
        a, b, c = people

        balances = BalanceCalculator.compute_balances([make_expense(a, 90, [b, c])])

        assert balances == {a: 90, b: -45, c: -45}

    def test_self_paid_expense_nets_to_zero(self, people):
        """Test an expense paid and consumed by the same person"""
        a, _, _ = people

        balances = BalanceCalculator.compute_balances([make_expense(a, 500, [a])])

        assert balances == {a: 0}

    def test_no_expenses(self):
        """Test empty ledger"""
        assert BalanceCalculator.compute_balances([]) == {}

    def test_multiple_expenses_accumulate(self, people):
        """Test balances across several expenses"""
        a, b, c = people
        expenses = [
            make_expense(a, 3000, [a, b, c]),
            make_expense(b, 1500, [a, b, c]),
            make_expense(c, 600, [a, b]),
        ]

        balances = BalanceCalculator.compute_balances(expenses)

        # a: +3000 -1000 -500 -300 ; b: +1500 -1000 -500 -300 ; c: +600 -1000 -500
        assert balances == {a: 1200, b: -300, c: -900}

    def test_zero_sum_for_random_ledgers(self):
        """Test balances always sum to zero"""
        rng = random.Random(42)
        ids = [uuid4() for _ in range(6)]

        for _ in range(50):
            expenses = []
            for _ in range(rng.randint(1, 12)):
                split = rng.sample(ids, rng.randint(1, len(ids)))
                expenses.append(make_expense(rng.choice(ids), rng.randint(1, 100000), split))

            assert sum(BalanceCalculator.compute_balances(expenses).values()) == 0

    def test_order_independence(self, people):
        """Test every permutation of the expenses gives the same balances"""
        a, b, c = people
        expenses = [
            make_expense(a, 100, [a, b, c]),
            make_expense(b, 257, [c, a]),
            make_expense(c, 1001, [b, c, a]),
            make_expense(a, 7, [b]),
        ]
        expected = BalanceCalculator.compute_balances(expenses)

        for permutation in itertools.permutations(expenses):
            assert BalanceCalculator.compute_balances(list(permutation)) == expected

    def test_settled_externally_flag_is_ignored(self, people):
        """Test share flag does not change balances"""
        a, b, c = people
        expense = make_expense(a, 100, [a, b, c])
        before = BalanceCalculator.compute_balances([expense])

        for share in expense.shares:
            share.is_settled_externally = True

        assert BalanceCalculator.compute_balances([expense]) == before

    def test_inconsistent_shares_raise(self, people):
        """Test shares that do not add up to the amount are detected"""
        a, b, c = people
        expense = make_expense(a, 100, [a, b, c])
        expense.shares[0].amount_minor = 33

        with pytest.raises(LedgerInconsistency) as exc_info:
            BalanceCalculator.compute_balances([expense])

        assert exc_info.value.details == {"residual_minor": 1}

    def test_mixed_currencies_raise(self, people):
        """Test currencies are never netted together"""
        a, b, _ = people
        expenses = [
            make_expense(a, 100, [a, b], currency="BRL"),
            make_expense(b, 100, [a, b], currency="EUR"),
        ]

        with pytest.raises(LedgerInconsistency):
            BalanceCalculator.compute_balances(expenses)


class TestGroupByCurrency:
    """Test BalanceCalculator.group_by_currency"""

    def test_groups_and_sorts_by_currency(self, people):
        """Test expenses are partitioned per currency"""
        a, b, _ = people
        brl_1 = make_expense(a, 100, [a, b], currency="BRL")
        eur = make_expense(b, 100, [a, b], currency="EUR")
        brl_2 = make_expense(b, 50, [a], currency="BRL")

        grouped = BalanceCalculator.group_by_currency([eur, brl_1, brl_2])

        assert list(grouped) == ["BRL", "EUR"]
        assert grouped["BRL"] == [brl_1, brl_2]
        assert grouped["EUR"] == [eur]

    def test_each_currency_ledger_sums_to_zero(self, people):
        """Test per-currency balances are independent"""
        a, b, c = people
        expenses = [
            make_expense(a, 100, [a, b, c], currency="BRL"),
            make_expense(b, 1500, [a, c], currency="JPY"),
        ]

        for currency_expenses in BalanceCalculator.group_by_currency(expenses).values():
            assert sum(BalanceCalculator.compute_balances(currency_expenses).values()) == 0
