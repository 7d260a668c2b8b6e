"""Integration tests for balance and spending summary endpoints"""

import logging
from decimal import Decimal

import pytest
from httpx import AsyncClient

from app.models.expense import Expense
from app.models.expense_share import ExpenseShare


def expenses_url(trip_id):
    return f"/api/v1/trips/{trip_id}/expenses"


def balances_url(trip_id):
    return f"/api/v1/trips/{trip_id}/balances"


def as_decimals(balances):
    """Convert JSON balances to Decimals keyed by currency then participant ID"""
    return {
        currency: {pid: Decimal(amount) for pid, amount in per_participant.items()}
        for currency, per_participant in balances.items()
    }


async def add_expense(client, trip_id, payer, sharers, amount, currency="BRL", **extra):
    response = await client.post(
        expenses_url(trip_id),
        json={
            "title": extra.pop("title", "Expense"),
            "amount": amount,
            "currency": currency,
            "payer_participant_id": str(payer.id),
            "participant_ids_to_split": [str(p.id) for p in sharers],
            **extra,
        },
    )
    assert response.status_code == 201
    return response.json()


class TestBalances:
    """Test balances endpoint"""

    @pytest.mark.asyncio
    async def test_empty_trip(self, client: AsyncClient, trip_id, participants):
        """Test trip without expenses"""
        response = await client.get(balances_url(trip_id))

        assert response.status_code == 200
        assert response.json() == {
            "trip_id": str(trip_id),
            "balances": {},
            "suggested_payments": [],
        }

    @pytest.mark.asyncio
    async def test_single_expense(self, client: AsyncClient, trip_id, participants):
        """Test Alice pays 1.00 split among Alice, Bob and Carol"""
        alice, bob, carol = participants
        await add_expense(client, trip_id, alice, [alice, bob, carol], "1.00")

        response = await client.get(balances_url(trip_id))

        assert response.status_code == 200
        data = response.json()
        assert as_decimals(data["balances"]) == {
            "BRL": {
                str(alice.id): Decimal("0.66"),
                str(bob.id): Decimal("-0.33"),
                str(carol.id): Decimal("-0.33"),
            }
        }
        assert [
            (p["from_name"], p["to_name"], Decimal(p["amount"]), p["amount_minor"], p["currency"])
            for p in data["suggested_payments"]
        ] == [
            ("Bob", "Alice", Decimal("0.33"), 33, "BRL"),
            ("Carol", "Alice", Decimal("0.33"), 33, "BRL"),
        ]

    @pytest.mark.asyncio
    async def test_currencies_are_settled_separately(
        self, client: AsyncClient, trip_id, participants
    ):
        """Test each currency gets its own balances and payments"""
        alice, bob, carol = participants
        await add_expense(client, trip_id, alice, [alice, bob], "50.00", currency="BRL")
        await add_expense(client, trip_id, bob, [bob, carol], "3000", currency="JPY")

        data = (await client.get(balances_url(trip_id))).json()

        assert as_decimals(data["balances"]) == {
            "BRL": {str(alice.id): Decimal("25.00"), str(bob.id): Decimal("-25.00")},
            "JPY": {str(bob.id): Decimal("1500"), str(carol.id): Decimal("-1500")},
        }
        assert [
            (p["from_name"], p["to_name"], p["amount_minor"], p["currency"])
            for p in data["suggested_payments"]
        ] == [
            ("Bob", "Alice", 2500, "BRL"),
            ("Carol", "Bob", 1500, "JPY"),
        ]

    @pytest.mark.asyncio
    async def test_balances_follow_replace_and_delete(
        self, client: AsyncClient, trip_id, participants
    ):
        """Test balances reflect the current ledger after edits"""
        alice, bob, carol = participants
        expense = await add_expense(client, trip_id, alice, [alice, bob, carol], "30.00")
        url = f"{expenses_url(trip_id)}/{expense['id']}"

        await client.put(
            url,
            json={
                "title": "Expense",
                "amount": "20.00",
                "currency": "BRL",
                "payer_participant_id": str(carol.id),
                "participant_ids_to_split": [str(alice.id), str(bob.id)],
            },
        )
        data = (await client.get(balances_url(trip_id))).json()
        assert as_decimals(data["balances"]) == {
            "BRL": {
                str(carol.id): Decimal("20.00"),
                str(alice.id): Decimal("-10.00"),
                str(bob.id): Decimal("-10.00"),
            }
        }

        await client.delete(url)
        data = (await client.get(balances_url(trip_id))).json()
        assert data["balances"] == {}
        assert data["suggested_payments"] == []

    @pytest.mark.asyncio
    async def test_corrupted_ledger_is_reported(
        self, client: AsyncClient, db_session, trip_id, participants, caplog
    ):
        """Test shares that do not sum to the amount fail loudly, logged once"""
        alice, bob, _ = participants
        db_session.add(
            Expense(
                trip_id=trip_id,
                title="Broken",
                amount_minor=1000,
                currency="BRL",
                payer_participant_id=alice.id,
                shares=[
                    ExpenseShare(participant_id=alice.id, position=0, amount_minor=500),
                    ExpenseShare(participant_id=bob.id, position=1, amount_minor=499),
                ],
            )
        )
        await db_session.commit()

        response = await client.get(balances_url(trip_id))

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["type"] == "LedgerInconsistency"
        assert error["details"] == {"residual_minor": 1}

        critical = [r for r in caplog.records if r.levelno == logging.CRITICAL]
        assert len(critical) == 1
        assert critical[0].name == "app.main"


class TestSpendingSummary:
    """Test spending summary endpoint"""

    @pytest.mark.asyncio
    async def test_summary(self, client: AsyncClient, trip_id, participants):
        """Test totals per currency and category"""
        alice, bob, carol = participants
        await add_expense(client, trip_id, alice, [alice, bob], "40.00", category="food")
        await add_expense(client, trip_id, bob, [carol], "10.50", category="food")
        await add_expense(client, trip_id, carol, [alice], "5.00")
        await add_expense(client, trip_id, alice, [bob], "12.00", currency="EUR",
                          category="transport")

        response = await client.get(f"{expenses_url(trip_id)}/summary")

        assert response.status_code == 200
        currencies = response.json()["currencies"]
        assert [c["currency"] for c in currencies] == ["BRL", "EUR"]

        brl, eur = currencies
        assert Decimal(brl["total"]) == Decimal("55.50")
        assert brl["expense_count"] == 3
        assert {k: Decimal(v) for k, v in brl["by_category"].items()} == {
            "food": Decimal("50.50"),
            "uncategorized": Decimal("5.00"),
        }
        assert Decimal(eur["total"]) == Decimal("12.00")
        assert eur["by_category"].keys() == {"transport"}

    @pytest.mark.asyncio
    async def test_summary_empty_trip(self, client: AsyncClient, trip_id):
        """Test summary of a trip without expenses"""
        response = await client.get(f"{expenses_url(trip_id)}/summary")

        assert response.status_code == 200
        assert response.json() == {"trip_id": str(trip_id), "currencies": []}
