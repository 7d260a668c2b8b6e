"""Database seeding script (demo trip with participants and expenses)"""
import asyncio
import sys
from pathlib import Path
from uuid import UUID

# Add parent directory to path to import app modules
sys.path.append(str(Path(__file__).parent.parent))

from app.database import AsyncSessionLocal, create_tables
from app.models.expense import ExpenseCategory
from app.models.participant import Participant
from app.repositories.participant_repository import ParticipantRepository
from app.schemas.expense import ExpenseCreate
from app.services.balance_service import BalanceService
from app.services.ledger_service import LedgerService

DEMO_TRIP_ID = UUID("00000000-0000-4000-8000-000000000001")


async def seed_trip():
    """Seed the database with a demo trip, 4 participants and a few expenses"""

    await create_tables()

    async with AsyncSessionLocal() as session:
        existing_ids = await ParticipantRepository.list_participant_ids(session, DEMO_TRIP_ID)
        if existing_ids:
            print(f"  ⏭️  Demo trip {DEMO_TRIP_ID} already seeded, skipping...")
            return

        participants = [
            Participant(trip_id=DEMO_TRIP_ID, name="Ana", is_owner=True),
            Participant(trip_id=DEMO_TRIP_ID, name="Bruno"),
            Participant(trip_id=DEMO_TRIP_ID, name="Carla"),
            Participant(trip_id=DEMO_TRIP_ID, name="Diego"),
        ]
        await ParticipantRepository.create_batch(session, participants)
        await session.commit()
        for participant in participants:
            print(f"  ✅ Created participant '{participant.name}' ({participant.id})")

        ana, bruno, carla, diego = participants
        everyone = [p.id for p in participants]

        expenses_data = [
            ExpenseCreate(
                title="Hotel",
                amount="1200.00",
                currency="BRL",
                payer_participant_id=ana.id,
                participant_ids_to_split=everyone,
                category=ExpenseCategory.LODGING,
            ),
            ExpenseCreate(
                title="Dinner",
                amount="100.00",
                currency="BRL",
                payer_participant_id=bruno.id,
                participant_ids_to_split=[ana.id, bruno.id, carla.id],
                category=ExpenseCategory.FOOD,
            ),
            ExpenseCreate(
                title="Taxi",
                amount="45.50",
                currency="BRL",
                payer_participant_id=diego.id,
                participant_ids_to_split=[carla.id, diego.id],
                category=ExpenseCategory.TRANSPORT,
            ),
            ExpenseCreate(
                title="Museum tickets",
                amount="60",
                currency="EUR",
                payer_participant_id=carla.id,
                participant_ids_to_split=everyone,
                category=ExpenseCategory.ENTERTAINMENT,
            ),
        ]

        for expense_data in expenses_data:
            expense = await LedgerService.add_expense(session, DEMO_TRIP_ID, expense_data)
            print(f"  ✅ Created expense '{expense.title}' ({expense.amount_minor} {expense.currency} minor units)")

        report = await BalanceService.get_balance_report(DEMO_TRIP_ID, session, use_cache=False)

        print(f"\n📊 Suggested payments:")
        for payment in report.suggested_payments:
            print(f"  {payment.from_name} -> {payment.to_name}: {payment.amount} {payment.currency}")


async def main():
    """Main function to run seeding"""
    print("🌱 Seeding database with a demo trip...\n")

    try:
        await seed_trip()
        print("\n✨ Database seeding completed successfully!")
    except Exception as e:
        print(f"\n❌ Error seeding database: {str(e)}")
        raise


if __name__ == "__main__":
    asyncio.run(main())
