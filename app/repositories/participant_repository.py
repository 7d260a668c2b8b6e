"""Participant directory data access"""
from typing import Iterable, List, Set
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.participant import Participant


class ParticipantRepository:
    """Read access to trip participants, plus creation for seeding and tests"""

    @staticmethod
    async def create_batch(db: AsyncSession, participants: List[Participant]) -> List[Participant]:
        """
        Create multiple participants in a batch.

        Args:
            db: Database session
            participants: List of Participant objects

        Returns:
            List of created participants
        """
        db.add_all(participants)
        await db.flush()
        return participants

    @staticmethod
    async def participant_exists(db: AsyncSession, trip_id: UUID, participant_id: UUID) -> bool:
        """
        Check whether a participant belongs to a trip.

        Args:
            db: Database session
            trip_id: Trip UUID
            participant_id: Participant UUID

        Returns:
            True if the participant is part of the trip
        """
        result = await db.execute(
            select(Participant.id).where(
                Participant.id == participant_id,
                Participant.trip_id == trip_id,
            )
        )
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def list_participant_ids(db: AsyncSession, trip_id: UUID) -> Set[UUID]:
        """
        Get the IDs of all participants of a trip.

        Args:
            db: Database session
            trip_id: Trip UUID

        Returns:
            Set of participant IDs
        """
        result = await db.execute(
            select(Participant.id).where(Participant.trip_id == trip_id)
        )
        return set(result.scalars().all())

    @staticmethod
    async def get_by_ids(db: AsyncSession, participant_ids: Iterable[UUID]) -> List[Participant]:
        """
        Get participants by ID.

        Args:
            db: Database session
            participant_ids: Participant UUIDs

        Returns:
            Participants found (unknown IDs are skipped)
        """
        ids = list(participant_ids)
        if not ids:
            return []

        result = await db.execute(select(Participant).where(Participant.id.in_(ids)))
        return list(result.scalars().all())
