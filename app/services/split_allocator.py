"""Equal split allocation in minor units"""

from typing import Dict, Sequence
from uuid import UUID

from app.core.exceptions import InvalidAmount, InvalidSplit


class SplitAllocator:
    """Splits a total equally without losing minor units to rounding"""

    @staticmethod
    def allocate(total_minor: int, participant_ids: Sequence[UUID]) -> Dict[UUID, int]:
        """
        Split a total among participants in the given order.

        Every participant gets ``total // N`` minor units; the first
        ``total % N`` participants get one extra unit so the shares sum
        exactly to the total.

        Args:
            total_minor: Total amount in minor units
            participant_ids: Ordered, unique participant IDs

        Returns:
            Mapping participant ID -> share in minor units, in split order

        Raises:
            InvalidAmount: If total is not a positive integer
            InvalidSplit: If participant list is empty or has duplicates
        """
        if isinstance(total_minor, bool) or not isinstance(total_minor, int):
            raise InvalidAmount(
                f"Total must be an integer number of minor units, got {total_minor!r}"
            )
        if total_minor <= 0:
            raise InvalidAmount(f"Total must be positive, got {total_minor}")

        if not participant_ids:
            raise InvalidSplit("At least one participant is required to split")

        if len(set(participant_ids)) != len(participant_ids):
            seen = set()
            duplicates = []
            for participant_id in participant_ids:
                if participant_id in seen:
                    duplicates.append(str(participant_id))
                seen.add(participant_id)
            raise InvalidSplit(
                "Participants to split contain duplicates",
                details={"duplicates": duplicates},
            )

        count = len(participant_ids)
        base, remainder = divmod(total_minor, count)

        shares: Dict[UUID, int] = {}
        for index, participant_id in enumerate(participant_ids):
            shares[participant_id] = base + 1 if index < remainder else base

        return shares
