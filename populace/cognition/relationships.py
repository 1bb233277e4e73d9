"""Pairwise affinity scores with exponential smoothing."""

from __future__ import annotations

import math
from typing import Dict

from populace.errors import InvalidArgument
from populace.schemas import MAX_SCORE, MIN_SCORE, NEUTRAL_SCORE, clamp_score


SMOOTHING_ALPHA = 0.2
"""Weight of the newest interaction; the previous score keeps 1 - alpha."""


class RelationshipTable:
    """One agent's affinity toward others, each in [0, 10].

    Unknown targets read as neutral (5). Entries are only ever updated.
    """

    def __init__(self) -> None:
        self._scores: Dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._scores)

    def __contains__(self, target_id: str) -> bool:
        return target_id in self._scores

    def score(self, target_id: str) -> float:
        return self._scores.get(target_id, NEUTRAL_SCORE)

    def update(self, target_id: str, interaction_quality: float) -> float:
        """Blend one interaction into the stored affinity.

        ``new = clamp(current * 0.8 + quality * 0.2)``

        Returns:
            The new score

        Raises:
            InvalidArgument: If quality is outside [0, 10]
        """
        if not (
            isinstance(interaction_quality, (int, float))
            and math.isfinite(interaction_quality)
            and MIN_SCORE <= interaction_quality <= MAX_SCORE
        ):
            raise InvalidArgument(
                f"interaction_quality must be within [0, 10], got {interaction_quality!r}"
            )

        current = self.score(target_id)
        new_score = clamp_score(
            current * (1 - SMOOTHING_ALPHA) + interaction_quality * SMOOTHING_ALPHA
        )
        self._scores[target_id] = new_score
        return new_score

    def snapshot(self) -> Dict[str, float]:
        return dict(self._scores)


__all__ = ["RelationshipTable", "SMOOTHING_ALPHA"]
