from __future__ import annotations

from typing import TYPE_CHECKING

from boostrace.core.errors import ParticipantNotFound

if TYPE_CHECKING:
    from collections.abc import Mapping

    from boostrace.core.types import CarStats


class StaticStatsProvider:
    """Stats from a fixed mapping, e.g. generated for a simulation run."""

    def __init__(self, stats: Mapping[str, CarStats] | None = None) -> None:
        self._stats: dict[str, CarStats] = dict(stats or {})

    def register(self, participant_id: str, stats: CarStats) -> None:
        self._stats[participant_id] = stats

    def validated_stats(self, participant_id: str) -> CarStats:
        try:
            return self._stats[participant_id]
        except KeyError:
            raise ParticipantNotFound(participant_id) from None
