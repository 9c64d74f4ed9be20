from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from boostrace.core.state import Race
    from boostrace.core.types import CarStats


class RaceRepository(Protocol):
    """Persistence for race aggregates. `load` raises `RaceNotFound`."""

    def load(self, race_id: str) -> Race: ...

    def save(self, race: Race) -> None: ...

    def exists(self, race_id: str) -> bool: ...


class StatsProvider(Protocol):
    """Looks up validated car/pilot stats for a participant."""

    def validated_stats(self, participant_id: str) -> CarStats: ...
