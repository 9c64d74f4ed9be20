from __future__ import annotations

from dataclasses import dataclass, field

from boostrace.analysis.history import CycleSummary, summarize_cycles
from boostrace.core.boost_hand import BoostHand, BoostUsage
from boostrace.core.errors import ParticipantNotFound
from boostrace.core.types import (  # noqa: TC001 # msgspec resolves at runtime
    LapCharacteristic,
    MovementType,
    RaceStatus,
    TurnPhase,
)
from boostrace.engine.performance import PerformanceResult
from boostrace.engine.track import Track


@dataclass(frozen=True, slots=True)
class BoostUsageRecord:
    lap_number: int
    boost_value: int
    cycle_number: int
    cards_remaining_after: int
    replenishment_occurred: bool


@dataclass(frozen=True, slots=True)
class LapPerformanceRecord:
    lap_number: int
    boost_used: int
    final_value: int
    movement: MovementType
    from_sector: int
    to_sector: int


@dataclass(slots=True)
class RaceParticipant:
    participant_id: str
    car_ref: str
    pilot_ref: str
    current_sector: int = 0
    position_in_sector: int = 0
    current_lap: int = 1
    total_value: int = 0
    is_finished: bool = False
    finish_position: int | None = None
    boost_hand: BoostHand = field(default_factory=BoostHand)
    usage_history: list[BoostUsageRecord] = field(default_factory=list)
    lap_history: list[LapPerformanceRecord] = field(default_factory=list)

    @property
    def repr(self) -> str:
        return f"{self.participant_id}@S{self.current_sector}"

    @property
    def active(self) -> bool:
        return not self.is_finished

    def cycle_summaries(self) -> list[CycleSummary]:
        return summarize_cycles(self.usage_history)


@dataclass(frozen=True, slots=True)
class PendingResult:
    """Everything computed when an action was accepted, applied verbatim later."""

    boost_value: int
    usage: BoostUsage
    performance: PerformanceResult


@dataclass(slots=True)
class Race:
    """The race aggregate. Only `RaceEngine` mutates it."""

    race_id: str
    name: str
    track: Track
    total_laps: int
    seed: int = 0
    participants: list[RaceParticipant] = field(default_factory=list)
    current_lap: int = 1
    lap_characteristic: LapCharacteristic = "Straight"
    status: RaceStatus = "Waiting"
    turn_phase: TurnPhase = "WaitingForPlayers"
    pending_actions: dict[str, int] = field(default_factory=dict)
    pending_results: dict[str, PendingResult] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        race_id: str,
        name: str,
        track: Track,
        total_laps: int,
        seed: int = 0,
    ) -> Race:
        return cls(
            race_id=race_id,
            name=name,
            track=track,
            total_laps=total_laps,
            seed=seed,
            lap_characteristic=track.lap_characteristic(1, seed),
        )

    def get_participant(self, participant_id: str) -> RaceParticipant:
        for p in self.participants:
            if p.participant_id == participant_id:
                return p
        raise ParticipantNotFound(participant_id)

    def has_participant(self, participant_id: str) -> bool:
        return any(p.participant_id == participant_id for p in self.participants)

    @property
    def active_participants(self) -> list[RaceParticipant]:
        return [p for p in self.participants if p.active]

    @property
    def submitted_participants(self) -> list[str]:
        return [
            p.participant_id
            for p in self.participants
            if p.participant_id in self.pending_actions
        ]

    @property
    def pending_participants(self) -> list[str]:
        return [
            p.participant_id
            for p in self.active_participants
            if p.participant_id not in self.pending_actions
        ]

    def all_submitted(self) -> bool:
        """Every non-finished participant has exactly one pending action."""
        return all(p.participant_id in self.pending_actions for p in self.active_participants)

    def participants_in_sector(self, sector_index: int) -> list[RaceParticipant]:
        """Active participants in a sector, best standing first."""
        return sorted(
            (p for p in self.active_participants if p.current_sector == sector_index),
            key=lambda p: p.position_in_sector,
        )

    @property
    def next_finish_position(self) -> int:
        return sum(1 for p in self.participants if p.finish_position is not None) + 1


@dataclass(slots=True)
class LogContext:
    """Per-race logging state."""

    race_id: str = "_"
    current_lap: int = 0
    current_participant: str = "_"
    lap_log_count: int = 0

    def start_lap_log(self, lap: int) -> None:
        self.current_lap = lap
        self.lap_log_count = 0
        self.current_participant = "_"

    def set_participant(self, participant_id: str) -> None:
        self.current_participant = participant_id

    def inc_log_count(self) -> None:
        self.lap_log_count += 1
