"""Read models returned to callers of the engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from boostrace.analysis.history import CycleSummary
    from boostrace.core.boost_hand import BoostUsage
    from boostrace.core.state import BoostUsageRecord, LapPerformanceRecord
    from boostrace.core.types import (
        LapCharacteristic,
        MovementClass,
        MovementType,
        RaceStatus,
        TurnPhase,
    )
    from boostrace.engine.performance import PerformanceResult
    from boostrace.engine.track import Sector


@dataclass(frozen=True, slots=True)
class PendingPreview:
    participant_id: str
    lap: int
    lap_characteristic: LapCharacteristic
    performance: PerformanceResult
    usage: BoostUsage
    turn_phase: TurnPhase
    # Set when the submission completed the lap and it was resolved right away
    lap_result: LapResult | None = None


@dataclass(frozen=True, slots=True)
class ParticipantMovement:
    participant_id: str
    from_sector: int
    to_sector: int
    final_value: int
    boost_value: int
    movement: MovementType


@dataclass(frozen=True, slots=True)
class StandingEntry:
    participant_id: str
    position_in_sector: int
    total_value: int
    current_lap: int


@dataclass(frozen=True, slots=True)
class LapResult:
    lap: int
    lap_characteristic: LapCharacteristic
    next_lap_characteristic: LapCharacteristic | None
    movements: list[ParticipantMovement]
    sector_positions: dict[int, list[StandingEntry]]
    race_status: RaceStatus

    def movement_of(self, participant_id: str) -> ParticipantMovement:
        return next(m for m in self.movements if m.participant_id == participant_id)


@dataclass(frozen=True, slots=True)
class TurnPhaseInfo:
    phase: TurnPhase
    current_lap: int
    total_laps: int
    lap_characteristic: LapCharacteristic
    submitted_participants: list[str]
    pending_participants: list[str]


@dataclass(frozen=True, slots=True)
class VisibleSector:
    index: int
    sector: Sector
    occupancy: int
    capacity: int | None
    available_slots: int | None


@dataclass(frozen=True, slots=True)
class VisibleParticipant:
    participant_id: str
    sector_index: int
    position_in_sector: int
    current_lap: int
    total_value: int
    is_self: bool


@dataclass(frozen=True, slots=True)
class LocalView:
    center_sector: int
    visible_sectors: list[VisibleSector]
    visible_participants: list[VisibleParticipant]


@dataclass(frozen=True, slots=True)
class CycleInfo:
    current_cycle: int
    cycles_completed: int
    cards_remaining: int
    next_replenishment_at: int | None


@dataclass(frozen=True, slots=True)
class BoostImpactOption:
    boost_value: int
    is_available: bool
    predicted_final_value: int
    predicted_movement: MovementClass


@dataclass(frozen=True, slots=True)
class BoostAvailability:
    available_cards: list[int]
    hand_state: dict[int, bool]
    cycle_info: CycleInfo
    boost_impact_preview: list[BoostImpactOption] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class LapHistory:
    lap_records: list[BoostUsageRecord]
    performance_records: list[LapPerformanceRecord]
    cycle_summaries: list[CycleSummary]
