"""Read-only projections of a race for a single participant."""

from __future__ import annotations

from typing import TYPE_CHECKING

from boostrace.core.results import (
    BoostAvailability,
    BoostImpactOption,
    CycleInfo,
    LapHistory,
    LocalView,
    TurnPhaseInfo,
    VisibleParticipant,
    VisibleSector,
)
from boostrace.core.types import BOOST_VALUES
from boostrace.engine.performance import calculate_performance

if TYPE_CHECKING:
    from boostrace.core.state import Race
    from boostrace.core.types import CarStats


def turn_phase_info(race: Race) -> TurnPhaseInfo:
    return TurnPhaseInfo(
        phase=race.turn_phase,
        current_lap=race.current_lap,
        total_laps=race.total_laps,
        lap_characteristic=race.lap_characteristic,
        submitted_participants=race.submitted_participants,
        pending_participants=race.pending_participants,
    )


def local_view(race: Race, participant_id: str) -> LocalView:
    participant = race.get_participant(participant_id)
    center = participant.current_sector
    indices = race.track.visible_indices(center)

    sectors: list[VisibleSector] = []
    visible: list[VisibleParticipant] = []
    for idx in indices:
        sector = race.track.sector(idx)
        occupants = race.participants_in_sector(idx)
        capacity = sector.slot_capacity
        sectors.append(
            VisibleSector(
                index=idx,
                sector=sector,
                occupancy=len(occupants),
                capacity=capacity,
                available_slots=None if capacity is None else max(capacity - len(occupants), 0),
            ),
        )
        visible.extend(
            VisibleParticipant(
                participant_id=p.participant_id,
                sector_index=idx,
                position_in_sector=p.position_in_sector,
                current_lap=p.current_lap,
                total_value=p.total_value,
                is_self=p.participant_id == participant_id,
            )
            for p in occupants
        )

    return LocalView(
        center_sector=center,
        visible_sectors=sectors,
        visible_participants=visible,
    )


def boost_availability(
    race: Race,
    participant_id: str,
    stats: CarStats | None = None,
) -> BoostAvailability:
    """Hand state plus, when stats are known, what every card would do this lap."""
    participant = race.get_participant(participant_id)
    hand = participant.boost_hand

    preview: list[BoostImpactOption] = []
    if stats is not None:
        sector = race.track.sector(participant.current_sector)
        for value in BOOST_VALUES:
            perf = calculate_performance(stats, race.lap_characteristic, sector, value)
            preview.append(
                BoostImpactOption(
                    boost_value=value,
                    is_available=hand.is_available(value),
                    predicted_final_value=perf.final_value,
                    predicted_movement=perf.movement,
                ),
            )

    return BoostAvailability(
        available_cards=hand.get_available_cards(),
        hand_state=hand.hand_state,
        cycle_info=CycleInfo(
            current_cycle=hand.current_cycle,
            cycles_completed=hand.cycles_completed,
            cards_remaining=hand.cards_remaining,
            next_replenishment_at=hand.cards_remaining if hand.cards_remaining > 0 else None,
        ),
        boost_impact_preview=preview,
    )


def lap_history(race: Race, participant_id: str) -> LapHistory:
    participant = race.get_participant(participant_id)
    return LapHistory(
        lap_records=list(participant.usage_history),
        performance_records=list(participant.lap_history),
        cycle_summaries=participant.cycle_summaries(),
    )
