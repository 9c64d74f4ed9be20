from __future__ import annotations

from typing import TYPE_CHECKING

from boostrace.core.results import ParticipantMovement
from boostrace.core.state import BoostUsageRecord, LapPerformanceRecord

if TYPE_CHECKING:
    from boostrace.core.state import PendingResult, RaceParticipant
    from boostrace.core.types import MovementType
    from boostrace.engine.race_engine import RaceEngine


def resolve_movement(
    engine: RaceEngine,
    participant: RaceParticipant,
    pending: PendingResult,
) -> ParticipantMovement:
    """Apply one participant's cached result for the lap being resolved.

    Moves are exactly one sector. Leaving the last sector upwards crosses
    the finish line; leaving the first sector downwards crosses it backwards,
    except on lap 1 where nobody can fall behind the start.
    """
    race = engine.state
    track = race.track
    perf = pending.performance
    from_sector = participant.current_sector
    to_sector = from_sector
    movement: MovementType

    match perf.movement:
        case "MoveUp":
            if from_sector == track.finish_index:
                participant.current_lap += 1
                if participant.current_lap > race.total_laps:
                    movement = "FinishedRace"
                else:
                    movement = "FinishedLap"
                    to_sector = track.wrap(from_sector + 1)
            else:
                movement = "MovedUp"
                to_sector = from_sector + 1
        case "MoveDown":
            if from_sector == 0 and participant.current_lap == 1:
                movement = "StayedInSector"
            else:
                if from_sector == 0:
                    participant.current_lap -= 1
                movement = "MovedDown"
                to_sector = track.wrap(from_sector - 1)
        case _:
            movement = "StayedInSector"

    participant.current_sector = to_sector
    participant.total_value += perf.final_value

    usage = pending.usage
    participant.usage_history.append(
        BoostUsageRecord(
            lap_number=race.current_lap,
            boost_value=pending.boost_value,
            cycle_number=usage.cycle_number,
            cards_remaining_after=usage.cards_remaining,
            replenishment_occurred=usage.replenishment_occurred,
        ),
    )
    participant.lap_history.append(
        LapPerformanceRecord(
            lap_number=race.current_lap,
            boost_used=pending.boost_value,
            final_value=perf.final_value,
            movement=movement,
            from_sector=from_sector,
            to_sector=to_sector,
        ),
    )

    engine.log_info(
        f"{participant.participant_id} Boost {pending.boost_value} -> {perf.final_value} "
        f"(base {perf.base_value}, cap {perf.sector_ceiling}) {perf.movement}: "
        f"S{from_sector} -> S{to_sector} ({movement})",
    )
    if usage.replenishment_occurred:
        engine.log_info(
            f"{participant.participant_id} hand Replenished, cycle {usage.current_cycle}",
        )

    return ParticipantMovement(
        participant_id=participant.participant_id,
        from_sector=from_sector,
        to_sector=to_sector,
        final_value=perf.final_value,
        boost_value=pending.boost_value,
        movement=movement,
    )
