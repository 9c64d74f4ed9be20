from __future__ import annotations

from typing import TYPE_CHECKING

from boostrace.core.results import StandingEntry

if TYPE_CHECKING:
    from collections.abc import Sequence

    from boostrace.core.results import ParticipantMovement
    from boostrace.core.state import Race, RaceParticipant
    from boostrace.core.types import LapCharacteristic
    from boostrace.engine.race_engine import RaceEngine


def rank_sectors(race: Race) -> None:
    """Re-rank standings inside every sector by total value (best first)."""
    by_sector: dict[int, list[RaceParticipant]] = {}
    for p in race.active_participants:
        by_sector.setdefault(p.current_sector, []).append(p)

    for members in by_sector.values():
        # sorted() is stable, ties keep join order
        for position, p in enumerate(
            sorted(members, key=lambda m: m.total_value, reverse=True),
        ):
            p.position_in_sector = position


def classification_key(p: RaceParticipant) -> tuple[int, int, int, int, int]:
    if p.finish_position is not None:
        return (0, p.finish_position, 0, 0, 0)
    return (1, -p.current_lap, -p.current_sector, p.position_in_sector, -p.total_value)


def standings(race: Race) -> list[RaceParticipant]:
    return sorted(race.participants, key=classification_key)


def assign_finish_positions(
    engine: RaceEngine,
    finishers: Sequence[RaceParticipant],
    movements: Sequence[ParticipantMovement],
) -> None:
    """Rank participants who completed the race this lap.

    Several finishers on the same lap are ordered by that lap's final value,
    then by accumulated value, then by join order.
    """
    if not finishers:
        return
    final_values = {m.participant_id: m.final_value for m in movements}
    ordered = sorted(
        finishers,
        key=lambda p: (final_values[p.participant_id], p.total_value),
        reverse=True,
    )
    for p in ordered:
        p.is_finished = True
        p.finish_position = engine.state.next_finish_position
        engine.log_info(f"!!! {p.participant_id} FINISHED rank {p.finish_position} !!!")


def advance_lap(engine: RaceEngine) -> LapCharacteristic | None:
    """Move the race to its next lap, or end it. Returns the new lap's characteristic."""
    race = engine.state
    race.current_lap += 1

    if race.current_lap > race.total_laps or not race.active_participants:
        finish_race(engine)
        return None

    race.lap_characteristic = race.track.lap_characteristic(race.current_lap, race.seed)
    race.turn_phase = "WaitingForPlayers"
    engine.log_context.start_lap_log(race.current_lap)
    engine.log_info(
        f"=== START LAP {race.current_lap}/{race.total_laps}: {race.lap_characteristic} ===",
    )
    return race.lap_characteristic


def finish_race(engine: RaceEngine) -> None:
    race = engine.state
    race.status = "Finished"
    race.turn_phase = "Complete"

    # Classify whoever did not cross the line behind those who did
    for p in standings(race):
        if p.finish_position is None:
            p.finish_position = race.next_finish_position

    log_final_standings(engine)


def sector_positions(race: Race) -> dict[int, list[StandingEntry]]:
    positions: dict[int, list[StandingEntry]] = {}
    for idx in range(race.track.length):
        members = race.participants_in_sector(idx)
        if members:
            positions[idx] = [
                StandingEntry(
                    participant_id=p.participant_id,
                    position_in_sector=p.position_in_sector,
                    total_value=p.total_value,
                    current_lap=p.current_lap,
                )
                for p in members
            ]
    return positions


def log_final_standings(engine: RaceEngine) -> None:
    if not engine.verbose:
        return
    engine.log_info("=== FINAL STANDINGS ===")
    for p in standings(engine.state):
        status = "Finished" if p.is_finished else "Classified"
        engine.log_info(
            f"Result: {p.participant_id} rank={p.finish_position} lap={p.current_lap} "
            f"sector={p.current_sector} value={p.total_value} {status}",
        )
