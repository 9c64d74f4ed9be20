"""Core simulation execution logic."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from boostrace.ai.baseline_agent import BaselineAgent
from boostrace.core.agent import BoostDecisionContext
from boostrace.service import RaceService
from boostrace.simulation.repository import InMemoryRaceRepository
from boostrace.simulation.stats import StaticStatsProvider

if TYPE_CHECKING:
    from collections.abc import Mapping

    from boostrace.core.agent import Agent
    from boostrace.core.state import Race
    from boostrace.simulation.config import RaceSetup


@dataclass(slots=True)
class SimulationResult:
    """Result of a single race simulation."""

    config_hash: str
    race: Race
    execution_time_ms: float
    laps_run: int


def run_race(
    setup: RaceSetup,
    agents: Mapping[str, Agent] | None = None,
    *,
    verbose: bool = True,
) -> SimulationResult:
    """
    Execute one race through the service, letting agents pick every boost.
    Participants without an agent play `BaselineAgent`.
    """
    start_time = time.perf_counter()
    config_hash = setup.compute_hash()
    race_id = config_hash[:12]

    stats = StaticStatsProvider({p.participant_id: p.stats for p in setup.participants})
    service = RaceService(InMemoryRaceRepository(), stats, verbose=verbose)
    service.create_race(
        race_id,
        name=f"{setup.track}-{setup.seed}",
        track=setup.build_track(),
        total_laps=setup.total_laps,
        seed=setup.seed,
    )
    for p in setup.participants:
        service.join(race_id, p.participant_id, p.car_ref, p.pilot_ref)
    service.start(race_id)

    default_agent = BaselineAgent()
    agents = agents or {}
    laps_run = 0

    while service.get_race(race_id).status == "InProgress":
        turn = service.get_turn_phase(race_id)
        for participant_id in turn.pending_participants:
            ctx = BoostDecisionContext(
                participant_id=participant_id,
                turn=turn,
                availability=service.get_boost_availability(race_id, participant_id),
                view=service.get_local_view(race_id, participant_id),
            )
            agent = agents.get(participant_id, default_agent)
            service.submit_action(race_id, participant_id, agent.choose_boost(ctx))
        service.process_turn(race_id)
        laps_run += 1

    return SimulationResult(
        config_hash=config_hash,
        race=service.get_race(race_id),
        execution_time_ms=(time.perf_counter() - start_time) * 1000,
        laps_run=laps_run,
    )
