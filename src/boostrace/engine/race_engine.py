from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, NoReturn

from boostrace.core import LOGGER_NAME
from boostrace.core.errors import (
    DuplicateParticipant,
    DuplicateSubmission,
    NoParticipants,
    ParticipantAlreadyFinished,
    RaceConsistencyError,
    RaceNotInProgress,
    RegistrationClosed,
    TurnNotReady,
)
from boostrace.core.results import LapResult, PendingPreview
from boostrace.core.state import LogContext, PendingResult, RaceParticipant
from boostrace.engine import views
from boostrace.engine.flow import (
    advance_lap,
    assign_finish_positions,
    rank_sectors,
    sector_positions,
    standings,
)
from boostrace.engine.logging import ContextFilter
from boostrace.engine.movement import resolve_movement
from boostrace.engine.performance import calculate_performance

if TYPE_CHECKING:
    from boostrace.core.results import (
        BoostAvailability,
        LapHistory,
        LocalView,
        ParticipantMovement,
        TurnPhaseInfo,
    )
    from boostrace.core.state import Race
    from boostrace.core.types import CarStats


@dataclass
class RaceEngine:
    """Turn-phase state machine around one race aggregate.

    Callers must hold the race's lock for the lifetime of the engine;
    `RaceService` takes care of that.
    """

    state: Race
    log_context: LogContext = field(default_factory=LogContext)
    verbose: bool = True
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        base = logging.getLogger(LOGGER_NAME)
        self._logger = base.getChild(f"race.{self.state.race_id}")
        self.log_context.race_id = self.state.race_id
        self.log_context.start_lap_log(self.state.current_lap)

        # One engine at a time per race: drop the filter of the previous engine
        for f in list(self._logger.filters):
            if isinstance(f, ContextFilter):
                self._logger.removeFilter(f)
        if self.verbose:
            self._logger.addFilter(ContextFilter(self))

    # --- Lifecycle ---
    def add_participant(
        self,
        participant_id: str,
        car_ref: str,
        pilot_ref: str,
        starting_sector: int | None = None,
    ) -> RaceParticipant:
        race = self.state
        if race.status != "Waiting":
            raise RegistrationClosed(race.status)
        if race.has_participant(participant_id):
            raise DuplicateParticipant(participant_id)

        if starting_sector is None:
            starting_sector = self._qualification_sector(participant_id)
        elif not 0 <= starting_sector < race.track.length:
            msg = f"Starting sector {starting_sector} outside track of {race.track.length} sectors"
            raise ValueError(msg)

        participant = RaceParticipant(
            participant_id=participant_id,
            car_ref=car_ref,
            pilot_ref=pilot_ref,
            current_sector=starting_sector,
        )
        race.participants.append(participant)
        rank_sectors(race)
        self.log_info(f"{participant_id} joined, qualified in S{starting_sector}")
        return participant

    def _qualification_sector(self, participant_id: str) -> int:
        rng = random.Random(f"{self.state.seed}:qualify:{participant_id}")
        return rng.randrange(self.state.track.length)

    def start(self) -> None:
        race = self.state
        if race.status != "Waiting":
            raise RegistrationClosed(race.status)
        if not race.participants:
            raise NoParticipants()

        race.status = "InProgress"
        race.current_lap = 1
        race.lap_characteristic = race.track.lap_characteristic(1, race.seed)
        race.turn_phase = "WaitingForPlayers"
        race.pending_actions.clear()
        race.pending_results.clear()
        rank_sectors(race)

        self.log_context.start_lap_log(race.current_lap)
        self.log_info(
            f"=== START RACE {race.name} on {race.track.name}: "
            f"{len(race.participants)} cars, {race.total_laps} laps ===",
        )
        self.log_info(f"=== START LAP 1/{race.total_laps}: {race.lap_characteristic} ===")

    def cancel(self) -> None:
        race = self.state
        if race.status in ("Finished", "Cancelled"):
            raise RaceNotInProgress(race.status)
        race.status = "Cancelled"
        race.turn_phase = "Complete"
        race.pending_actions.clear()
        race.pending_results.clear()
        self.log_warning(f"!!! Race {race.race_id} cancelled !!!")

    # --- Turn ---
    def submit_action(
        self,
        participant_id: str,
        boost_value: int,
        stats: CarStats,
    ) -> PendingPreview:
        """Accept one participant's boost choice for the current lap.

        The card is consumed and the lap result computed immediately; the
        participant only moves when the lap is processed.
        """
        race = self.state
        if race.status != "InProgress":
            raise RaceNotInProgress(race.status)
        participant = race.get_participant(participant_id)
        if participant.is_finished:
            raise ParticipantAlreadyFinished(participant_id, participant.finish_position)
        if participant_id in race.pending_actions:
            raise DuplicateSubmission(participant_id, race.current_lap)
        if race.turn_phase != "WaitingForPlayers":
            self._fail_consistency(
                f"{participant_id} has no pending action but phase is {race.turn_phase}",
            )

        sector = race.track.sector(participant.current_sector)
        usage = participant.boost_hand.use_card(boost_value)
        performance = calculate_performance(
            stats,
            race.lap_characteristic,
            sector,
            boost_value,
        )
        race.pending_actions[participant_id] = boost_value
        race.pending_results[participant_id] = PendingResult(
            boost_value=boost_value,
            usage=usage,
            performance=performance,
        )

        self.log_context.set_participant(participant_id)
        self.log_info(
            f"{participant_id} submitted Boost {boost_value} "
            f"({usage.cards_remaining} cards left, cycle {usage.current_cycle})",
        )

        if race.all_submitted():
            race.turn_phase = "AllSubmitted"
            self.log_info(f"All cars submitted for lap {race.current_lap}")

        return PendingPreview(
            participant_id=participant_id,
            lap=race.current_lap,
            lap_characteristic=race.lap_characteristic,
            performance=performance,
            usage=usage,
            turn_phase=race.turn_phase,
        )

    def process_turn(self) -> LapResult:
        """Resolve the lap once every active participant has submitted."""
        race = self.state
        if race.status != "InProgress":
            raise RaceNotInProgress(race.status)
        if race.turn_phase != "AllSubmitted" or not race.all_submitted():
            raise TurnNotReady(race.turn_phase, race.pending_participants)

        self._verify_pending()

        lap = race.current_lap
        characteristic = race.lap_characteristic
        self.log_context.start_lap_log(lap)
        race.turn_phase = "Processing"
        self.log_info(f"=== RESOLVE LAP {lap}/{race.total_laps}: {characteristic} ===")

        movements: list[ParticipantMovement] = []
        finishers: list[RaceParticipant] = []
        # Join order keeps resolution independent of submission order
        for participant in race.participants:
            pending = race.pending_results.get(participant.participant_id)
            if pending is None:
                continue
            self.log_context.set_participant(participant.participant_id)
            movement = resolve_movement(self, participant, pending)
            movements.append(movement)
            if movement.movement == "FinishedRace":
                finishers.append(participant)

        assign_finish_positions(self, finishers, movements)
        rank_sectors(race)

        race.pending_actions.clear()
        race.pending_results.clear()
        race.turn_phase = "Complete"
        next_characteristic = advance_lap(self)

        return LapResult(
            lap=lap,
            lap_characteristic=characteristic,
            next_lap_characteristic=next_characteristic,
            movements=movements,
            sector_positions=sector_positions(race),
            race_status=race.status,
        )

    def _verify_pending(self) -> None:
        race = self.state
        if set(race.pending_actions) != set(race.pending_results):
            self._fail_consistency(
                f"pending actions {sorted(race.pending_actions)} do not match "
                f"cached results {sorted(race.pending_results)}",
            )
        for pid, boost_value in race.pending_actions.items():
            if not race.has_participant(pid):
                self._fail_consistency(f"pending action for unknown participant {pid}")
            participant = race.get_participant(pid)
            if participant.is_finished:
                self._fail_consistency(f"finished participant {pid} has a pending action")
            if race.pending_results[pid].boost_value != boost_value:
                self._fail_consistency(
                    f"cached result for {pid} was computed for boost "
                    f"{race.pending_results[pid].boost_value}, action is {boost_value}",
                )
            if not participant.boost_hand.is_consistent():
                self._fail_consistency(f"boost hand of {pid} is inconsistent")

    def _fail_consistency(self, msg: str) -> NoReturn:
        self.log_error(f"!!! Consistency violation in race {self.state.race_id}: {msg}")
        raise RaceConsistencyError(msg)

    # --- Queries ---
    def get_turn_phase(self) -> TurnPhaseInfo:
        return views.turn_phase_info(self.state)

    def get_local_view(self, participant_id: str) -> LocalView:
        return views.local_view(self.state, participant_id)

    def get_boost_availability(
        self,
        participant_id: str,
        stats: CarStats | None = None,
    ) -> BoostAvailability:
        return views.boost_availability(self.state, participant_id, stats)

    def get_lap_history(self, participant_id: str) -> LapHistory:
        return views.lap_history(self.state, participant_id)

    def standings(self) -> list[RaceParticipant]:
        return standings(self.state)

    def overall_rank(self, participant_id: str) -> int:
        _ = self.state.get_participant(participant_id)
        order = [p.participant_id for p in standings(self.state)]
        return order.index(participant_id) + 1

    # -- Logging --
    def _log(self, level: int, msg: str, *args: Any, **kwargs: Any) -> None:
        """Core logging helper; respects engine verbosity."""
        if not self.verbose:
            return
        self._logger.log(level, msg, *args, **kwargs)

    def log_debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.DEBUG, msg, *args, **kwargs)

    def log_info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.INFO, msg, *args, **kwargs)

    def log_warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.WARNING, msg, *args, **kwargs)

    def log_error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        # Errors are never silenced by verbosity
        self._logger.log(logging.ERROR, msg, *args, **kwargs)
