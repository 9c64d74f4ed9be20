"""Race operations keyed by race id, serialized per race."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import replace
from typing import TYPE_CHECKING

from boostrace.core import LOGGER_NAME
from boostrace.core.state import Race
from boostrace.engine.race_engine import RaceEngine
from boostrace.simulation.repository import check_race_id

if TYPE_CHECKING:
    from collections.abc import Iterator

    from boostrace.core.protocols import RaceRepository, StatsProvider
    from boostrace.core.results import (
        BoostAvailability,
        LapHistory,
        LapResult,
        LocalView,
        PendingPreview,
        TurnPhaseInfo,
    )
    from boostrace.core.state import RaceParticipant
    from boostrace.engine.track import Track

logger = logging.getLogger(f"{LOGGER_NAME}.service")

TERMINAL_STATUSES = ("Finished", "Cancelled")


class RaceService:
    """
    Wires the engine to its collaborators.

    Every operation runs under the race's lock: load, operate, save. A failed
    operation is never saved, so the stored race stays as it was.
    """

    def __init__(
        self,
        repository: RaceRepository,
        stats_provider: StatsProvider,
        *,
        auto_process: bool = False,
        verbose: bool = True,
    ) -> None:
        self.repository = repository
        self.stats_provider = stats_provider
        self.auto_process = auto_process
        self.verbose = verbose
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, race_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(race_id)
            if lock is None:
                lock = self._locks[race_id] = threading.Lock()
            return lock

    @contextmanager
    def _engine(self, race_id: str, *, save: bool = True) -> Iterator[RaceEngine]:
        with self._lock_for(race_id):
            engine = RaceEngine(self.repository.load(race_id), verbose=self.verbose)
            yield engine
            if save:
                self.repository.save(engine.state)
            if engine.state.status in TERMINAL_STATUSES:
                self._forget_lock(race_id)

    def _forget_lock(self, race_id: str) -> None:
        """Drop the lock of a race that can no longer change."""
        with self._registry_lock:
            self._locks.pop(race_id, None)

    # --- Lifecycle ---
    def create_race(
        self,
        race_id: str,
        name: str,
        track: Track,
        total_laps: int,
        seed: int = 0,
    ) -> Race:
        if total_laps < 1:
            msg = f"total_laps must be positive, got {total_laps}"
            raise ValueError(msg)
        check_race_id(race_id)
        with self._lock_for(race_id):
            if self.repository.exists(race_id):
                msg = f"Race {race_id} already exists"
                raise ValueError(msg)
            race = Race.create(race_id, name, track, total_laps, seed)
            self.repository.save(race)
        logger.info(f"Created race {race_id} on {track.name} ({total_laps} laps)")
        return race

    def join(
        self,
        race_id: str,
        participant_id: str,
        car_ref: str,
        pilot_ref: str,
        starting_sector: int | None = None,
    ) -> RaceParticipant:
        with self._engine(race_id) as engine:
            return engine.add_participant(participant_id, car_ref, pilot_ref, starting_sector)

    def start(self, race_id: str) -> None:
        with self._engine(race_id) as engine:
            engine.start()

    def cancel(self, race_id: str) -> None:
        with self._engine(race_id) as engine:
            engine.cancel()

    # --- Turn ---
    def submit_action(
        self,
        race_id: str,
        participant_id: str,
        boost_value: int,
    ) -> PendingPreview:
        # Stats lookup may hit an external service; keep it outside the lock
        stats = self.stats_provider.validated_stats(participant_id)
        with self._engine(race_id) as engine:
            preview = engine.submit_action(participant_id, boost_value, stats)
            if self.auto_process and engine.state.turn_phase == "AllSubmitted":
                preview = replace(preview, lap_result=engine.process_turn())
            return preview

    def process_turn(self, race_id: str) -> LapResult:
        with self._engine(race_id) as engine:
            return engine.process_turn()

    # --- Queries ---
    def get_race(self, race_id: str) -> Race:
        with self._engine(race_id, save=False) as engine:
            return engine.state

    def get_turn_phase(self, race_id: str) -> TurnPhaseInfo:
        with self._engine(race_id, save=False) as engine:
            return engine.get_turn_phase()

    def get_local_view(self, race_id: str, participant_id: str) -> LocalView:
        with self._engine(race_id, save=False) as engine:
            return engine.get_local_view(participant_id)

    def get_boost_availability(
        self,
        race_id: str,
        participant_id: str,
        *,
        with_preview: bool = True,
    ) -> BoostAvailability:
        stats = self.stats_provider.validated_stats(participant_id) if with_preview else None
        with self._engine(race_id, save=False) as engine:
            return engine.get_boost_availability(participant_id, stats)

    def get_lap_history(self, race_id: str, participant_id: str) -> LapHistory:
        with self._engine(race_id, save=False) as engine:
            return engine.get_lap_history(participant_id)

    def standings(self, race_id: str) -> list[RaceParticipant]:
        with self._engine(race_id, save=False) as engine:
            return engine.standings()
