from dataclasses import dataclass

from boostrace.core.results import LapResult, PendingPreview
from boostrace.core.state import LogContext, Race, RaceParticipant
from boostrace.core.types import CarStats, LapCharacteristic
from boostrace.engine.race_engine import RaceEngine
from boostrace.engine.track import Sector, Track


def build_test_track(lap_pattern: tuple[LapCharacteristic, ...] = ("Straight",)) -> Track:
    """Small four-sector track with overlapping value bands."""
    return Track(
        name="Test",
        sectors=(
            Sector(0, "Start", 0, 10, None, "Start"),
            Sector(1, "Straight", 8, 15, 3, "Straight"),
            Sector(2, "Curve", 12, 20, 2, "Curve"),
            Sector(3, "Finish", 18, 25, None, "Finish"),
        ),
        lap_pattern=lap_pattern,
    )


def flat_stats(straight: int, curve: int | None = None) -> CarStats:
    """Stats whose base value is exactly `straight` (and `curve`)."""
    curve = straight if curve is None else curve
    return CarStats(
        engine_straight=straight,
        engine_curve=curve,
        body_straight=0,
        body_curve=0,
        pilot_straight=0,
        pilot_curve=0,
    )


@dataclass
class CarConfig:
    participant_id: str
    stats: CarStats
    start_sector: int = 0


class RaceScenario:
    """
    A reusable harness that wraps the RaceEngine for testing.
    """

    def __init__(
        self,
        cars: list[CarConfig],
        total_laps: int = 3,
        track: Track | None = None,
        start: bool = True,
    ):
        self.track: Track = track or build_test_track()
        self.state: Race = Race.create("test-race", "Test Race", self.track, total_laps)
        self.engine: RaceEngine = RaceEngine(self.state, log_context=LogContext())
        self.stats: dict[str, CarStats] = {}

        for cfg in cars:
            self.add(cfg)

        if start:
            self.engine.start()

    def add(self, cfg: CarConfig) -> RaceParticipant:
        self.stats[cfg.participant_id] = cfg.stats
        return self.engine.add_participant(
            cfg.participant_id,
            car_ref=f"car-{cfg.participant_id}",
            pilot_ref=f"pilot-{cfg.participant_id}",
            starting_sector=cfg.start_sector,
        )

    def submit(self, participant_id: str, boost_value: int) -> PendingPreview:
        return self.engine.submit_action(
            participant_id,
            boost_value,
            self.stats[participant_id],
        )

    def run_lap(self, boosts: dict[str, int]) -> LapResult:
        """Submit every given boost, then resolve the lap."""
        for participant_id, boost_value in boosts.items():
            self.submit(participant_id, boost_value)
        return self.engine.process_turn()

    def get(self, participant_id: str) -> RaceParticipant:
        return self.state.get_participant(participant_id)
