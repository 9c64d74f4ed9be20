import threading

import pytest
from tests.test_utils import build_test_track, flat_stats

from boostrace.core.errors import InvalidBoostValue, RaceNotFound
from boostrace.core.types import CarStats
from boostrace.service import RaceService
from boostrace.simulation.repository import InMemoryRaceRepository, JsonFileRaceRepository
from boostrace.simulation.stats import StaticStatsProvider

CAR_IDS = [f"car-{i}" for i in range(8)]


def _service(repository=None, auto_process=False) -> RaceService:
    stats = StaticStatsProvider({pid: flat_stats(5) for pid in CAR_IDS})
    return RaceService(
        repository or InMemoryRaceRepository(),
        stats,
        auto_process=auto_process,
        verbose=False,
    )


def _open_race(service: RaceService, race_id: str = "r1", total_laps: int = 3) -> None:
    service.create_race(race_id, "Service Race", build_test_track(), total_laps)
    for pid in CAR_IDS:
        service.join(race_id, pid, f"{pid}-car", f"{pid}-pilot", starting_sector=0)
    service.start(race_id)


def test_concurrent_submissions_are_all_recorded():
    service = _service()
    _open_race(service)
    barrier = threading.Barrier(len(CAR_IDS))
    errors: list[BaseException] = []

    def submit(pid: str) -> None:
        barrier.wait()
        try:
            service.submit_action("r1", pid, 1)
        except Exception as e:  # noqa: BLE001
            errors.append(e)

    threads = [threading.Thread(target=submit, args=(pid,)) for pid in CAR_IDS]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    turn = service.get_turn_phase("r1")
    assert turn.phase == "AllSubmitted"
    assert sorted(turn.submitted_participants) == sorted(CAR_IDS)

    result = service.process_turn("r1")
    assert len(result.movements) == len(CAR_IDS)


def test_auto_process_resolves_on_last_submission():
    service = _service(auto_process=True)
    _open_race(service)
    barrier = threading.Barrier(len(CAR_IDS))
    previews = []
    lock = threading.Lock()

    def submit(pid: str) -> None:
        barrier.wait()
        preview = service.submit_action("r1", pid, 0)
        with lock:
            previews.append(preview)

    threads = [threading.Thread(target=submit, args=(pid,)) for pid in CAR_IDS]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    resolved = [p for p in previews if p.lap_result is not None]
    assert len(resolved) == 1
    assert resolved[0].lap_result.lap == 1
    assert service.get_turn_phase("r1").current_lap == 2
    assert service.get_turn_phase("r1").phase == "WaitingForPlayers"


def test_failed_operation_is_not_saved():
    service = _service()
    _open_race(service)

    with pytest.raises(InvalidBoostValue):
        service.submit_action("r1", "car-0", 8)

    race = service.get_race("r1")
    assert race.pending_actions == {}
    assert race.get_participant("car-0").boost_hand.cards_remaining == 5


def test_unknown_race_raises():
    service = _service()

    with pytest.raises(RaceNotFound) as exc_info:
        service.get_turn_phase("missing")

    assert exc_info.value.to_payload()["error_code"] == "RACE_NOT_FOUND"


def test_duplicate_race_id_rejected():
    service = _service()
    service.create_race("r1", "One", build_test_track(), 2)

    with pytest.raises(ValueError, match="already exists"):
        service.create_race("r1", "Two", build_test_track(), 2)


def test_boost_availability_uses_stats_provider():
    service = _service()
    _open_race(service)

    availability = service.get_boost_availability("r1", "car-3")

    assert len(availability.boost_impact_preview) == 5
    assert availability.boost_impact_preview[4].predicted_final_value == 9


def test_json_repository_round_trip(tmp_path):
    repository = JsonFileRaceRepository(tmp_path / "races")
    service = _service(repository)
    _open_race(service)
    for pid in CAR_IDS:
        service.submit_action("r1", pid, 3)
    service.process_turn("r1")
    service.submit_action("r1", "car-0", 4)

    assert (tmp_path / "races" / "r1.json").exists()

    race = repository.load("r1")
    assert race.current_lap == 2
    assert race.pending_actions == {"car-0": 4}
    assert race.pending_results["car-0"].performance.final_value == 9
    assert race.get_participant("car-1").boost_hand.get_available_cards() == [0, 1, 2, 4]
    assert race.track == build_test_track()
    assert [r.boost_value for r in race.get_participant("car-1").usage_history] == [3]

    history = service.get_lap_history("r1", "car-1")
    assert history.cycle_summaries[0].cards_used == [3]


def test_in_memory_repository_returns_copies():
    service = _service()
    _open_race(service)

    race = service.get_race("r1")
    race.pending_actions["car-0"] = 2

    assert service.get_race("r1").pending_actions == {}


@pytest.mark.parametrize("race_id", ["", ".", "..", "../escape", "a/b", "a\\b"])
def test_race_ids_that_are_not_file_names_are_rejected(tmp_path, race_id):
    repository = JsonFileRaceRepository(tmp_path / "races")
    service = _service(repository)

    with pytest.raises(ValueError, match="Invalid race id"):
        service.create_race(race_id, "Bad", build_test_track(), 2)
    with pytest.raises(ValueError, match="Invalid race id"):
        repository.load(race_id)

    assert list(tmp_path.rglob("*.json")) == []
    assert race_id not in service._locks


def test_cancelled_race_releases_its_lock():
    service = _service()
    _open_race(service)
    assert "r1" in service._locks

    service.cancel("r1")

    assert "r1" not in service._locks
    assert service.get_race("r1").status == "Cancelled"
    assert "r1" not in service._locks


def test_finished_race_releases_its_lock():
    service = _service()
    _open_race(service, total_laps=1)
    for pid in CAR_IDS:
        service.submit_action("r1", pid, 0)

    service.process_turn("r1")

    assert service.get_race("r1").status == "Finished"
    assert "r1" not in service._locks


def test_boost_availability_reads_stats_outside_the_race_lock():
    service = _service()
    _open_race(service)
    inner = service.stats_provider
    lock_held: list[bool] = []

    class RecordingStatsProvider:
        def validated_stats(self, participant_id: str) -> CarStats:
            lock_held.append(service._locks["r1"].locked())
            return inner.validated_stats(participant_id)

    service.stats_provider = RecordingStatsProvider()

    availability = service.get_boost_availability("r1", "car-3")

    assert lock_held == [False]
    assert len(availability.boost_impact_preview) == 5
