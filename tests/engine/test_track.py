import pytest
from tests.test_utils import build_test_track

from boostrace.core.errors import InvalidTrack
from boostrace.engine.track import TRACK_DEFINITIONS, Sector, Track


@pytest.mark.parametrize("name", list(TRACK_DEFINITIONS))
def test_builtin_tracks_are_valid(name):
    track = TRACK_DEFINITIONS[name]()

    assert track.name == name
    assert track.sectors[0].unbounded
    assert track.sectors[-1].unbounded
    assert [s.id for s in track.sectors] == list(range(track.length))


def test_inverted_sector_bounds_rejected():
    with pytest.raises(InvalidTrack):
        Sector(0, "Broken", 20, 10)


def test_track_requires_unbounded_ends():
    with pytest.raises(InvalidTrack):
        Track(
            name="Capped",
            sectors=(
                Sector(0, "Start", 0, 10, 2, "Start"),
                Sector(1, "Finish", 10, 20, None, "Finish"),
            ),
        )
    with pytest.raises(InvalidTrack):
        Track(name="Empty", sectors=())


def test_visible_window_wraps_around_the_track():
    track = TRACK_DEFINITIONS["Oval"]()

    assert track.visible_indices(0) == [4, 5, 0, 1, 2]
    assert track.visible_indices(3) == [1, 2, 3, 4, 5]
    assert track.visible_indices(5) == [3, 4, 5, 0, 1]


def test_visible_window_lists_each_sector_once_on_short_tracks():
    track = build_test_track()

    indices = track.visible_indices(0)

    assert sorted(indices) == [0, 1, 2, 3]
    assert indices[0] == 2


def test_lap_pattern_cycles_by_lap_number():
    track = build_test_track(lap_pattern=("Straight", "Curve", "Curve"))

    laps = [track.lap_characteristic(lap, seed=0) for lap in range(1, 8)]

    assert laps == ["Straight", "Curve", "Curve", "Straight", "Curve", "Curve", "Straight"]


def test_seeded_lap_characteristic_is_reproducible():
    track = TRACK_DEFINITIONS["Oval"]()

    first = [track.lap_characteristic(lap, seed=7) for lap in range(1, 20)]
    second = [track.lap_characteristic(lap, seed=7) for lap in range(1, 20)]

    assert first == second
    assert set(first) <= {"Straight", "Curve"}
