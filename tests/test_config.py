import random

import cappa
import msgspec
import pytest

from boostrace.cli.converters import parse_lap_pattern, validate_track_name
from boostrace.simulation.config import (
    BatchConfig,
    ParticipantSetup,
    RaceSetup,
    generate_participants,
)


def _setup(seed: int = 1) -> RaceSetup:
    return RaceSetup(
        track="Circuit",
        total_laps=3,
        seed=seed,
        participants=generate_participants(3, random.Random(seed)),
    )


def test_encoded_setup_decodes_to_equal_setup():
    setup = _setup()

    decoded = RaceSetup.from_encoded(setup.encoded)

    assert decoded == setup
    assert decoded.compute_hash() == setup.compute_hash()


def test_hash_depends_on_seed():
    assert _setup(1).compute_hash() != _setup(2).compute_hash()


def test_race_setup_from_toml(tmp_path):
    path = tmp_path / "race.toml"
    path.write_text(
        """
track = "Sprint"
total_laps = 2
seed = 9
lap_pattern = ["Curve", "Straight"]

[[participants]]
participant_id = "red"
engine_straight = 60
engine_curve = 40
body_straight = 5
body_curve = 7
pilot_straight = 3
pilot_curve = 9
""",
    )

    setup = RaceSetup.from_toml(str(path))
    track = setup.build_track()

    assert setup.participants[0].stats.engine_curve == 40
    assert track.name == "Sprint"
    assert track.lap_characteristic(1, setup.seed) == "Curve"


def test_out_of_range_stats_rejected():
    data = b'{"participant_id": "x", "engine_straight": 0, "engine_curve": 50, "body_straight": 1, "body_curve": 1, "pilot_straight": 11, "pilot_curve": 1}'

    with pytest.raises(msgspec.ValidationError):
        msgspec.json.decode(data, type=ParticipantSetup)


def test_batch_config_generates_expected_runs():
    config = BatchConfig(
        participant_counts=[2, 3],
        tracks=["Oval", "Sprint"],
        laps=[2],
        runs_per_combination=3,
    )

    setups = list(config.generate_setups())

    assert len(setups) == config.compute_total_runs() == 12
    assert len({s.compute_hash() for s in setups}) == 12
    assert {len(s.participants) for s in setups} == {2, 3}


def test_batch_config_respects_max_total_runs():
    config = BatchConfig(runs_per_combination=50, max_total_runs=7)

    assert config.compute_total_runs() == 7
    assert len(list(config.generate_setups())) == 7


def test_track_name_is_fuzzy_matched():
    assert validate_track_name("oval") == "Oval"
    assert validate_track_name(" CIRCUIT ") == "Circuit"
    with pytest.raises(cappa.Exit):
        validate_track_name("Monza")


def test_lap_pattern_parsing():
    assert parse_lap_pattern(["s", "curve", "Straight"]) == ["Straight", "Curve", "Straight"]
    with pytest.raises(cappa.Exit):
        parse_lap_pattern(["hill"])
