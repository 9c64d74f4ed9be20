from tests.test_utils import CarConfig, RaceScenario, flat_stats

from boostrace.engine.track import TRACK_DEFINITIONS


def _oval_game(scenario: type[RaceScenario]) -> RaceScenario:
    return scenario(
        [
            CarConfig("home", flat_stats(20), start_sector=0),
            CarConfig("near", flat_stats(20), start_sector=1),
            CarConfig("far", flat_stats(20), start_sector=3),
            CarConfig("behind", flat_stats(20), start_sector=5),
        ],
        track=TRACK_DEFINITIONS["Oval"](),
    )


def test_local_view_shows_two_sectors_each_side(scenario: type[RaceScenario]):
    game = _oval_game(scenario)

    view = game.engine.get_local_view("home")

    assert view.center_sector == 0
    assert [s.index for s in view.visible_sectors] == [4, 5, 0, 1, 2]
    assert [p.participant_id for p in view.visible_participants] == ["behind", "home", "near"]
    assert [p.is_self for p in view.visible_participants] == [False, True, False]


def test_local_view_reports_capacity(scenario: type[RaceScenario]):
    game = _oval_game(scenario)

    sectors = {s.index: s for s in game.engine.get_local_view("near").visible_sectors}

    assert sectors[1].occupancy == 1
    assert sectors[1].capacity == 4
    assert sectors[1].available_slots == 3
    assert sectors[0].capacity is None
    assert sectors[0].available_slots is None
    assert sectors[2].occupancy == 0


def test_turn_phase_info(scenario: type[RaceScenario]):
    game = scenario([CarConfig("a", flat_stats(5)), CarConfig("b", flat_stats(5))], total_laps=4)
    game.submit("b", 2)

    info = game.engine.get_turn_phase()

    assert info.phase == "WaitingForPlayers"
    assert info.current_lap == 1
    assert info.total_laps == 4
    assert info.lap_characteristic == "Straight"
    assert info.submitted_participants == ["b"]
    assert info.pending_participants == ["a"]


def test_boost_availability_after_playing_a_card(scenario: type[RaceScenario]):
    game = scenario([CarConfig("a", flat_stats(9))])
    game.run_lap({"a": 2})

    availability = game.engine.get_boost_availability("a")

    assert availability.available_cards == [0, 1, 3, 4]
    assert availability.hand_state[2] is False
    assert availability.cycle_info.current_cycle == 1
    assert availability.cycle_info.cards_remaining == 4
    assert availability.cycle_info.next_replenishment_at == 4
    assert availability.boost_impact_preview == []


def test_boost_impact_preview_predicts_every_card(scenario: type[RaceScenario]):
    """
    Scenario: Base 7 in the start sector [0, 10], card 2 already played.
    Verify: Cards 3 and 4 are predicted to move up, card 2 is marked unavailable.
    """
    game = scenario([CarConfig("a", flat_stats(7))])
    game.run_lap({"a": 2})
    assert game.get("a").current_sector == 0

    availability = game.engine.get_boost_availability("a", game.stats["a"])
    preview = {o.boost_value: o for o in availability.boost_impact_preview}

    assert sorted(preview) == [0, 1, 2, 3, 4]
    assert preview[2].is_available is False
    assert preview[0].predicted_final_value == 7
    assert preview[0].predicted_movement == "Stay"
    assert preview[3].predicted_final_value == 10
    assert preview[3].predicted_movement == "MoveUp"
    assert preview[4].predicted_movement == "MoveUp"
