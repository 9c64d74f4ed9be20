import logging

import pytest
from rich.text import Text
from tests.test_utils import CarConfig, RaceScenario, flat_stats

from boostrace.engine.logging import ContextFilter, RaceLogHighlighter, RichMarkupFormatter


def test_records_carry_race_context(
    scenario: type[RaceScenario],
    caplog: pytest.LogCaptureFixture,
):
    game = scenario([CarConfig("a", flat_stats(12))])

    with caplog.at_level(logging.INFO):
        game.run_lap({"a": 2})

    submitted = next(r for r in caplog.records if "submitted Boost 2" in r.getMessage())
    assert submitted.race_id == "test-race"
    assert submitted.lap == 1
    assert submitted.participant == "a"

    formatted = RichMarkupFormatter().format(submitted)
    assert "test-race 1.a." in formatted


def test_only_one_context_filter_per_race(scenario: type[RaceScenario]):
    game = scenario([CarConfig("a", flat_stats(12))])
    second = RaceScenario([CarConfig("a", flat_stats(12))])

    filters = [f for f in second.engine._logger.filters if isinstance(f, ContextFilter)]

    assert len(filters) == 1
    assert filters[0].engine is second.engine
    assert game.engine._logger is second.engine._logger


def test_quiet_engine_logs_nothing(caplog: pytest.LogCaptureFixture):
    game = RaceScenario([CarConfig("a", flat_stats(12))], start=False)
    game.engine.verbose = False
    caplog.clear()

    with caplog.at_level(logging.DEBUG):
        game.engine.start()
        game.run_lap({"a": 0})

    assert caplog.records == []


def test_highlighter_styles_movement_words():
    text = Text("a Boost 3 -> 14 MoveUp: S1 -> S2 (MovedUp)")

    RaceLogHighlighter().highlight(text)

    styled = {text.plain[span.start : span.end] for span in text.spans}
    assert {"Boost 3", "MoveUp", "MovedUp"} <= styled
