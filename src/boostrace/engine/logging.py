from __future__ import annotations

import logging
from typing import TYPE_CHECKING, override

from rich.highlighter import Highlighter
from rich.logging import RichHandler

from boostrace.core import LOGGER_NAME

if TYPE_CHECKING:
    from rich.text import Text

    from boostrace.engine.race_engine import RaceEngine

COLOR = {
    "up": "bold #23d18b",  # light green
    "down": "bold #f14c4c",  # red
    "stay": "bold #87afd7",  # steel blue
    "lap": "bold #d670d6",  # magenta
    "boost": "bold #f5f543",  # yellow
    "replenish": "bold #29b8db",  # cyan
    "warning": "bold bright_red",
    "prefix": "grey50",
}


class ContextFilter(logging.Filter):
    """Inject per-race runtime context into every log record."""

    def __init__(self, engine: RaceEngine, name: str = "") -> None:
        super().__init__(name)
        self.engine: RaceEngine = engine

    @override
    def filter(self, record: logging.LogRecord) -> bool:
        logctx = self.engine.log_context
        record.race_id = logctx.race_id
        record.lap = logctx.current_lap
        record.participant = logctx.current_participant
        record.lap_log_count = logctx.lap_log_count
        logctx.inc_log_count()
        return True


class RichMarkupFormatter(logging.Formatter):
    @override
    def format(self, record: logging.LogRecord) -> str:
        race_id = getattr(record, "race_id", "_")
        lap = getattr(record, "lap", 0)
        participant = getattr(record, "participant", "_")
        lap_log_count = getattr(record, "lap_log_count", 0)

        prefix = f"{race_id} {lap}.{participant}.{lap_log_count}"
        message = record.getMessage()

        # The highlighter applies stronger colors on top of the grey prefix
        return f"[{COLOR['prefix']}]{prefix:<24}[/{COLOR['prefix']}]  {message}"


class RaceLogHighlighter(Highlighter):
    @override
    def highlight(self, text: Text) -> None:
        text.highlight_regex(r"\bMoveUp\b|\bMovedUp\b", COLOR["up"])
        text.highlight_regex(r"\bMoveDown\b|\bMovedDown\b", COLOR["down"])
        text.highlight_regex(r"\bStay\b|\bStayedInSector\b", COLOR["stay"])
        text.highlight_regex(r"\bFinishedLap\b|\bFinishedRace\b", COLOR["lap"])
        text.highlight_regex(r"\bBoost \d\b", COLOR["boost"])
        text.highlight_regex(r"\bReplenished\b", COLOR["replenish"])
        text.highlight_regex(r"=== .* ===", "bold")
        text.highlight_regex(r"!!!", COLOR["warning"])


def configure_logging(level: int = logging.INFO) -> None:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    handler = RichHandler(
        markup=True,
        show_path=False,
        show_time=False,
        highlighter=RaceLogHighlighter(),
    )
    handler.setFormatter(RichMarkupFormatter())
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.propagate = False
