from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from boostrace.core.state import BoostUsageRecord


@dataclass(frozen=True, slots=True)
class CycleSummary:
    cycle_number: int
    cards_used: list[int]
    laps_in_cycle: list[int]
    average_boost: float


def summarize_cycles(records: Iterable[BoostUsageRecord]) -> list[CycleSummary]:
    """Group usage records by the cycle the card was played in.

    Cards and laps keep the order in which they were played; cycles are
    returned in ascending order.
    """
    cards: dict[int, list[int]] = {}
    laps: dict[int, list[int]] = {}
    for record in records:
        cards.setdefault(record.cycle_number, []).append(record.boost_value)
        laps.setdefault(record.cycle_number, []).append(record.lap_number)

    return [
        CycleSummary(
            cycle_number=cycle,
            cards_used=cards[cycle],
            laps_in_cycle=laps[cycle],
            average_boost=sum(cards[cycle]) / len(cards[cycle]),
        )
        for cycle in sorted(cards)
    ]
