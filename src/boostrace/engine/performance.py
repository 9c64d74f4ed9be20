from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from boostrace.core.types import MovementClass  # noqa: TC001 # msgspec resolves at runtime

if TYPE_CHECKING:
    from boostrace.core.types import CarStats, LapCharacteristic
    from boostrace.engine.track import Sector


@dataclass(frozen=True, slots=True)
class PerformanceResult:
    engine_contribution: int
    body_contribution: int
    pilot_contribution: int
    base_value: int
    sector_ceiling: int
    capped_base_value: int
    boost_value: int
    final_value: int
    movement: MovementClass


def classify_movement(final_value: int, sector: Sector) -> MovementClass:
    if final_value >= sector.max_value:
        return "MoveUp"
    if final_value < sector.min_value:
        return "MoveDown"
    return "Stay"


def calculate_performance(
    stats: CarStats,
    characteristic: LapCharacteristic,
    sector: Sector,
    boost_value: int,
) -> PerformanceResult:
    """
    Turn stats and a boost card into a final value for one lap.

    The sector ceiling caps the base value *before* the boost is added, so a
    boost always counts even for a car that outclasses its sector. The
    movement compares the boosted value against the same sector's thresholds.
    """
    engine, body, pilot = stats.for_characteristic(characteristic)
    base = engine + body + pilot
    capped = min(base, sector.max_value)
    final = capped + boost_value

    return PerformanceResult(
        engine_contribution=engine,
        body_contribution=body,
        pilot_contribution=pilot,
        base_value=base,
        sector_ceiling=sector.max_value,
        capped_base_value=capped,
        boost_value=boost_value,
        final_value=final,
        movement=classify_movement(final, sector),
    )
