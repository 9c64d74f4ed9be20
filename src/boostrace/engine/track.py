from __future__ import annotations

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass

from boostrace.core import LOGGER_NAME
from boostrace.core.errors import InvalidTrack
from boostrace.core.types import (
    LAP_CHARACTERISTICS,
    LapCharacteristic,
    SectorType,
    TrackName,
)

logger = logging.getLogger(LOGGER_NAME)

VIEW_RADIUS = 2


@dataclass(frozen=True, slots=True)
class Sector:
    id: int
    name: str
    min_value: int
    max_value: int
    slot_capacity: int | None = None  # None = unbounded
    sector_type: SectorType = "Straight"

    def __post_init__(self) -> None:
        if self.min_value > self.max_value:
            msg = f"Sector {self.name}: min_value {self.min_value} > max_value {self.max_value}"
            raise InvalidTrack(msg)
        if self.slot_capacity is not None and self.slot_capacity < 1:
            msg = f"Sector {self.name}: slot_capacity must be positive or None"
            raise InvalidTrack(msg)

    @property
    def unbounded(self) -> bool:
        return self.slot_capacity is None


@dataclass(frozen=True, slots=True)
class Track:
    """Circular sequence of sectors. Crossing from the last sector into the
    first completes a lap.
    """

    name: str
    sectors: tuple[Sector, ...]
    # Optional fixed cycle of lap characteristics; empty = seeded draw per lap
    lap_pattern: tuple[LapCharacteristic, ...] = ()

    def __post_init__(self) -> None:
        if not self.sectors:
            msg = f"Track {self.name} must have at least one sector"
            raise InvalidTrack(msg)
        if not self.sectors[0].unbounded:
            msg = f"Track {self.name}: first sector must have unbounded capacity"
            raise InvalidTrack(msg)
        if not self.sectors[-1].unbounded:
            msg = f"Track {self.name}: last sector must have unbounded capacity"
            raise InvalidTrack(msg)

    @property
    def length(self) -> int:
        return len(self.sectors)

    @property
    def finish_index(self) -> int:
        return self.length - 1

    def wrap(self, index: int) -> int:
        return index % self.length

    def sector(self, index: int) -> Sector:
        return self.sectors[self.wrap(index)]

    def visible_indices(self, center: int, radius: int = VIEW_RADIUS) -> list[int]:
        """Indices `center-radius .. center+radius`, wrapped around the track.

        On tracks shorter than the window each sector is listed once.
        """
        seen: set[int] = set()
        indices: list[int] = []
        for offset in range(-radius, radius + 1):
            idx = self.wrap(center + offset)
            if idx not in seen:
                seen.add(idx)
                indices.append(idx)
        return indices

    def lap_characteristic(self, lap: int, seed: int) -> LapCharacteristic:
        if self.lap_pattern:
            return self.lap_pattern[(lap - 1) % len(self.lap_pattern)]
        # Seeded per (race, lap) so a reloaded race draws the same value
        return random.Random(f"{seed}:{lap}").choice(LAP_CHARACTERISTICS)

    def dump(self) -> None:
        """Log the sector layout. Useful for debugging test failures."""
        logger.info("=== TRACK %s ===", self.name)
        for idx, s in enumerate(self.sectors):
            cap = "inf" if s.slot_capacity is None else str(s.slot_capacity)
            logger.info(
                f"  Sector {idx:02d} {s.name:<14} [{s.min_value:>3}-{s.max_value:>3}] cap={cap} {s.sector_type}",
            )


def build_oval() -> Track:
    return Track(
        name="Oval",
        sectors=(
            Sector(0, "Start", 0, 40, None, "Start"),
            Sector(1, "Back Straight", 30, 55, 4, "Straight"),
            Sector(2, "Turn 1", 40, 65, 3, "Curve"),
            Sector(3, "Front Straight", 50, 75, 4, "Straight"),
            Sector(4, "Turn 2", 55, 80, 3, "Curve"),
            Sector(5, "Finish", 60, 85, None, "Finish"),
        ),
    )


def build_circuit() -> Track:
    """Technical layout with a fixed straight/curve/curve lap rhythm."""
    return Track(
        name="Circuit",
        sectors=(
            Sector(0, "Grid", 0, 35, None, "Start"),
            Sector(1, "Pit Straight", 25, 50, 4, "Straight"),
            Sector(2, "Hairpin", 35, 55, 2, "Curve"),
            Sector(3, "Esses", 40, 60, 2, "Curve"),
            Sector(4, "Long Straight", 45, 70, 4, "Straight"),
            Sector(5, "Chicane", 50, 75, 2, "Curve"),
            Sector(6, "Sweeper", 55, 80, 3, "Curve"),
            Sector(7, "Finish Line", 60, 85, None, "Finish"),
        ),
        lap_pattern=("Straight", "Curve", "Curve"),
    )


def build_sprint() -> Track:
    return Track(
        name="Sprint",
        sectors=(
            Sector(0, "Start", 0, 30, None, "Start"),
            Sector(1, "Straight 1", 25, 50, 3, "Straight"),
            Sector(2, "Curve 1", 40, 65, 2, "Curve"),
            Sector(3, "Finish", 55, 80, None, "Finish"),
        ),
    )


TrackFactory = Callable[[], Track]

TRACK_DEFINITIONS: dict[TrackName, TrackFactory] = {
    "Oval": build_oval,
    "Circuit": build_circuit,
    "Sprint": build_sprint,
}
