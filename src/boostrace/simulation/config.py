"""Configuration schema for races and batch simulations using msgspec."""

from __future__ import annotations

import base64
import hashlib
import itertools
import json
import random
from dataclasses import replace
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import msgspec

from boostrace.core.types import CarStats, LapCharacteristic, TrackName
from boostrace.engine.track import TRACK_DEFINITIONS

if TYPE_CHECKING:
    from collections.abc import Iterator

    from boostrace.engine.track import Track

EngineStat = Annotated[int, msgspec.Meta(ge=1, le=100)]
BodyStat = Annotated[int, msgspec.Meta(ge=0, le=10)]
PilotStat = Annotated[int, msgspec.Meta(ge=0, le=10)]


class ParticipantSetup(msgspec.Struct, frozen=True):
    participant_id: str
    engine_straight: EngineStat
    engine_curve: EngineStat
    body_straight: BodyStat
    body_curve: BodyStat
    pilot_straight: PilotStat
    pilot_curve: PilotStat
    car_ref: str = ""
    pilot_ref: str = ""

    @property
    def stats(self) -> CarStats:
        return CarStats(
            engine_straight=self.engine_straight,
            engine_curve=self.engine_curve,
            body_straight=self.body_straight,
            body_curve=self.body_curve,
            pilot_straight=self.pilot_straight,
            pilot_curve=self.pilot_curve,
        )


class RaceSetup(msgspec.Struct, frozen=True):
    """
    Immutable description of a single race.
    Serves as both the execution config and the deduplication key.
    """

    track: TrackName
    total_laps: int
    seed: int
    participants: tuple[ParticipantSetup, ...]
    lap_pattern: tuple[LapCharacteristic, ...] = ()

    def _canonical(self) -> str:
        return json.dumps(msgspec.to_builtins(self), sort_keys=True, separators=(",", ":"))

    def compute_hash(self) -> str:
        """Compute stable SHA-256 hash of this configuration."""
        return hashlib.sha256(self._canonical().encode("utf-8")).hexdigest()

    @property
    def encoded(self) -> str:
        """Shareable config string (Base64)."""
        return base64.urlsafe_b64encode(self._canonical().encode("utf-8")).decode("ascii")

    @classmethod
    def from_encoded(cls, encoded: str) -> RaceSetup:
        return msgspec.json.decode(base64.urlsafe_b64decode(encoded), type=cls)

    @property
    def repr(self) -> str:
        """String representation for logging."""
        names = ", ".join(p.participant_id for p in self.participants)
        return f"{names} on {self.track}, {self.total_laps} laps (Seed: {self.seed})"

    def build_track(self) -> Track:
        track = TRACK_DEFINITIONS[self.track]()
        if self.lap_pattern:
            track = replace(track, lap_pattern=self.lap_pattern)
        return track

    @classmethod
    def from_toml(cls, path: str) -> RaceSetup:
        with Path(path).open("rb") as f:
            return msgspec.toml.decode(f.read(), type=cls)


class PartialRaceSetup(msgspec.Struct):
    """Partial configuration for loading from TOML files."""

    track: TrackName | None = None
    total_laps: int | None = None
    seed: int | None = None
    participants: list[ParticipantSetup] | None = None
    lap_pattern: list[LapCharacteristic] | None = None


class BatchConfig(msgspec.Struct):
    """TOML-backed configuration for batch race simulations."""

    participant_counts: list[int] = msgspec.field(default_factory=lambda: [2, 4, 6])
    tracks: list[TrackName] = msgspec.field(default_factory=lambda: ["Oval"])
    laps: list[int] = msgspec.field(default_factory=lambda: [3])

    runs_per_combination: int = 10
    max_total_runs: int | None = None
    seed_base: int = 0

    @classmethod
    def from_toml(cls, path: str) -> BatchConfig:
        """Load configuration from a TOML file path."""
        with Path(path).open("rb") as f:
            return msgspec.toml.decode(f.read(), type=cls)

    def compute_total_runs(self) -> int:
        total = (
            len(self.participant_counts)
            * len(self.tracks)
            * len(self.laps)
            * self.runs_per_combination
        )
        if self.max_total_runs is not None:
            total = min(total, self.max_total_runs)
        return total

    def generate_setups(self, seed_offset: int = 0) -> Iterator[RaceSetup]:
        """Yield one seeded setup per run, combinations in declaration order."""
        produced = 0
        combos = itertools.product(self.tracks, self.participant_counts, self.laps)
        for track, count, laps in combos:
            for run in range(self.runs_per_combination):
                if self.max_total_runs is not None and produced >= self.max_total_runs:
                    return
                seed = self.seed_base + seed_offset + produced
                rng = random.Random(f"{seed}:{track}:{count}:{laps}:{run}")
                yield RaceSetup(
                    track=track,
                    total_laps=laps,
                    seed=seed,
                    participants=generate_participants(count, rng),
                )
                produced += 1


def generate_participants(count: int, rng: random.Random) -> tuple[ParticipantSetup, ...]:
    return tuple(
        ParticipantSetup(
            participant_id=f"car-{i + 1}",
            car_ref=f"car-{i + 1}",
            pilot_ref=f"pilot-{i + 1}",
            engine_straight=rng.randint(30, 80),
            engine_curve=rng.randint(30, 80),
            body_straight=rng.randint(0, 10),
            body_curve=rng.randint(0, 10),
            pilot_straight=rng.randint(0, 10),
            pilot_curve=rng.randint(0, 10),
        )
        for i in range(count)
    )
