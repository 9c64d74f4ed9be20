"""CLI command for running a single race."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from pathlib import Path  # cappa needs this at runtime
from typing import Annotated

import cappa
import msgspec

from boostrace.cli.converters import parse_lap_pattern, validate_track_name
from boostrace.core import LOGGER_NAME
from boostrace.core.errors import RaceError
from boostrace.core.types import (
    LapCharacteristic,
    TrackName,
)
from boostrace.engine.logging import configure_logging
from boostrace.simulation.config import (
    ParticipantSetup,
    PartialRaceSetup,
    RaceSetup,
    generate_participants,
)
from boostrace.simulation.runner import run_race

logger = logging.getLogger(f"{LOGGER_NAME}.cli")
DEFAULT_PARTICIPANT_COUNT = 4
DEFAULT_LAPS = 3


def run_console_race(setup: RaceSetup) -> None:
    logger.info(setup.repr)
    logger.info(f"Share: {setup.encoded}")
    logger.info("-" * 20)

    try:
        result = run_race(setup)
    except RaceError as e:
        logger.exception("Race Error")
        raise cappa.Exit(e.message, code=1) from e

    logger.info("-" * 20)
    race = result.race
    for p in sorted(race.participants, key=lambda p: p.finish_position or 0):
        state = "finished" if p.is_finished else f"lap {p.current_lap}, S{p.current_sector}"
        logger.info(f"#{p.finish_position} {p.participant_id} ({state}, value {p.total_value})")
    logger.info(f"{result.laps_run} laps in {result.execution_time_ms:.1f}ms")


@cappa.command(
    name="race",
    help="Run a single race with baseline agents. Random participants and seed if not specified.",
)
@dataclass
class RaceCommand:
    track: Annotated[
        TrackName | None,
        cappa.Arg(
            short="-t",
            long="--track",
            parse=validate_track_name,
            help="Track name.",
        ),
    ] = None
    laps: Annotated[
        int | None,
        cappa.Arg(short="-l", long="--laps", help="Number of laps."),
    ] = None
    number: Annotated[
        int | None,
        cappa.Arg(short="-n", long="--number", help="Number of participants."),
    ] = None
    seed: Annotated[
        int | None,
        cappa.Arg(short="-s", long="--seed", help="RNG seed."),
    ] = None
    lap_pattern: Annotated[
        list[LapCharacteristic] | None,
        cappa.Arg(
            short="-p",
            long="--pattern",
            parse=parse_lap_pattern,
            num_args=-1,
            help="Fixed cycle of lap characteristics, e.g. 'straight curve'.",
        ),
    ] = None

    config_file: Annotated[
        Path | None,
        cappa.Arg(short="-c", long="--config", help="Path to TOML config file."),
    ] = None
    encoding: Annotated[
        str | None,
        cappa.Arg(short="-e", long="--encoding", help="Base64 encoded configuration."),
    ] = None

    debug: Annotated[
        bool,
        cappa.Arg(long="--debug", help="Log at DEBUG level."),
    ] = False

    def __call__(self) -> None:
        configure_logging(logging.DEBUG if self.debug else logging.INFO)

        final_track: TrackName = "Oval"
        final_laps = DEFAULT_LAPS
        final_seed = random.randint(0, 1_000_000)
        final_participants: list[ParticipantSetup] = []
        final_pattern: list[LapCharacteristic] = []

        # 1. Config file
        if self.config_file:
            if not self.config_file.exists():
                msg = f"Config file not found: {self.config_file}"
                raise cappa.Exit(msg, code=1)
            try:
                file_conf = msgspec.toml.decode(
                    self.config_file.read_bytes(),
                    type=PartialRaceSetup,
                )
            except msgspec.DecodeError as e:
                msg = f"Invalid TOML config: {e}"
                raise cappa.Exit(msg, code=1) from e

            if file_conf.track:
                final_track = file_conf.track
            if file_conf.total_laps is not None:
                final_laps = file_conf.total_laps
            if file_conf.seed is not None:
                final_seed = file_conf.seed
            if file_conf.participants:
                final_participants = file_conf.participants
            if file_conf.lap_pattern:
                final_pattern = file_conf.lap_pattern

        # 2. Encoding overrides the file
        if self.encoding:
            try:
                decoded = RaceSetup.from_encoded(self.encoding)
            except (ValueError, msgspec.DecodeError) as e:
                msg = f"Invalid encoding: {e}"
                raise cappa.Exit(msg, code=1) from e
            final_track = decoded.track
            final_laps = decoded.total_laps
            final_seed = decoded.seed
            final_participants = list(decoded.participants)
            final_pattern = list(decoded.lap_pattern)

        # 3. CLI args override everything
        if self.track:
            final_track = self.track
        if self.laps is not None:
            final_laps = self.laps
        if self.seed is not None:
            final_seed = self.seed
        if self.lap_pattern:
            final_pattern = self.lap_pattern

        if final_laps < 1:
            raise cappa.Exit("Number of laps must be positive.", code=1)

        # 4. Fill the grid
        if self.number is not None:
            target_count = self.number
        elif self.encoding or self.config_file:
            target_count = len(final_participants)
        else:
            target_count = DEFAULT_PARTICIPANT_COUNT

        if target_count < 1:
            raise cappa.Exit("A race needs at least one participant.", code=1)
        if len(final_participants) < target_count:
            generated = generate_participants(target_count, random.Random(final_seed))
            taken = {p.participant_id for p in final_participants}
            final_participants.extend(
                [p for p in generated if p.participant_id not in taken][
                    : target_count - len(final_participants)
                ],
            )

        setup = RaceSetup(
            track=final_track,
            total_laps=final_laps,
            seed=final_seed,
            participants=tuple(final_participants[:target_count]),
            lap_pattern=tuple(final_pattern),
        )
        run_console_race(setup)
