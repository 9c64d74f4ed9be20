from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import cappa
import polars as pl
from tqdm import tqdm

from boostrace.analysis.aggregation import finish_frame, summarize_finishes
from boostrace.core import LOGGER_NAME
from boostrace.core.errors import RaceError
from boostrace.simulation.config import BatchConfig
from boostrace.simulation.runner import run_race

if TYPE_CHECKING:
    from boostrace.core.state import Race


@cappa.command(name="batch", help="Run batch simulations from a config file.")
@dataclass
class BatchCommand:
    config: Annotated[
        Path,
        cappa.Arg(help="Path to TOML batch config file."),
    ]

    runs_per_combination: Annotated[
        int | None,
        cappa.Arg(long="--runs", help="Override runs per combination."),
    ] = None

    max_total_runs: Annotated[
        int | None,
        cappa.Arg(long="--max", help="Override maximum total runs."),
    ] = None

    seed_offset: Annotated[
        int,
        cappa.Arg(long="--seed-offset", help="Offset for RNG seeds."),
    ] = 0

    output: Annotated[
        Path | None,
        cappa.Arg(
            short="-o",
            long="--output",
            help="Write per-participant results to this parquet file.",
        ),
    ] = None

    def __call__(self) -> None:
        logging.getLogger(LOGGER_NAME).setLevel(logging.CRITICAL)
        if not self.config.exists():
            msg = f"Config file not found: {self.config}"
            raise cappa.Exit(msg, code=1)

        try:
            batch_config = BatchConfig.from_toml(str(self.config))
        except Exception as e:
            msg = f"Invalid config file: {e}"
            raise cappa.Exit(msg, code=1) from e

        if self.runs_per_combination is not None:
            batch_config.runs_per_combination = self.runs_per_combination
        if self.max_total_runs is not None:
            batch_config.max_total_runs = self.max_total_runs

        tqdm.write(f"Tracks: {batch_config.tracks}")
        tqdm.write(f"Participant counts: {batch_config.participant_counts}")
        tqdm.write(f"Laps: {batch_config.laps}")
        tqdm.write(f"Runs per combo: {batch_config.runs_per_combination}")
        tqdm.write("-" * 30)

        races: list[Race] = []
        seen_hashes: set[str] = set()
        skipped = 0
        failed = 0

        with tqdm(
            total=batch_config.compute_total_runs(),
            unit="race",
            desc="Simulating",
        ) as pbar:
            for setup in batch_config.generate_setups(self.seed_offset):
                pbar.update(1)
                config_hash = setup.compute_hash()
                if config_hash in seen_hashes:
                    skipped += 1
                    continue
                seen_hashes.add(config_hash)

                try:
                    result = run_race(setup, verbose=False)
                except RaceError as e:
                    failed += 1
                    tqdm.write(f"Error in {setup.repr}: {e.message}")
                    continue
                races.append(result.race)

        tqdm.write(f"Completed: {len(races)}, skipped: {skipped}, failed: {failed}")
        if not races:
            return

        with pl.Config(tbl_rows=-1, tbl_cols=-1):
            tqdm.write(str(summarize_finishes(races)))

        if self.output is not None:
            self.output.parent.mkdir(parents=True, exist_ok=True)
            finish_frame(races).write_parquet(self.output)
            tqdm.write(f"Saved results to {self.output}")
