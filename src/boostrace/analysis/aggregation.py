"""
Tabular views over finished races, built with polars.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import polars as pl

if TYPE_CHECKING:
    from collections.abc import Iterable

    from boostrace.core.state import Race

# Suppress Polars internal warnings
logging.getLogger("polars").setLevel(logging.WARNING)

USAGE_SCHEMA = {
    "race_id": pl.String,
    "participant_id": pl.String,
    "lap_number": pl.Int64,
    "boost_value": pl.Int64,
    "cycle_number": pl.Int64,
    "cards_remaining_after": pl.Int64,
    "replenishment_occurred": pl.Boolean,
}

FINISH_SCHEMA = {
    "race_id": pl.String,
    "track": pl.String,
    "participant_count": pl.Int64,
    "participant_id": pl.String,
    "finish_position": pl.Int64,
    "crossed_line": pl.Boolean,
    "total_value": pl.Int64,
    "boost_total": pl.Int64,
}


def usage_frame(race: Race) -> pl.DataFrame:
    """One row per boost card played in the race."""
    rows = [
        {
            "race_id": race.race_id,
            "participant_id": p.participant_id,
            "lap_number": r.lap_number,
            "boost_value": r.boost_value,
            "cycle_number": r.cycle_number,
            "cards_remaining_after": r.cards_remaining_after,
            "replenishment_occurred": r.replenishment_occurred,
        }
        for p in race.participants
        for r in p.usage_history
    ]
    return pl.DataFrame(rows, schema=USAGE_SCHEMA)


def cycle_statistics(race: Race) -> pl.DataFrame:
    """Per participant and cycle: cards played, boost sum and mean, lap span."""
    return (
        usage_frame(race)
        .group_by("participant_id", "cycle_number")
        .agg(
            pl.len().alias("cards_used"),
            pl.col("boost_value").sum().alias("boost_total"),
            pl.col("boost_value").mean().alias("average_boost"),
            pl.col("lap_number").min().alias("first_lap"),
            pl.col("lap_number").max().alias("last_lap"),
        )
        .sort("participant_id", "cycle_number")
    )


def finish_frame(races: Iterable[Race]) -> pl.DataFrame:
    rows = [
        {
            "race_id": race.race_id,
            "track": race.track.name,
            "participant_count": len(race.participants),
            "participant_id": p.participant_id,
            "finish_position": p.finish_position,
            "crossed_line": p.is_finished,
            "total_value": p.total_value,
            "boost_total": sum(r.boost_value for r in p.usage_history),
        }
        for race in races
        for p in race.participants
    ]
    return pl.DataFrame(rows, schema=FINISH_SCHEMA)


def summarize_finishes(races: Iterable[Race]) -> pl.DataFrame:
    """Finishing statistics per track and grid slot over many races."""
    return (
        finish_frame(races)
        .group_by("track", "participant_id")
        .agg(
            pl.len().alias("races"),
            (pl.col("finish_position") == 1).sum().alias("wins"),
            pl.col("finish_position").mean().alias("avg_position"),
            pl.col("crossed_line").mean().alias("finish_rate"),
            pl.col("total_value").mean().alias("avg_total_value"),
            pl.col("boost_total").mean().alias("avg_boost_total"),
        )
        .sort("track", "participant_id")
    )
