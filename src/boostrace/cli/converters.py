from __future__ import annotations

import difflib
from typing import get_args

import cappa

from boostrace.core.types import LapCharacteristic, TrackName
from boostrace.engine.track import TRACK_DEFINITIONS


def _normalize(s: str) -> str:
    """Normalize string: remove whitespace, dashes, and convert to lowercase."""
    return s.strip().replace(" ", "").replace("-", "").lower()


def validate_track_name(value: str) -> TrackName:
    """Resolve a track name case-insensitively, suggesting close matches."""
    normalized_input = _normalize(value)
    lookup_map: dict[str, TrackName] = {_normalize(k): k for k in get_args(TrackName)}

    if normalized_input in lookup_map:
        return lookup_map[normalized_input]

    matches = difflib.get_close_matches(value, list(TRACK_DEFINITIONS), n=3, cutoff=0.5)

    msg = f"Track '{value}' not found."
    if matches:
        msg += f" Did you mean: {', '.join(matches)}?"

    raise cappa.Exit(msg, code=1)


def parse_lap_pattern(value: list[str]) -> list[LapCharacteristic]:
    """
    Parse lap characteristics, e.g. `straight curve curve`.
    Single letters `s`/`c` are accepted too.
    """
    lookup_map: dict[str, LapCharacteristic] = {}
    for name in get_args(LapCharacteristic):
        lookup_map[_normalize(name)] = name
        lookup_map[_normalize(name)[0]] = name

    pattern: list[LapCharacteristic] = []
    for item in value:
        key = _normalize(item)
        if key not in lookup_map:
            msg = f"Invalid lap characteristic '{item}'. Expected Straight or Curve."
            raise cappa.Exit(msg, code=1)
        pattern.append(lookup_map[key])
    return pattern
