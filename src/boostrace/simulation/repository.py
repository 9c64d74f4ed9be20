"""Race persistence backed by msgspec JSON."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import msgspec

from boostrace.core import LOGGER_NAME
from boostrace.core.errors import RaceNotFound
from boostrace.core.state import Race

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(f"{LOGGER_NAME}.repository")

_ENCODER = msgspec.json.Encoder()
_DECODER = msgspec.json.Decoder(Race)


def encode_race(race: Race) -> bytes:
    return _ENCODER.encode(race)


def decode_race(data: bytes) -> Race:
    return _DECODER.decode(data)


def check_race_id(race_id: str) -> None:
    """Race ids double as file names, so they must stay a single path component."""
    if not race_id or race_id in {".", ".."} or any(sep in race_id for sep in ("/", "\\")):
        msg = f"Invalid race id: {race_id!r}"
        raise ValueError(msg)


class InMemoryRaceRepository:
    """
    Keeps every race as encoded bytes.
    Each `load` returns a fresh copy, so an engine that fails half-way never
    leaks its changes unless they are saved.
    """

    def __init__(self) -> None:
        self._races: dict[str, bytes] = {}

    def load(self, race_id: str) -> Race:
        try:
            data = self._races[race_id]
        except KeyError:
            raise RaceNotFound(race_id) from None
        return decode_race(data)

    def save(self, race: Race) -> None:
        self._races[race.race_id] = encode_race(race)

    def exists(self, race_id: str) -> bool:
        return race_id in self._races

    def __iter__(self) -> Iterator[Race]:
        for data in list(self._races.values()):
            yield decode_race(data)


class JsonFileRaceRepository:
    """One `<race_id>.json` file per race."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, race_id: str) -> Path:
        check_race_id(race_id)
        return self.directory / f"{race_id}.json"

    def load(self, race_id: str) -> Race:
        path = self._path(race_id)
        if not path.exists():
            raise RaceNotFound(race_id)
        return decode_race(path.read_bytes())

    def save(self, race: Race) -> None:
        path = self._path(race.race_id)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_bytes(encode_race(race))
        tmp.replace(path)
        logger.debug(f"Saved race {race.race_id} to {path}")

    def exists(self, race_id: str) -> bool:
        return self._path(race_id).exists()

    def __iter__(self) -> Iterator[Race]:
        for path in sorted(self.directory.glob("*.json")):
            yield decode_race(path.read_bytes())
