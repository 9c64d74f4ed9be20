from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, get_args

SectorType = Literal["Start", "Straight", "Curve", "Finish"]

LapCharacteristic = Literal["Straight", "Curve"]

RaceStatus = Literal["Waiting", "InProgress", "Finished", "Cancelled"]

TurnPhase = Literal["WaitingForPlayers", "AllSubmitted", "Processing", "Complete"]

# Classification produced by the performance calculator
MovementClass = Literal["MoveUp", "Stay", "MoveDown"]

# What actually happened to a participant when a lap was resolved
MovementType = Literal[
    "MovedUp",
    "MovedDown",
    "StayedInSector",
    "FinishedLap",
    "FinishedRace",
]

TrackName = Literal["Oval", "Circuit", "Sprint"]

ErrorCode = Literal[
    "RACE_ERROR",
    "INVALID_BOOST_VALUE",
    "BOOST_CARD_NOT_AVAILABLE",
    "PARTICIPANT_NOT_FOUND",
    "DUPLICATE_SUBMISSION",
    "RACE_NOT_IN_PROGRESS",
    "PARTICIPANT_ALREADY_FINISHED",
    "TURN_NOT_READY",
    "REGISTRATION_CLOSED",
    "DUPLICATE_PARTICIPANT",
    "NO_PARTICIPANTS",
    "INVALID_TRACK",
    "RACE_NOT_FOUND",
    "CONSISTENCY_VIOLATION",
]

BoostValue = Literal[0, 1, 2, 3, 4]
BOOST_VALUES: tuple[BoostValue, ...] = get_args(BoostValue)
HAND_SIZE = len(BOOST_VALUES)

LAP_CHARACTERISTICS: tuple[LapCharacteristic, ...] = get_args(LapCharacteristic)


@dataclass(frozen=True, slots=True)
class CarStats:
    """Validated performance attributes of a car/pilot pairing.

    Supplied by the stat-lookup collaborator; the engine never checks ranges.
    """

    engine_straight: int
    engine_curve: int
    body_straight: int
    body_curve: int
    pilot_straight: int
    pilot_curve: int

    def for_characteristic(
        self,
        characteristic: LapCharacteristic,
    ) -> tuple[int, int, int]:
        """Return (engine, body, pilot) values relevant for this lap."""
        if characteristic == "Straight":
            return self.engine_straight, self.body_straight, self.pilot_straight
        return self.engine_curve, self.body_curve, self.pilot_curve
