"""Exceptions raised by the turn-resolution engine.

Validation errors (bad boost choice) and state errors (wrong phase, unknown
participant, ...) never leave the race mutated and carry enough detail for
the caller to retry. Consistency errors mean the engine itself is broken.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, override

if TYPE_CHECKING:
    from collections.abc import Sequence

    from boostrace.core.types import ErrorCode, RaceStatus, TurnPhase


class RaceError(Exception):
    code: ClassVar[ErrorCode] = "RACE_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message: str = message

    def detail(self) -> dict[str, Any]:
        return {}

    def to_payload(self) -> dict[str, Any]:
        """Structured description for callers that forward errors over the wire."""
        return {"error_code": self.code, "message": self.message, **self.detail()}


# --- Validation ---
class BoostCardError(RaceError):
    """The chosen boost card cannot be played."""


class InvalidBoostValue(BoostCardError):
    code: ClassVar[ErrorCode] = "INVALID_BOOST_VALUE"

    def __init__(self, value: int) -> None:
        super().__init__(f"Invalid boost value: {value}. Must be between 0 and 4")
        self.value: int = value

    @override
    def detail(self) -> dict[str, Any]:
        return {"boost_value": self.value}


class CardUnavailable(BoostCardError):
    code: ClassVar[ErrorCode] = "BOOST_CARD_NOT_AVAILABLE"

    def __init__(
        self,
        value: int,
        available_cards: Sequence[int],
        current_cycle: int | None = None,
        cards_remaining: int | None = None,
    ) -> None:
        super().__init__(
            f"Boost card {value} is not available. Available cards: {list(available_cards)}",
        )
        self.value: int = value
        self.available_cards: list[int] = list(available_cards)
        self.current_cycle: int | None = current_cycle
        self.cards_remaining: int | None = cards_remaining

    @override
    def detail(self) -> dict[str, Any]:
        detail: dict[str, Any] = {
            "boost_value": self.value,
            "available_cards": self.available_cards,
        }
        if self.current_cycle is not None:
            detail["current_cycle"] = self.current_cycle
        if self.cards_remaining is not None:
            detail["cards_remaining"] = self.cards_remaining
        return detail


# --- State ---
class RaceStateError(RaceError):
    """The race is not in a state that allows the requested operation."""


class ParticipantNotFound(RaceStateError):
    code: ClassVar[ErrorCode] = "PARTICIPANT_NOT_FOUND"

    def __init__(self, participant_id: str) -> None:
        super().__init__(f"Participant {participant_id} not found in race")
        self.participant_id: str = participant_id

    @override
    def detail(self) -> dict[str, Any]:
        return {"participant_id": self.participant_id}


class DuplicateSubmission(RaceStateError):
    code: ClassVar[ErrorCode] = "DUPLICATE_SUBMISSION"

    def __init__(self, participant_id: str, lap: int) -> None:
        super().__init__(
            f"Participant {participant_id} already submitted an action for lap {lap}",
        )
        self.participant_id: str = participant_id
        self.lap: int = lap

    @override
    def detail(self) -> dict[str, Any]:
        return {"participant_id": self.participant_id, "lap": self.lap}


class RaceNotInProgress(RaceStateError):
    code: ClassVar[ErrorCode] = "RACE_NOT_IN_PROGRESS"

    def __init__(self, status: RaceStatus) -> None:
        super().__init__(f"Race is not in progress (status: {status})")
        self.status: RaceStatus = status

    @override
    def detail(self) -> dict[str, Any]:
        return {"status": self.status}


class ParticipantAlreadyFinished(RaceStateError):
    code: ClassVar[ErrorCode] = "PARTICIPANT_ALREADY_FINISHED"

    def __init__(self, participant_id: str, finish_position: int | None) -> None:
        super().__init__(
            f"Participant {participant_id} already finished (position {finish_position})",
        )
        self.participant_id: str = participant_id
        self.finish_position: int | None = finish_position

    @override
    def detail(self) -> dict[str, Any]:
        return {
            "participant_id": self.participant_id,
            "finish_position": self.finish_position,
        }


class TurnNotReady(RaceStateError):
    code: ClassVar[ErrorCode] = "TURN_NOT_READY"

    def __init__(self, phase: TurnPhase, pending_participants: Sequence[str]) -> None:
        super().__init__(
            f"Cannot process turn in phase {phase}; waiting for {list(pending_participants)}",
        )
        self.phase: TurnPhase = phase
        self.pending_participants: list[str] = list(pending_participants)

    @override
    def detail(self) -> dict[str, Any]:
        return {"phase": self.phase, "pending_participants": self.pending_participants}


class RegistrationClosed(RaceStateError):
    code: ClassVar[ErrorCode] = "REGISTRATION_CLOSED"

    def __init__(self, status: RaceStatus) -> None:
        super().__init__(f"Race no longer accepts changes to its field (status: {status})")
        self.status: RaceStatus = status

    @override
    def detail(self) -> dict[str, Any]:
        return {"status": self.status}


class DuplicateParticipant(RaceStateError):
    code: ClassVar[ErrorCode] = "DUPLICATE_PARTICIPANT"

    def __init__(self, participant_id: str) -> None:
        super().__init__(f"Participant {participant_id} is already in this race")
        self.participant_id: str = participant_id

    @override
    def detail(self) -> dict[str, Any]:
        return {"participant_id": self.participant_id}


class NoParticipants(RaceStateError):
    code: ClassVar[ErrorCode] = "NO_PARTICIPANTS"

    def __init__(self) -> None:
        super().__init__("Cannot start race without participants")


# --- Setup / collaborators ---
class InvalidTrack(RaceError):
    code: ClassVar[ErrorCode] = "INVALID_TRACK"


class RaceNotFound(RaceError):
    code: ClassVar[ErrorCode] = "RACE_NOT_FOUND"

    def __init__(self, race_id: str) -> None:
        super().__init__(f"Race {race_id} not found")
        self.race_id: str = race_id

    @override
    def detail(self) -> dict[str, Any]:
        return {"race_id": self.race_id}


# --- Consistency ---
class RaceConsistencyError(RaceError):
    """An engine invariant does not hold. Never raised because of caller input."""

    code: ClassVar[ErrorCode] = "CONSISTENCY_VIOLATION"
