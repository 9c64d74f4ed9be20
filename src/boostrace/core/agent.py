from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from boostrace.core.results import BoostAvailability, LocalView, TurnPhaseInfo


@dataclass
class BoostDecisionContext:
    """What a participant can see when choosing a card."""

    participant_id: str
    turn: TurnPhaseInfo
    availability: BoostAvailability
    view: LocalView


class Agent(ABC):
    @abstractmethod
    def choose_boost(self, ctx: BoostDecisionContext) -> int:
        """Return the boost card to play this lap."""
        raise NotImplementedError
