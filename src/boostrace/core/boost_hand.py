from __future__ import annotations

from dataclasses import dataclass, field

from boostrace.core.errors import CardUnavailable, InvalidBoostValue
from boostrace.core.types import BOOST_VALUES, HAND_SIZE


@dataclass(frozen=True, slots=True)
class BoostUsage:
    """Outcome of playing one card."""

    boost_value: int
    cycle_number: int  # cycle the card was played in
    cards_remaining: int  # after replenishment, if any
    current_cycle: int
    replenishment_occurred: bool


@dataclass(slots=True)
class BoostHand:
    """Five single-use boost cards that replenish once all are played.

    `cards[v]` is the availability of card `v`.
    """

    cards: list[bool] = field(default_factory=lambda: [True] * HAND_SIZE)
    current_cycle: int = 1
    cycles_completed: int = 0
    cards_remaining: int = HAND_SIZE

    def is_available(self, value: int) -> bool:
        if value not in BOOST_VALUES:
            return False
        return self.cards[value]

    def get_available_cards(self) -> list[int]:
        return [v for v in BOOST_VALUES if self.cards[v]]

    @property
    def hand_state(self) -> dict[int, bool]:
        return {v: self.cards[v] for v in BOOST_VALUES}

    def validate(self, value: int) -> None:
        if value not in BOOST_VALUES:
            raise InvalidBoostValue(value)
        if not self.cards[value]:
            raise CardUnavailable(
                value,
                self.get_available_cards(),
                current_cycle=self.current_cycle,
                cards_remaining=self.cards_remaining,
            )

    def use_card(self, value: int) -> BoostUsage:
        """Play a card. Playing the last card replenishes the hand in the same call."""
        self.validate(value)

        played_in_cycle = self.current_cycle
        self.cards[value] = False
        self.cards_remaining -= 1

        replenished = self.cards_remaining == 0
        if replenished:
            self._replenish()

        return BoostUsage(
            boost_value=value,
            cycle_number=played_in_cycle,
            cards_remaining=self.cards_remaining,
            current_cycle=self.current_cycle,
            replenishment_occurred=replenished,
        )

    def _replenish(self) -> None:
        for v in BOOST_VALUES:
            self.cards[v] = True
        self.cards_remaining = HAND_SIZE
        self.current_cycle += 1
        self.cycles_completed += 1

    def is_consistent(self) -> bool:
        return (
            len(self.cards) == HAND_SIZE
            and self.cards_remaining == sum(self.cards)
            and self.current_cycle == self.cycles_completed + 1
        )
