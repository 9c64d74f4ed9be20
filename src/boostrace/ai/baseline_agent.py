from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, override

from boostrace.core.agent import Agent

if TYPE_CHECKING:
    from boostrace.core.agent import BoostDecisionContext


@dataclass
class BaselineAgent(Agent):
    """
    Plays the cheapest card that still moves the car up.
    Falls back to the cheapest card that avoids dropping a sector, and to the
    biggest card left when nothing helps. Needs the impact preview.
    """

    @override
    def choose_boost(self, ctx: BoostDecisionContext) -> int:
        options = [o for o in ctx.availability.boost_impact_preview if o.is_available]
        if not options:
            # No preview available, play the smallest card in hand
            return min(ctx.availability.available_cards)

        options.sort(key=lambda o: o.boost_value)
        for option in options:
            if option.predicted_movement == "MoveUp":
                return option.boost_value
        for option in options:
            if option.predicted_movement == "Stay":
                return option.boost_value
        return options[-1].boost_value


@dataclass
class RandomAgent(Agent):
    rng: random.Random = field(default_factory=random.Random)

    @override
    def choose_boost(self, ctx: BoostDecisionContext) -> int:
        return self.rng.choice(ctx.availability.available_cards)
