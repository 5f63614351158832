"""
Spread & Outbreak Engine — advances disease levels once per turn.

Behavioral Contract:
- Cities already in outbreak are skipped: no level change, no repeat event
- Each other city rolls once; on success one color, chosen uniformly,
  gains a level, saturating at the cap
- Reaching the cap flips the city to outbreak, bumps the outbreak counter
  and records an OutbreakEvent stamped with the current turn
- Outbreaks do not chain to connected cities
"""

import logging
from typing import List, Optional, Protocol

from pandemic_kernel.models.board import DISEASE_COLORS, City, GameState, OutbreakEvent
from pandemic_kernel.models.config import GameConfig
from pandemic_kernel.models.outcomes import SpreadResult

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    """The subset of `random.Random` the engines draw from."""

    def random(self) -> float: ...

    def randrange(self, stop: int) -> int: ...


class SpreadEngine:
    def __init__(self, config: Optional[GameConfig] = None):
        self.config = config or GameConfig()

    def spread(self, state: GameState, rng: RandomSource) -> SpreadResult:
        """Roll spread for every city and return the replacement snapshot."""
        cities: List[City] = []
        events: List[OutbreakEvent] = []

        for city in state.cities:
            if city.outbreak:
                cities.append(city)
                continue
            if rng.random() >= self.config.spread_probability:
                cities.append(city)
                continue

            color_index = rng.randrange(len(DISEASE_COLORS))
            levels = list(city.disease_levels)
            levels[color_index] = min(self.config.max_disease_level, levels[color_index] + 1)
            outbreak = levels[color_index] >= self.config.max_disease_level
            logger.debug(
                "Spread %s in %s to level %d",
                DISEASE_COLORS[color_index].value, city.name, levels[color_index],
            )

            if outbreak:
                events.append(OutbreakEvent(city=city.name, turn=state.turn))
                logger.info("Outbreak in %s on turn %d", city.name, state.turn)

            cities.append(city.model_copy(update={
                "disease_levels": tuple(levels),
                "outbreak": outbreak,
            }))

        updated = state.model_copy(update={
            "cities": tuple(cities),
            "outbreak_count": state.outbreak_count + len(events),
        })
        return SpreadResult(state=updated, events=tuple(events))
