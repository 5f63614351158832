"""
Turn Controller — the end-of-turn transition.

One call runs spread over every city, resets every player's budget,
advances the turn counter and hands the view back to the first player in
move mode. Repeated calls keep advancing; it is a transition, not a query.
"""

import logging
from typing import Optional

from pandemic_kernel.engine.spread import RandomSource, SpreadEngine
from pandemic_kernel.models.board import GameState
from pandemic_kernel.models.config import GameConfig
from pandemic_kernel.models.outcomes import TurnResult
from pandemic_kernel.models.session import ActionKind

logger = logging.getLogger(__name__)


class TurnController:
    def __init__(
        self,
        spread_engine: Optional[SpreadEngine] = None,
        config: Optional[GameConfig] = None,
    ):
        self.config = config or GameConfig()
        self.spread_engine = spread_engine or SpreadEngine(self.config)

    def end_turn(self, state: GameState, rng: RandomSource) -> TurnResult:
        spread = self.spread_engine.spread(state, rng)

        players = tuple(
            p.model_copy(update={"actions": self.config.actions_per_turn})
            for p in spread.state.players
        )
        advanced = spread.state.model_copy(update={
            "players": players,
            "turn": spread.state.turn + 1,
        })
        logger.info(
            "Turn %d ended: %d new outbreak(s), %d total",
            state.turn, len(spread.events), advanced.outbreak_count,
        )
        return TurnResult(
            state=advanced,
            events=spread.events,
            active_player=0,
            action_mode=ActionKind.MOVE,
        )
