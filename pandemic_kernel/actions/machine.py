"""
Action State Machine — applies one player action to the current snapshot.

The five action kinds are modes chosen by the active player, not sequential
states. Each perform call attempts exactly one action of the selected kind
against the selected city.

Behavioral Contract:
- Preconditions shared by every kind: a state exists, a known city is
  selected, the active player index is valid and has budget left
- An accepted action costs exactly one budget point; a rejected one costs none
- A rejected action returns the input snapshot untouched
"""

import logging
from typing import Callable, Dict, Optional, Tuple

from pandemic_kernel.engine.spread import RandomSource
from pandemic_kernel.models.board import DISEASE_COLORS, Disease, GameState
from pandemic_kernel.models.config import GameConfig
from pandemic_kernel.models.outcomes import ActionOutcome
from pandemic_kernel.models.session import ActionKind

logger = logging.getLogger(__name__)


class ActionMachine:
    def __init__(self, config: Optional[GameConfig] = None):
        self.config = config or GameConfig()
        self._handlers: Dict[ActionKind, Callable] = {
            ActionKind.MOVE: self._move,
            ActionKind.TREAT: self._treat,
            ActionKind.BUILD: self._not_implemented,
            ActionKind.SHARE: self._not_implemented,
            ActionKind.DISCOVER: self._discover,
        }

    def perform(
        self,
        state: Optional[GameState],
        diseases: Tuple[Disease, ...],
        active_player: int,
        kind: ActionKind,
        selected_city: Optional[str],
        rng: RandomSource,
    ) -> ActionOutcome:
        if state is None:
            raise ValueError("No game in progress")

        def reject(reason: str, detail: str) -> ActionOutcome:
            logger.debug("Rejected %s: %s", kind.value, reason)
            return ActionOutcome(
                kind=kind,
                state=state,
                diseases=diseases,
                accepted=False,
                rejection_reason=reason,
                detail=detail,
            )

        if selected_city is None:
            return reject("no_city_selected", "Select a city first.")
        if state.city(selected_city) is None:
            return reject("unknown_city", f"No city named {selected_city}.")
        if not 0 <= active_player < len(state.players):
            return reject("unknown_player", f"No player at index {active_player}.")
        if state.players[active_player].actions <= 0:
            return reject("no_actions_left", "The active player has no actions left this turn.")

        handler = self._handlers[kind]
        return handler(state, diseases, active_player, selected_city, rng, reject)

    def _spend(self, state: GameState, active_player: int) -> GameState:
        player = state.players[active_player]
        return state.replace_player(
            active_player, player.model_copy(update={"actions": player.actions - 1})
        )

    def _move(self, state, diseases, active_player, city_name, rng, reject):
        player = state.players[active_player]
        if player.position == city_name:
            return reject("already_there", f"Player {player.id} is already in {city_name}.")
        moved = state.replace_player(
            active_player, player.model_copy(update={"position": city_name})
        )
        return ActionOutcome(
            kind=ActionKind.MOVE,
            state=self._spend(moved, active_player),
            diseases=diseases,
            accepted=True,
            detail=f"Player {player.id} moved to {city_name}.",
        )

    def _treat(self, state, diseases, active_player, city_name, rng, reject):
        city = state.city(city_name)
        color_index = city.first_infected_color()
        if color_index is None:
            return reject("no_disease_present", f"{city_name} has no disease to treat.")

        levels = list(city.disease_levels)
        levels[color_index] -= 1
        treated = state.replace_city(city.model_copy(update={"disease_levels": tuple(levels)}))
        return ActionOutcome(
            kind=ActionKind.TREAT,
            state=self._spend(treated, active_player),
            diseases=diseases,
            accepted=True,
            detail=f"Treated {DISEASE_COLORS[color_index].value} disease in {city_name}.",
        )

    def _discover(self, state, diseases, active_player, city_name, rng, reject):
        if rng.random() < self.config.cure_probability:
            target = next((i for i, d in enumerate(diseases) if not d.cured), None)
            updated = list(diseases)
            if target is not None:
                updated[target] = diseases[target].model_copy(update={"cured": True})
                detail = f"Cure discovered for {diseases[target].color.value} disease."
                logger.info("Cure discovered for %s", diseases[target].color.value)
            else:
                detail = "Every disease is already cured."
            return ActionOutcome(
                kind=ActionKind.DISCOVER,
                state=self._spend(state, active_player),
                diseases=tuple(updated),
                accepted=True,
                detail=detail,
            )

        if not self.config.discover_consumes_on_failure:
            return reject("cure_not_found", "No cure found.")
        return ActionOutcome(
            kind=ActionKind.DISCOVER,
            state=self._spend(state, active_player),
            diseases=diseases,
            accepted=True,
            detail="No cure found.",
        )

    def _not_implemented(self, state, diseases, active_player, city_name, rng, reject):
        return reject("not_implemented", "This action is not available yet.")
