"""Tests for the Turn Controller."""

import random

from pandemic_kernel.engine.spread import SpreadEngine
from pandemic_kernel.models.board import City, GameState, Player, PlayerRole
from pandemic_kernel.models.config import GameConfig
from pandemic_kernel.models.session import ActionKind
from pandemic_kernel.turns.controller import TurnController


class _AlwaysSpread:
    def random(self) -> float:
        return 0.0

    def randrange(self, stop: int) -> int:
        return 0


class _NeverSpread:
    def random(self) -> float:
        return 1.0

    def randrange(self, stop: int) -> int:
        return 0


def _make_state(turn: int = 1) -> GameState:
    return GameState(
        cities=(
            City(name="Tokyo", disease_levels=(3, 0, 0, 0), outbreak=True),
            City(name="Atlanta", disease_levels=(2, 0, 0, 0)),
            City(name="London", disease_levels=(0, 1, 0, 0)),
        ),
        players=(
            Player(id=1, position="Atlanta", role=PlayerRole.SCIENTIST, actions=0),
            Player(id=2, position="London", role=PlayerRole.MEDIC, actions=2),
        ),
        outbreak_count=1,
        turn=turn,
    )


class TestTurnController:
    def setup_method(self):
        self.controller = TurnController()

    def test_end_turn_advances_counter(self):
        result = self.controller.end_turn(_make_state(turn=4), _NeverSpread())
        assert result.state.turn == 5

    def test_repeated_end_turn_keeps_advancing(self):
        state = _make_state()
        for _ in range(6):
            state = self.controller.end_turn(state, _NeverSpread()).state
        assert state.turn == 7

    def test_budgets_reset(self):
        result = self.controller.end_turn(_make_state(), _NeverSpread())
        assert [p.actions for p in result.state.players] == [4, 4]

    def test_budget_reset_uses_config(self):
        controller = TurnController(config=GameConfig(actions_per_turn=2))
        result = controller.end_turn(_make_state(), _NeverSpread())
        assert [p.actions for p in result.state.players] == [2, 2]

    def test_view_handed_to_first_player_in_move_mode(self):
        result = self.controller.end_turn(_make_state(), _NeverSpread())
        assert result.active_player == 0
        assert result.action_mode == ActionKind.MOVE

    def test_outbreak_events_stamped_with_ending_turn(self):
        result = self.controller.end_turn(_make_state(turn=3), _AlwaysSpread())
        assert [(e.city, e.turn) for e in result.events] == [("Atlanta", 3)]
        assert result.state.turn == 4
        assert result.state.outbreak_count == 2

    def test_quiet_turn_has_no_events(self):
        result = self.controller.end_turn(_make_state(), _NeverSpread())
        assert result.events == ()
        assert result.state.outbreak_count == 1

    def test_injected_spread_engine(self):
        engine = SpreadEngine(GameConfig(spread_probability=0.0))
        controller = TurnController(spread_engine=engine)
        result = controller.end_turn(_make_state(), _AlwaysSpread())
        assert result.state.city("Atlanta").disease_levels == (2, 0, 0, 0)

    def test_counters_never_decrease(self):
        rng = random.Random(7)
        state = _make_state()
        for _ in range(20):
            result = self.controller.end_turn(state, rng)
            assert result.state.turn == state.turn + 1
            assert result.state.outbreak_count >= state.outbreak_count
            for before, after in zip(state.cities, result.state.cities):
                assert all(0 <= level <= 3 for level in after.disease_levels)
                if before.outbreak:
                    assert after.outbreak
            state = result.state
