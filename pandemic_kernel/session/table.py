"""
Game Table — the interaction boundary between a display and the kernel.

Owns the current snapshot (in sealed and working form) and the view state,
wires the engines together, persists after each accepted mutation and turns
every recoverable failure into a StatusReport.

Behavioral Contract:
- Mutations happen in memory first, then persist; a failed persist is a
  warning and the mutation stands
- A snapshot loaded from storage stays sealed until an engine needs to
  mutate it; displays only ever see `public_view()` and revealed values
- Hidden levels reach the view only through RevealAuthorizer + RevealGate
- A failed reveal leaves the decrypted cache as it was
"""

import logging
import random
from typing import List, Optional

from pandemic_kernel.actions.machine import ActionMachine
from pandemic_kernel.confidentiality.codec import (
    ConfidentialityCodec,
    DecodeError,
    SealedValue,
    TextEnvelopeCodec,
)
from pandemic_kernel.engine.spread import RandomSource
from pandemic_kernel.models.board import (
    City,
    GameState,
    Player,
    PlayerRole,
    SealedGameState,
    initial_diseases,
)
from pandemic_kernel.models.config import GameConfig
from pandemic_kernel.models.reveal import RevealChallenge
from pandemic_kernel.models.session import (
    ActionKind,
    ErrorKind,
    PublicCity,
    PublicGameView,
    StatusLevel,
    StatusReport,
    ViewState,
)
from pandemic_kernel.persistence.store import GameStore, PersistError, restore_state, seal_state
from pandemic_kernel.reveal.protocol import (
    AuthFailed,
    IdentityProvider,
    RevealAuthorizer,
    RevealGate,
)
from pandemic_kernel.turns.controller import TurnController

logger = logging.getLogger(__name__)

CITY_NAMES: List[str] = [
    "San Francisco", "Chicago", "Atlanta", "Montreal", "New York",
    "London", "Madrid", "Paris", "Essen", "Milan", "St. Petersburg",
    "Los Angeles", "Mexico City", "Miami", "Bogota", "Lima", "Santiago",
    "Sao Paulo", "Buenos Aires", "Lagos", "Kinshasa", "Johannesburg",
    "Khartoum", "Algiers", "Cairo", "Istanbul", "Moscow", "Tehran",
    "Baghdad", "Riyadh", "Karachi", "Delhi", "Mumbai", "Chennai",
    "Kolkata", "Bangkok", "Jakarta", "Ho Chi Minh City", "Hong Kong",
    "Shanghai", "Beijing", "Seoul", "Tokyo", "Osaka", "Taipei", "Manila",
    "Sydney",
]


class UnknownCity(LookupError):
    """Raised when a city name is not on the board."""
    pass


def new_game(rng: RandomSource, config: Optional[GameConfig] = None) -> GameState:
    """
    The opening board: every city seeded with levels 0-1, four cities
    already in outbreak, a Scientist in Atlanta and a Medic in London.
    """
    config = config or GameConfig()
    cities = tuple(
        City(
            name=name,
            disease_levels=tuple(rng.randrange(2) for _ in range(4)),
            outbreak=name in config.initial_outbreak_cities,
        )
        for name in CITY_NAMES
    )
    players = (
        Player(id=1, position="Atlanta", role=PlayerRole.SCIENTIST, actions=config.actions_per_turn),
        Player(id=2, position="London", role=PlayerRole.MEDIC, actions=config.actions_per_turn),
    )
    return GameState(
        cities=cities,
        players=players,
        outbreak_count=len(config.initial_outbreak_cities),
        infection_rate=config.infection_rate,
        turn=1,
    )


def _ok(message: str) -> StatusReport:
    return StatusReport(status=StatusLevel.SUCCESS, message=message)


def _error(message: str, kind: Optional[ErrorKind] = None) -> StatusReport:
    return StatusReport(status=StatusLevel.ERROR, message=message, kind=kind)


class GameTable:
    """One play session: snapshot, view state, engines and the store."""

    def __init__(
        self,
        store: GameStore,
        identity_provider: IdentityProvider,
        challenge: RevealChallenge,
        codec: Optional[ConfidentialityCodec] = None,
        config: Optional[GameConfig] = None,
        rng: Optional[RandomSource] = None,
        authorizer: Optional[RevealAuthorizer] = None,
    ):
        self.store = store
        self.identity_provider = identity_provider
        self.challenge = challenge
        self.codec = codec or TextEnvelopeCodec()
        self.config = config or GameConfig()
        self.rng = rng or random.Random()
        self.authorizer = authorizer or RevealAuthorizer()
        self.gate = RevealGate(self.codec)
        self.actions = ActionMachine(self.config)
        self.turns = TurnController(config=self.config)

        self.view = ViewState()
        self._sealed: Optional[SealedGameState] = None
        self._state: Optional[GameState] = None

    # -----------------------------
    # Snapshot handling
    # -----------------------------

    @property
    def has_game(self) -> bool:
        return self._sealed is not None

    @property
    def sealed_state(self) -> Optional[SealedGameState]:
        return self._sealed

    def _working_state(self) -> GameState:
        if self._state is None:
            self._state = restore_state(self._sealed, self.codec)
        return self._state

    def _commit(self, state: GameState) -> None:
        self._state = state
        self._sealed = seal_state(state, self.codec)

    def _report(self, report: StatusReport) -> StatusReport:
        self.view.last_status = report
        return report

    def _persist(self) -> Optional[StatusReport]:
        """Save the current sealed snapshot. Returns a warning on failure."""
        try:
            if self.identity_provider.current_identity() is None:
                raise PersistError("Please connect wallet first")
            self.store.save(self._sealed)
        except PersistError as e:
            logger.warning("Persist failed on turn %d: %s", self._sealed.turn, e.message)
            return _error(e.message, e.kind)
        return None

    def public_view(self) -> Optional[PublicGameView]:
        """The board as any viewer may see it: outbreak levels plain, others sealed."""
        if self._sealed is None:
            return None
        cities = []
        for c in self._sealed.cities:
            if c.outbreak:
                try:
                    levels = [self.codec.unseal(SealedValue(v)) for v in c.disease_levels]
                except DecodeError:
                    levels = None
                cities.append(PublicCity(
                    name=c.name, outbreak=True, connections=c.connections, disease_levels=levels,
                ))
            else:
                cities.append(PublicCity(
                    name=c.name, outbreak=False, connections=c.connections,
                    sealed_levels=list(c.disease_levels),
                ))
        return PublicGameView(
            cities=cities,
            players=self._sealed.players,
            outbreak_count=self._sealed.outbreak_count,
            infection_rate=self._sealed.infection_rate,
            turn=self._sealed.turn,
        )

    # -----------------------------
    # Session lifecycle
    # -----------------------------

    def start_new_game(self) -> StatusReport:
        self._commit(new_game(self.rng, self.config))
        self.view = ViewState(diseases=initial_diseases())
        logger.info("New game started with %d cities", len(self._sealed.cities))
        return self._report(_ok("New game started"))

    def refresh(self) -> StatusReport:
        """Reload the snapshot from the store; an empty store keeps the current game."""
        if not self.store.is_available():
            return self._report(_error("Contract not available", ErrorKind.PERSIST_ERROR))
        try:
            sealed = self.store.load()
        except PersistError as e:
            logger.warning("Load failed: %s", e.message)
            return self._report(_error("Error loading game state", e.kind))
        if sealed is None:
            return self._report(_ok("No saved game found"))

        self._sealed = sealed
        self._state = None
        self.view.selected_city = None
        self.view.decrypted_levels = {}
        return self._report(_ok("Game state loaded"))

    # -----------------------------
    # Selection and reveal
    # -----------------------------

    def select_city(self, name: str, reveal: bool = True) -> StatusReport:
        """
        Toggle selection of a city.

        Selecting a hidden city requests a reveal with the session identity
        unless `reveal` is false, in which case only the selection changes.
        """
        if not self.has_game:
            return self._report(_error("No game in progress"))
        city = next((c for c in self._sealed.cities if c.name == name), None)
        if city is None:
            raise UnknownCity(name)

        if self.view.selected_city == name:
            self.view.selected_city = None
            return self._report(_ok(f"{name} deselected"))

        self.view.selected_city = name
        if city.outbreak:
            return self._report(_ok(f"{name} is in outbreak; disease levels are public"))
        if not reveal:
            return self._report(_ok(f"{name} selected"))
        return self.reveal_city(name)

    def reveal_city(
        self,
        name: str,
        identity_provider: Optional[IdentityProvider] = None,
    ) -> StatusReport:
        """
        Authorize and unseal all four levels of a city as one operation.

        `identity_provider` overrides the session identity for this reveal.
        """
        if not self.has_game:
            return self._report(_error("No game in progress"))
        city = next((c for c in self._sealed.cities if c.name == name), None)
        if city is None:
            raise UnknownCity(name)

        try:
            token = self.authorizer.authorize(
                identity_provider or self.identity_provider, self.challenge, scope=name
            )
            levels = self.gate.reveal_city(
                token, name, [SealedValue(v) for v in city.disease_levels]
            )
        except AuthFailed as e:
            return self._report(_error(e.message, e.kind))
        except DecodeError as e:
            logger.warning("Reveal of %s failed to decode: %s", name, e.message)
            return self._report(_error("Failed to decrypt disease data", e.kind))

        self.view.decrypted_levels[name] = levels
        return self._report(_ok("Disease spread decrypted!"))

    # -----------------------------
    # Actions and turns
    # -----------------------------

    def set_action_mode(self, kind: ActionKind) -> StatusReport:
        self.view.action_mode = kind
        return self._report(_ok(f"Action mode: {kind.value}"))

    def set_active_player(self, index: int) -> StatusReport:
        if not self.has_game:
            return self._report(_error("No game in progress"))
        if not 0 <= index < len(self._sealed.players):
            return self._report(_error(f"No player at index {index}"))
        self.view.active_player = index
        return self._report(_ok(f"Player {self._sealed.players[index].id} is active"))

    def perform_action(self) -> StatusReport:
        if not self.has_game:
            return self._report(_error("No game in progress"))
        try:
            state = self._working_state()
        except DecodeError as e:
            return self._report(_error("Stored game state could not be decoded", e.kind))

        outcome = self.actions.perform(
            state,
            self.view.diseases,
            self.view.active_player,
            self.view.action_mode,
            self.view.selected_city,
            self.rng,
        )
        if not outcome.accepted:
            return self._report(_error(outcome.detail or outcome.rejection_reason))

        self._commit(outcome.state)
        self.view.diseases = outcome.diseases
        self.view.decrypted_levels.pop(self.view.selected_city, None)

        warning = self._persist()
        return self._report(warning or _ok(outcome.detail or "Action performed"))

    def end_turn(self) -> StatusReport:
        if not self.has_game:
            return self._report(_error("No game in progress"))
        try:
            state = self._working_state()
        except DecodeError as e:
            return self._report(_error("Stored game state could not be decoded", e.kind))

        result = self.turns.end_turn(state, self.rng)
        self._commit(result.state)
        self.view.outbreak_history = self.view.outbreak_history + result.events
        self.view.active_player = result.active_player
        self.view.action_mode = result.action_mode
        self.view.decrypted_levels = {}

        warning = self._persist()
        return self._report(warning or _ok(f"Turn {result.state.turn} begins"))
