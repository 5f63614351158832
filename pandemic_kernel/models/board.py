"""Board — cities, players, diseases and the game-state snapshot."""

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


class DiseaseColor(str, Enum):
    """Disease colors, declared in treatment priority order."""
    RED = "red"
    BLUE = "blue"
    YELLOW = "yellow"
    BLACK = "black"


DISEASE_COLORS: List[DiseaseColor] = list(DiseaseColor)


class PlayerRole(str, Enum):
    SCIENTIST = "Scientist"
    MEDIC = "Medic"
    RESEARCHER = "Researcher"
    OPERATIONS_EXPERT = "Operations Expert"
    DISPATCHER = "Dispatcher"
    QUARANTINE_SPECIALIST = "Quarantine Specialist"
    CONTINGENCY_PLANNER = "Contingency Planner"


class City(BaseModel):
    """
    A city on the board.

    Disease levels are confidential: only a holder of a reveal authorization
    may read them, unless the city is in outbreak, which makes them public.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    disease_levels: Tuple[int, int, int, int] = (0, 0, 0, 0)
    outbreak: bool = False                  # Publicly visible once true
    connections: Tuple[str, ...] = ()       # Topology, not used by spread

    @model_validator(mode="after")
    def _levels_in_range(self) -> "City":
        for level in self.disease_levels:
            if level < 0 or level > 3:
                raise ValueError(f"disease level {level} out of range [0, 3]")
        return self

    def first_infected_color(self) -> Optional[int]:
        """Index of the first color (priority order) with a level above zero."""
        for index, level in enumerate(self.disease_levels):
            if level > 0:
                return index
        return None


class Player(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    position: str                           # City name
    role: PlayerRole
    actions: int = Field(ge=0, default=4)   # Remaining budget this turn


class Disease(BaseModel):
    """Cure state of one disease color. Eradication implies a cure."""
    model_config = ConfigDict(frozen=True)

    color: DiseaseColor
    cured: bool = False
    eradicated: bool = False

    @model_validator(mode="after")
    def _eradicated_implies_cured(self) -> "Disease":
        if self.eradicated and not self.cured:
            raise ValueError(f"{self.color.value} disease cannot be eradicated before it is cured")
        return self


class OutbreakEvent(BaseModel):
    """A city's outbreak flag flipping to true, stamped with the turn it happened on."""
    model_config = ConfigDict(frozen=True)

    city: str
    turn: int


class GameState(BaseModel):
    """
    The authoritative snapshot. Replaced wholesale on every mutation;
    the previous snapshot is never shared after a change.
    """
    model_config = ConfigDict(frozen=True)

    cities: Tuple[City, ...]                # Display / iteration order
    players: Tuple[Player, ...]             # Turn order
    outbreak_count: int = Field(ge=0, default=0)
    infection_rate: int = 2
    turn: int = Field(ge=1, default=1)

    def city(self, name: str) -> Optional[City]:
        for city in self.cities:
            if city.name == name:
                return city
        return None

    def replace_city(self, updated: City) -> "GameState":
        cities = tuple(updated if c.name == updated.name else c for c in self.cities)
        return self.model_copy(update={"cities": cities})

    def replace_player(self, index: int, updated: Player) -> "GameState":
        players = list(self.players)
        players[index] = updated
        return self.model_copy(update={"players": tuple(players)})


def initial_diseases() -> Tuple[Disease, ...]:
    return tuple(Disease(color=color) for color in DISEASE_COLORS)


# --- Serialized (sealed) form ---

class SealedCity(BaseModel):
    """A city as written to storage: levels replaced by sealed values."""

    name: str
    disease_levels: List[str]
    outbreak: bool = False
    connections: List[str] = []


class SealedGameState(BaseModel):
    """GameState as persisted. Everything but disease levels is plain."""

    cities: List[SealedCity]
    players: List[Player]
    outbreak_count: int = 0
    infection_rate: int = 2
    turn: int = 1
