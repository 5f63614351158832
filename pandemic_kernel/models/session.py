"""Session view state and interaction status reports."""

from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel

from pandemic_kernel.models.board import Disease, OutbreakEvent, Player, initial_diseases


class ActionKind(str, Enum):
    MOVE = "move"
    TREAT = "treat"
    BUILD = "build"
    SHARE = "share"
    DISCOVER = "discover"


class ErrorKind(str, Enum):
    AUTH_FAILED = "auth_failed"
    DECODE_ERROR = "decode_error"
    PERSIST_ERROR = "persist_error"


class StatusLevel(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


class StatusReport(BaseModel):
    """Outcome of one interaction: short message plus a machine-checkable kind."""

    status: StatusLevel
    message: str
    kind: Optional[ErrorKind] = None


class ViewState(BaseModel):
    """
    State owned by the display surface.

    The core reads it only through explicit parameters and hands back
    replacements; it never keeps hidden globals of its own.
    """

    selected_city: Optional[str] = None
    decrypted_levels: Dict[str, List[int]] = {}
    outbreak_history: Tuple[OutbreakEvent, ...] = ()
    diseases: Tuple[Disease, ...] = initial_diseases()
    active_player: int = 0
    action_mode: ActionKind = ActionKind.MOVE
    last_status: Optional[StatusReport] = None


class PublicCity(BaseModel):
    """
    What a display may show for a city without a reveal.

    Outbreak cities carry plain `disease_levels`; every other city carries
    only `sealed_levels`.
    """

    name: str
    outbreak: bool
    connections: List[str] = []
    disease_levels: Optional[List[int]] = None
    sealed_levels: Optional[List[str]] = None


class PublicGameView(BaseModel):
    cities: List[PublicCity]
    players: List[Player]
    outbreak_count: int
    infection_rate: int
    turn: int
