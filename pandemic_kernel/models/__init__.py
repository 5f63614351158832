"""Pandemic kernel data models."""

from pandemic_kernel.models.board import (
    DISEASE_COLORS,
    City,
    Disease,
    DiseaseColor,
    GameState,
    OutbreakEvent,
    Player,
    PlayerRole,
    SealedCity,
    SealedGameState,
    initial_diseases,
)
from pandemic_kernel.models.config import GameConfig
from pandemic_kernel.models.outcomes import ActionOutcome, SpreadResult, TurnResult
from pandemic_kernel.models.reveal import AuthorizationToken, Identity, RevealChallenge
from pandemic_kernel.models.session import (
    ActionKind,
    ErrorKind,
    PublicCity,
    PublicGameView,
    StatusLevel,
    StatusReport,
    ViewState,
)

__all__ = [
    "DISEASE_COLORS",
    "ActionKind",
    "ActionOutcome",
    "AuthorizationToken",
    "City",
    "Disease",
    "DiseaseColor",
    "ErrorKind",
    "GameConfig",
    "GameState",
    "Identity",
    "OutbreakEvent",
    "Player",
    "PlayerRole",
    "PublicCity",
    "PublicGameView",
    "RevealChallenge",
    "SealedCity",
    "SealedGameState",
    "SpreadResult",
    "StatusLevel",
    "StatusReport",
    "TurnResult",
    "ViewState",
    "initial_diseases",
]
