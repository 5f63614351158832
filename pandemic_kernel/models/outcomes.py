"""Outcomes returned by the spread engine, action machine and turn controller."""

from typing import Optional, Tuple

from pydantic import BaseModel

from pandemic_kernel.models.board import Disease, GameState, OutbreakEvent
from pandemic_kernel.models.session import ActionKind


class SpreadResult(BaseModel):
    state: GameState
    events: Tuple[OutbreakEvent, ...] = ()


class ActionOutcome(BaseModel):
    """Result of one perform-action attempt. Rejections carry the unchanged state."""

    kind: ActionKind
    state: GameState
    diseases: Tuple[Disease, ...]
    accepted: bool
    rejection_reason: Optional[str] = None  # Machine-readable
    detail: Optional[str] = None            # Human-readable


class TurnResult(BaseModel):
    state: GameState
    events: Tuple[OutbreakEvent, ...] = ()
    active_player: int = 0
    action_mode: ActionKind = ActionKind.MOVE
