"""Game configuration — rule constants and probability knobs."""

from typing import List

from pydantic import BaseModel, Field


class GameConfig(BaseModel):
    """Rule constants for one game. Probabilities are per-roll chances in [0, 1]."""

    actions_per_turn: int = Field(ge=1, default=4)
    max_disease_level: int = Field(ge=1, le=3, default=3)
    spread_probability: float = Field(ge=0.0, le=1.0, default=0.3)
    cure_probability: float = Field(ge=0.0, le=1.0, default=0.3)
    # A failed cure attempt still costs an action when true. Deliberately
    # stricter than the browser game, which charged only on success.
    discover_consumes_on_failure: bool = True
    initial_outbreak_cities: List[str] = ["Tokyo", "New York", "Paris", "Sao Paulo"]
    infection_rate: int = 2
