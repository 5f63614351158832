"""
Pandemic Kernel API — FastAPI endpoints.

Exposes one Game Table over REST for:
- Game lifecycle (new game, reload from storage)
- City selection and signed reveals
- Action mode, active player, perform action
- End of turn
- Outbreak history and disease status
"""

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from pandemic_kernel.config.settings import Settings
from pandemic_kernel.models.session import ActionKind, ErrorKind, StatusReport
from pandemic_kernel.persistence.store import SQLiteGameStore
from pandemic_kernel.reveal.protocol import (
    LocalAccountIdentity,
    PresignedIdentity,
    start_reveal_session,
)
from pandemic_kernel.session.table import GameTable, UnknownCity

logger = logging.getLogger(__name__)


# --- Request/Response Models ---

class SelectCityRequest(BaseModel):
    city: str


class RevealRequest(BaseModel):
    city: str
    address: str
    signature: str


class ActionModeRequest(BaseModel):
    mode: ActionKind


class ActivePlayerRequest(BaseModel):
    index: int


# --- Application Factory ---

def build_table(settings: Settings) -> GameTable:
    """Wire a Game Table from settings: SQLite store, local identity, fresh challenge."""
    return GameTable(
        store=SQLiteGameStore(settings.db_path),
        identity_provider=LocalAccountIdentity(private_key=settings.identity_private_key),
        challenge=start_reveal_session(
            contract_address=settings.contract_address,
            chain_id=settings.chain_id,
            duration_days=settings.reveal_duration_days,
        ),
        config=settings.game_config(),
    )


def create_app(
    table: Optional[GameTable] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or Settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    app = FastAPI(
        title=settings.app_name,
        description="Cooperative epidemic game with sealed disease levels",
        version="0.1.0",
    )

    gt = table or build_table(settings)
    app.state.table = gt

    def shared_view() -> dict:
        # Revealed levels go only to the caller who signed for them
        return gt.view.model_dump(mode="json", exclude={"decrypted_levels"})

    def respond(report: StatusReport) -> dict:
        if report.kind == ErrorKind.AUTH_FAILED:
            raise HTTPException(403, report.message)
        if report.kind == ErrorKind.DECODE_ERROR:
            raise HTTPException(422, report.message)
        return {
            "status": report.model_dump(mode="json"),
            "view": shared_view(),
        }

    def require_game() -> None:
        if not gt.has_game:
            raise HTTPException(409, "No game in progress")

    @app.get("/health")
    def health():
        return {"status": "ok", "app": settings.app_name}

    # === GAME ===

    @app.get("/game")
    def get_game():
        """Public board plus the session view."""
        view = gt.public_view()
        return {
            "game": view.model_dump(mode="json") if view else None,
            "view": shared_view(),
        }

    @app.post("/game/new")
    def start_game():
        return respond(gt.start_new_game())

    @app.post("/game/refresh")
    def refresh_game():
        """Reload the sealed snapshot from storage."""
        return respond(gt.refresh())

    @app.post("/game/select")
    def select_city(req: SelectCityRequest):
        """Select a city. Hidden levels need a signed POST /game/reveal."""
        require_game()
        try:
            return respond(gt.select_city(req.city, reveal=False))
        except UnknownCity:
            raise HTTPException(404, "City not found")

    @app.post("/game/reveal")
    def reveal_city(req: RevealRequest):
        """Reveal a city with a signature produced by the caller's wallet."""
        require_game()
        try:
            report = gt.reveal_city(
                req.city, identity_provider=PresignedIdentity(req.address, req.signature)
            )
        except UnknownCity:
            raise HTTPException(404, "City not found")
        body = respond(report)
        body["levels"] = gt.view.decrypted_levels.get(req.city)
        return body

    @app.post("/game/mode")
    def set_mode(req: ActionModeRequest):
        return respond(gt.set_action_mode(req.mode))

    @app.post("/game/player")
    def set_player(req: ActivePlayerRequest):
        require_game()
        return respond(gt.set_active_player(req.index))

    @app.post("/game/action")
    def perform_action():
        require_game()
        return respond(gt.perform_action())

    @app.post("/game/end-turn")
    def end_turn():
        require_game()
        return respond(gt.end_turn())

    @app.get("/game/history")
    def outbreak_history():
        return [e.model_dump(mode="json") for e in gt.view.outbreak_history]

    @app.get("/game/diseases")
    def disease_status():
        return [d.model_dump(mode="json") for d in gt.view.diseases]

    # === REVEAL ===

    @app.get("/reveal/challenge")
    def reveal_challenge():
        """The text a wallet must sign before POST /game/reveal."""
        return {
            "message": gt.challenge.message(),
            "challenge": gt.challenge.model_dump(mode="json"),
        }

    return app


# Default application instance
app = create_app()
