"""
Persistence Gateway — stores the sealed game state.

Behavioral Contract:
- Only the sealed form is ever written: every disease level passes through
  the codec first; everything else is plain
- load() returns the sealed form untouched; it never decodes levels
- A failed save raises PersistError and leaves the caller's in-memory state
  as it was (no rollback, no retry)
"""

import sqlite3
from typing import Dict, Optional, Protocol

from pydantic import ValidationError

from pandemic_kernel.confidentiality.codec import ConfidentialityCodec, DecodeError, SealedValue
from pandemic_kernel.errors import PandemicKernelError
from pandemic_kernel.models.board import City, GameState, SealedCity, SealedGameState
from pandemic_kernel.models.session import ErrorKind

GAME_STATE_KEY = "game_state"


class PersistError(PandemicKernelError):
    """Raised when the backing store is unreachable or rejects a write."""
    kind = ErrorKind.PERSIST_ERROR


class GameStore(Protocol):
    def is_available(self) -> bool: ...

    def load(self) -> Optional[SealedGameState]: ...

    def save(self, sealed: SealedGameState) -> None: ...


def seal_state(state: GameState, codec: ConfidentialityCodec) -> SealedGameState:
    """Serialize a snapshot with every city's levels sealed."""
    return SealedGameState(
        cities=[
            SealedCity(
                name=c.name,
                disease_levels=[codec.seal(level) for level in c.disease_levels],
                outbreak=c.outbreak,
                connections=list(c.connections),
            )
            for c in state.cities
        ],
        players=list(state.players),
        outbreak_count=state.outbreak_count,
        infection_rate=state.infection_rate,
        turn=state.turn,
    )


def restore_state(sealed: SealedGameState, codec: ConfidentialityCodec) -> GameState:
    """
    Rebuild the engine's working snapshot from its sealed form.

    Engine-internal: the result is mutated by the engines and re-sealed,
    never handed to a display. Raises DecodeError on a malformed level or
    one that decodes outside the allowed range.
    """
    try:
        return _build_state(sealed, codec)
    except ValidationError as e:
        raise DecodeError(f"Stored game state holds invalid values: {e.error_count()} error(s)")


def _build_state(sealed: SealedGameState, codec: ConfidentialityCodec) -> GameState:
    return GameState(
        cities=tuple(
            City(
                name=c.name,
                disease_levels=tuple(codec.unseal(SealedValue(v)) for v in c.disease_levels),
                outbreak=c.outbreak,
                connections=tuple(c.connections),
            )
            for c in sealed.cities
        ),
        players=tuple(sealed.players),
        outbreak_count=sealed.outbreak_count,
        infection_rate=sealed.infection_rate,
        turn=sealed.turn,
    )


def _decode_payload(payload: str) -> SealedGameState:
    try:
        return SealedGameState.model_validate_json(payload)
    except ValidationError as e:
        raise PersistError(f"Stored game state is malformed: {e.error_count()} error(s)")


class InMemoryGameStore:
    """
    Dict-backed store for tests and local play.

    `fail_saves` makes every save raise, to exercise the durability gap.
    """

    def __init__(self, available: bool = True, fail_saves: bool = False):
        self.available = available
        self.fail_saves = fail_saves
        self._data: Dict[str, str] = {}
        self.save_count = 0

    def is_available(self) -> bool:
        return self.available

    def load(self) -> Optional[SealedGameState]:
        if not self.available:
            raise PersistError("Contract not available")
        payload = self._data.get(GAME_STATE_KEY)
        return _decode_payload(payload) if payload else None

    def save(self, sealed: SealedGameState) -> None:
        if not self.available or self.fail_saves:
            raise PersistError("Save failed: store rejected the write")
        self._data[GAME_STATE_KEY] = sealed.model_dump_json()
        self.save_count += 1

    def put_raw(self, payload: str) -> None:
        """Write an arbitrary payload, bypassing validation."""
        self._data[GAME_STATE_KEY] = payload


class SQLiteGameStore:
    """
    Key/value store over SQLite, mirroring the contract's getData/setData.
    """

    def __init__(self, db_path: str = ":memory:"):
        self.db_path = db_path
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._init_schema()

    def _init_schema(self) -> None:
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS game_data (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL DEFAULT (datetime('now'))
            )
        """)
        self._conn.commit()

    def is_available(self) -> bool:
        try:
            self._conn.execute("SELECT 1").fetchone()
        except sqlite3.Error:
            return False
        return True

    def load(self) -> Optional[SealedGameState]:
        try:
            row = self._conn.execute(
                "SELECT value FROM game_data WHERE key = ?", (GAME_STATE_KEY,)
            ).fetchone()
        except sqlite3.Error as e:
            raise PersistError(f"Failed to load game state: {e}")
        return _decode_payload(row["value"]) if row else None

    def save(self, sealed: SealedGameState) -> None:
        try:
            self._conn.execute(
                """
                INSERT INTO game_data (key, value, updated_at)
                VALUES (?, ?, datetime('now'))
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (GAME_STATE_KEY, sealed.model_dump_json()),
            )
            self._conn.commit()
        except sqlite3.Error as e:
            raise PersistError(f"Save failed: {e}")

    def close(self) -> None:
        self._conn.close()
