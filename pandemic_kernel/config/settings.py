"""
Application settings.

Values load from the environment (prefix ``PANDEMIC_``) or a ``.env`` file;
the defaults suit a local dev game backed by an on-disk SQLite file.

Example ``.env``:

    PANDEMIC_DB_PATH="/var/opt/pandemic/game.db"
    PANDEMIC_CONTRACT_ADDRESS="0x5FbDB2315678afecb367f032d93F642f64180aa3"
    PANDEMIC_CHAIN_ID=11155111
    PANDEMIC_SPREAD_PROBABILITY=0.3
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from pandemic_kernel.models.config import GameConfig


class Settings(BaseSettings):
    app_name: str = "Pandemic Kernel"
    log_level: str = "INFO"

    # Persistence gateway
    db_path: str = ":memory:"

    # Network context embedded in reveal challenges
    contract_address: str = "0x0000000000000000000000000000000000000000"
    chain_id: int = 31337
    reveal_duration_days: int = 30

    # Local signing key for the server-side identity; a fresh key when unset
    identity_private_key: Optional[str] = None

    # Rule knobs
    actions_per_turn: int = 4
    spread_probability: float = 0.3
    cure_probability: float = 0.3
    discover_consumes_on_failure: bool = True

    model_config = SettingsConfigDict(
        env_prefix="PANDEMIC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def game_config(self) -> GameConfig:
        return GameConfig(
            actions_per_turn=self.actions_per_turn,
            spread_probability=self.spread_probability,
            cure_probability=self.cure_probability,
            discover_consumes_on_failure=self.discover_consumes_on_failure,
        )


settings = Settings()
