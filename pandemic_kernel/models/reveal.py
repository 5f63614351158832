"""Reveal — identity, signed challenge and authorization token."""

from datetime import datetime
from typing import List, Optional, Set

from pydantic import BaseModel, Field


class Identity(BaseModel):
    """A connected viewer, identified by the address that signs for it."""

    address: str
    label: Optional[str] = None


class RevealChallenge(BaseModel):
    """
    The parameters a viewer signs before any hidden value is decoded.

    `start_timestamp` and `duration_days` are embedded in the signed text
    but nothing checks them against the clock.
    """

    public_key: str
    contract_address: str
    chain_id: int
    start_timestamp: int                    # Unix seconds
    duration_days: int = Field(ge=1, default=30)

    def message(self) -> str:
        """Canonical challenge text, byte-for-byte what the identity signs."""
        return (
            f"publickey:{self.public_key}\n"
            f"contractAddresses:{self.contract_address}\n"
            f"contractsChainId:{self.chain_id}\n"
            f"startTimestamp:{self.start_timestamp}\n"
            f"durationDays:{self.duration_days}"
        )


class AuthorizationToken(BaseModel):
    """
    Proof that `address` signed `challenge` for one reveal of `scope`.

    Each hidden value index may be unsealed once; `consumed` records the
    indices already used.
    """

    id: str
    address: str
    scope: str                              # City name being revealed
    challenge: RevealChallenge
    signature: str
    issued_at: datetime
    consumed: Set[int] = set()

    def remaining(self, count: int) -> List[int]:
        return [i for i in range(count) if i not in self.consumed]
