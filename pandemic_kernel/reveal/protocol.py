"""
Reveal Authorization Protocol — gates decoding of hidden disease levels.

Before a hidden value is surfaced, the viewer signs a canonical challenge
bound to a per-session public key, the storage contract address, the chain
id, a start timestamp and a validity duration. A verified signature yields an
AuthorizationToken; the RevealGate then unseals each hidden value at most once
per token.

Behavioral Contract:
- No connected identity, a declined signature, or a signature that does not
  recover to the identity's address fails with AuthFailed
- Authorization never mutates game state
- The duration is carried in the signed text only; no expiry is enforced
- A city reveal decodes all of its values or none of them
"""

import logging
import secrets
import time
from datetime import datetime
from typing import Callable, List, Optional, Protocol, Sequence
from uuid import uuid4

from eth_account import Account
from eth_account.messages import encode_defunct

from pandemic_kernel.confidentiality.codec import ConfidentialityCodec, SealedValue
from pandemic_kernel.errors import PandemicKernelError
from pandemic_kernel.models.reveal import AuthorizationToken, Identity, RevealChallenge
from pandemic_kernel.models.session import ErrorKind

logger = logging.getLogger(__name__)

PUBLIC_KEY_HEX_CHARS = 2000


class AuthFailed(PandemicKernelError):
    """Raised when a reveal cannot be authorized."""
    kind = ErrorKind.AUTH_FAILED


class UserDeclined(PandemicKernelError):
    """Raised by an identity provider when its holder refuses to sign."""
    kind = ErrorKind.AUTH_FAILED


class IdentityProvider(Protocol):
    """Wallet-equivalent: who is connected, and a way to get their signature."""

    def current_identity(self) -> Optional[Identity]: ...

    def sign(self, message: str) -> str: ...


SignatureVerifier = Callable[[str, str, str], bool]


def verify_personal_signature(message: str, signature: str, address: str) -> bool:
    """Check an EIP-191 personal-sign signature recovers to `address`."""
    try:
        recovered = Account.recover_message(encode_defunct(text=message), signature=signature)
    except Exception as e:
        logger.debug("Signature recovery failed: %s", e)
        return False
    return recovered.lower() == address.lower()


class LocalAccountIdentity:
    """
    Identity provider backed by a local eth-account key.

    Used for local play and tests; a browser wallet fills the same role
    in the hosted game.
    """

    def __init__(
        self,
        private_key: Optional[str] = None,
        connected: bool = True,
        declines: bool = False,
        label: Optional[str] = None,
    ):
        self._account = Account.from_key(private_key) if private_key else Account.create()
        self.connected = connected
        self.declines = declines
        self.label = label

    @property
    def address(self) -> str:
        return self._account.address

    def current_identity(self) -> Optional[Identity]:
        if not self.connected:
            return None
        return Identity(address=self._account.address, label=self.label)

    def sign(self, message: str) -> str:
        if self.declines:
            raise UserDeclined("User rejected the signature request")
        signed = self._account.sign_message(encode_defunct(text=message))
        return "0x" + bytes(signed.signature).hex()


def generate_public_key() -> str:
    return "0x" + secrets.token_hex(PUBLIC_KEY_HEX_CHARS // 2)


def start_reveal_session(
    contract_address: str,
    chain_id: int,
    duration_days: int = 30,
    now: Optional[float] = None,
) -> RevealChallenge:
    """Fresh challenge parameters for a play session."""
    started = int(now if now is not None else time.time())
    return RevealChallenge(
        public_key=generate_public_key(),
        contract_address=contract_address,
        chain_id=chain_id,
        start_timestamp=started,
        duration_days=duration_days,
    )


class RevealAuthorizer:
    """Turns a signed challenge into an AuthorizationToken for one reveal."""

    def __init__(self, verifier: SignatureVerifier = verify_personal_signature):
        self._verify = verifier

    def authorize(
        self,
        identity_provider: IdentityProvider,
        challenge: RevealChallenge,
        scope: str,
    ) -> AuthorizationToken:
        identity = identity_provider.current_identity()
        if identity is None:
            raise AuthFailed("Please connect wallet first")

        message = challenge.message()
        try:
            signature = identity_provider.sign(message)
        except UserDeclined as e:
            logger.warning("Reveal of %s declined by %s", scope, identity.address)
            raise AuthFailed(f"Signature declined: {e.message}")

        if not self._verify(message, signature, identity.address):
            logger.warning("Reveal of %s: signature does not match %s", scope, identity.address)
            raise AuthFailed("Signature does not match the connected identity")

        return AuthorizationToken(
            id=f"auth_{uuid4().hex[:12]}",
            address=identity.address,
            scope=scope,
            challenge=challenge,
            signature=signature,
            issued_at=datetime.utcnow(),
        )


class RevealGate:
    """
    The only path from a sealed value to a displayed one.

    GUARD: every unseal consumes one slot of a token scoped to the city.
    """

    def __init__(self, codec: ConfidentialityCodec):
        self._codec = codec

    def unseal(
        self,
        token: AuthorizationToken,
        scope: str,
        index: int,
        sealed: SealedValue,
    ) -> int:
        if token.scope != scope:
            raise AuthFailed(f"Authorization covers {token.scope}, not {scope}")
        if index in token.consumed:
            raise AuthFailed(f"Value {index} of {scope} was already revealed with this authorization")
        token.consumed.add(index)
        return self._codec.unseal(sealed)

    def reveal_city(
        self,
        token: AuthorizationToken,
        city_name: str,
        sealed_levels: Sequence[SealedValue],
    ) -> List[int]:
        """Unseal every level of a city. Any failure discards the partial result."""
        levels = [
            self.unseal(token, city_name, index, sealed)
            for index, sealed in enumerate(sealed_levels)
        ]
        logger.info("Revealed %s for %s", city_name, token.address)
        return levels


class PresignedIdentity:
    """
    Identity whose signature was produced elsewhere, such as a browser
    wallet, and submitted alongside the reveal request.
    """

    def __init__(self, address: str, signature: str):
        self.address = address
        self.signature = signature

    def current_identity(self) -> Optional[Identity]:
        return Identity(address=self.address)

    def sign(self, message: str) -> str:
        return self.signature
