"""
Confidentiality Codec — the boundary between hidden and revealed values.

This is a boundary marker, NOT encryption. The sealed text is a reversible
encoding; anyone able to run code against the store can decode it without
authorization. Its job is to make "needs a reveal to view" visible in the
data flow so a real homomorphic or threshold scheme can be dropped in later
behind `ConfidentialityCodec` without touching the models or engines.

Sealed form: ``FHE-<base64 of the decimal text>``.
"""

import base64
from typing import NewType, Protocol

from pandemic_kernel.errors import PandemicKernelError
from pandemic_kernel.models.session import ErrorKind

SealedValue = NewType("SealedValue", str)

SEAL_PREFIX = "FHE-"


class DecodeError(PandemicKernelError):
    """Raised when a sealed value cannot be decoded."""
    kind = ErrorKind.DECODE_ERROR


class ConfidentialityCodec(Protocol):
    def seal(self, value: int) -> SealedValue: ...

    def unseal(self, sealed: SealedValue) -> int: ...


def _parse_int(text: str, original: str) -> int:
    try:
        return int(text.strip())
    except ValueError:
        raise DecodeError(f"Sealed value {original!r} does not hold an integer")


class TextEnvelopeCodec:
    """Base64 text envelope standing in for confidential-computation ciphertext."""

    def seal(self, value: int) -> SealedValue:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"Only integers can be sealed, got {type(value).__name__}")
        payload = base64.b64encode(str(value).encode("ascii")).decode("ascii")
        return SealedValue(f"{SEAL_PREFIX}{payload}")

    def unseal(self, sealed: SealedValue) -> int:
        if not isinstance(sealed, str):
            raise DecodeError(f"Sealed value must be text, got {type(sealed).__name__}")

        if not sealed.startswith(SEAL_PREFIX):
            # Records written before sealing existed hold the bare number
            return _parse_int(sealed, sealed)

        try:
            raw = base64.b64decode(sealed[len(SEAL_PREFIX):], validate=True)
            text = raw.decode("ascii")
        except ValueError:
            raise DecodeError(f"Sealed value {sealed!r} is not a valid envelope")
        return _parse_int(text, sealed)
