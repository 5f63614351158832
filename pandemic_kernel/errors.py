"""Base error for recoverable kernel failures."""

from typing import Optional

from pandemic_kernel.models.session import ErrorKind


class PandemicKernelError(Exception):
    """
    A failure reported at the interaction boundary, never fatal to the process.

    Subclasses pin `kind` so callers can branch on it without string matching.
    """
    kind: Optional[ErrorKind] = None

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
