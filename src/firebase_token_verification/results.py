"""Verification outcomes.

Every call to ``FirebaseTokenVerifier.verify`` produces exactly one of
``Success`` or ``Failure``. Claims only ever appear on ``Success``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .errors import FailureReason
from .protocols import Claims


@dataclass(frozen=True, slots=True)
class Success:
    """Token verified.

    Attributes:
        subject: The ``sub`` claim (Firebase user id).
        claims: Full decoded payload, including ``iss``, ``sub`` and ``exp``.
    """

    subject: str
    claims: Claims
    ok: Literal[True] = True


@dataclass(frozen=True, slots=True)
class Failure:
    """Token rejected for ``reason``."""

    reason: FailureReason
    ok: Literal[False] = False

    @property
    def message(self) -> str:
        return self.reason.message


type VerificationResult = Success | Failure
