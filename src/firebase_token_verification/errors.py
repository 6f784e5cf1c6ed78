"""Failure reasons and exceptions for Firebase ID token verification.

Verification failures are returned as data (a ``Failure`` carrying one
``FailureReason``), not raised. The exception hierarchy below covers the
places where raising is the right thing to do: missing tokens at the HTTP
edge, callers that opt into ``verify_or_raise``, and deployment mistakes.

Security Note:
    ``FailureReason.message`` is coarse and safe to log or return to clients.
    Never include claim contents from a rejected token in logs or responses.
"""

from __future__ import annotations

from enum import Enum


class FailureReason(Enum):
    """Closed set of reasons a token can be rejected.

    Adding a member is a compatibility break for callers that branch on the
    reason, so the set is fixed.
    """

    INVALID_TOKEN = "invalid_token"
    MISSING_KEY_ID = "missing_key_id"
    UNKNOWN_OR_INVALID_KEY = "unknown_or_invalid_key"
    INVALID_SIGNATURE = "invalid_signature"
    ISSUER_MISMATCH = "issuer_mismatch"
    MALFORMED_CLAIMS = "malformed_claims"
    EXPIRED = "expired"

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES: dict[FailureReason, str] = {
    FailureReason.INVALID_TOKEN: "Invalid JWT",
    FailureReason.MISSING_KEY_ID: "Invalid JWT header, `kid` missing",
    FailureReason.UNKNOWN_OR_INVALID_KEY: "Public key was not found or could not be parsed",
    FailureReason.INVALID_SIGNATURE: "Invalid signature",
    FailureReason.ISSUER_MISMATCH: "Signed by invalid issuer",
    FailureReason.MALFORMED_CLAIMS: "Token claims are missing or malformed",
    FailureReason.EXPIRED: "Expired JWT",
}


class AuthError(Exception):
    """Base exception for authentication failures caused by the request."""


class MissingToken(AuthError):  # noqa: N818
    """Raised when no token could be extracted from the request.

    This occurs when:
    - The Authorization header is missing or not ``Bearer <token>``
    - The configured cookie is missing or empty

    Should result in an HTTP 401 Unauthorized response.
    """


class TokenRejected(AuthError):  # noqa: N818
    """Raised by ``verify_or_raise`` when verification fails.

    Attributes:
        reason: The ``FailureReason`` the pipeline produced.
    """

    def __init__(self, reason: FailureReason) -> None:
        super().__init__(reason.message)
        self.reason = reason


class ConfigurationError(Exception):
    """Raised when issuer configuration or extension wiring is incomplete.

    This is a deployment defect, not an untrusted-input condition, so it is
    not an ``AuthError`` and must never be turned into a 401.
    """


class KeyStoreError(Exception):
    """Raised by a key store whose backing storage returned unusable data."""


class KeyRefreshError(Exception):
    """Raised when the published key set could not be fetched."""


class KeyRefreshThrottled(KeyRefreshError):  # noqa: N818
    """Raised when a key-set refresh is refused by the refresh gate."""
