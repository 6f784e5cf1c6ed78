"""Protocol definitions for Firebase ID token verification.

This module defines structural interfaces using Protocol (PEP 544) for:
- Key lookup (the read side the verifier depends on)
- Key-set population (the write side used by loaders)
- Token verification
- Token extraction

Any class that implements the required methods satisfies the protocol, so
tests can hand the verifier a plain object with a ``lookup`` method.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from .config import Profile
    from .results import Success, VerificationResult

# ============================================================================
# Type Aliases
# ============================================================================

type Claims = Mapping[str, Any]
"""Decoded payload of a verified token."""

type KeyMaterial = Any
"""Whatever a key store holds for a kid: a PyJWK, a JWK mapping, a PEM
certificate or public key, or a loaded ``cryptography`` public key."""

type IssuerSelector = str | Profile
"""Literal issuer string, or a named profile resolved through configuration."""

type ViewFunc = Callable[..., Any]
"""Flask view function."""


# ============================================================================
# Core Protocols
# ============================================================================


class KeyStore(Protocol):
    """Read interface of the public-key store.

    Implementations must tolerate concurrent readers. A ``None`` result means
    "key unknown"; the verifier does not care whether the key never existed
    or was rotated out.
    """

    def lookup(self, kid: str) -> KeyMaterial | None:
        """Return the key material stored under ``kid``, or None.

        Raises:
            KeyStoreError: The backing storage returned corrupt data.
        """
        ...


class WritableKeyStore(KeyStore, Protocol):
    """Key store that a loader can populate."""

    def replace_all(self, keys: Mapping[str, KeyMaterial]) -> None:
        """Replace the whole key set with ``keys``."""
        ...


class TokenVerifier(Protocol):
    """Protocol for token verification implementations."""

    def verify(self, token: str, issuer: IssuerSelector = ...) -> VerificationResult:
        """Run the verification pipeline and classify the outcome.

        Never raises for untrusted-input failures.

        Raises:
            ConfigurationError: ``issuer`` is a profile that cannot be resolved.
        """
        ...

    def verify_or_raise(self, token: str, issuer: IssuerSelector = ...) -> Success:
        """Like ``verify`` but raises ``TokenRejected`` on failure."""
        ...


class Extractor(Protocol):
    """Protocol for pulling the raw token out of a Flask request."""

    def extract(self) -> str:
        """Return the raw token string.

        Raises:
            MissingToken: Token not found or improperly formatted.
        """
        ...
