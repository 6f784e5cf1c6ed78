"""Firebase ID token verification using PyJWT.

This module provides the verification pipeline:
- Reads the unverified header to get the key ID (kid)
- Resolves the issuer (literal string or configured profile)
- Looks the key up in an injected KeyStore
- Verifies the signature with PyJWT, then classifies the claims
- Checks expiry against a single clock reading

Steps run in that order and the first failing step decides the result.
Nothing from a later step (in particular, no claim content) is revealed
when an earlier step fails.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Final

import jwt

from .config import DEFAULT_PROFILE, IssuerConfig, Profile
from .errors import ConfigurationError, FailureReason, KeyStoreError, TokenRejected
from .keys import InvalidKeyMaterial, load_public_key
from .results import Failure, Success

if TYPE_CHECKING:
    from .keys import PublicKey
    from .protocols import IssuerSelector, KeyStore
    from .results import VerificationResult

logger = logging.getLogger(__name__)

_DECODE_OPTIONS: Final[dict[str, Any]] = {
    # Signature only; issuer and expiry are classified by the pipeline itself.
    "verify_signature": True,
    "verify_exp": False,
    "verify_nbf": False,
    "verify_iat": False,
    "verify_aud": False,
    "verify_iss": False,
    "verify_sub": False,
    "verify_jti": False,
}

_SIGNATURE_ERRORS: Final = (
    jwt.InvalidSignatureError,
    jwt.InvalidAlgorithmError,
    jwt.InvalidKeyError,
)


class _Rejected(Exception):
    """Internal short-circuit carrying the failure reason."""

    def __init__(self, reason: FailureReason) -> None:
        super().__init__(reason.value)
        self.reason = reason


class FirebaseTokenVerifier:
    """Verifies Firebase / Google Secure Token ID tokens.

    Implements the TokenVerifier protocol. Keys come from an injected
    KeyStore; the verifier never fetches or caches keys itself.

    Thread Safety:
        Holds no mutable state. Safe to share across threads as long as the
        KeyStore's ``lookup`` is.

    Example:
        ```python
        store = InMemoryKeyStore()
        GoogleKeySetLoader().refresh(store)

        verifier = FirebaseTokenVerifier(store, config=IssuerConfig.from_env())

        result = verifier.verify(raw_token)             # default profile
        result = verifier.verify(raw_token, Profile("admin"))
        result = verifier.verify(raw_token, "https://securetoken.google.com/my-project")

        if result.ok:
            user_id = result.subject
        else:
            log.info("rejected: %s", result.reason.value)
        ```
    """

    def __init__(
        self,
        key_store: KeyStore,
        *,
        config: IssuerConfig | None = None,
        algorithms: tuple[str, ...] = ("RS256",),
        clock: Callable[[], float] | None = None,
    ) -> None:
        """Initialize the verifier.

        Args:
            key_store: Read-only source of public keys by kid.
            config: Issuer profiles. Required only when verifying against a
                ``Profile`` rather than a literal issuer.
            algorithms: Allowlist of signing algorithms. Firebase signs with
                RS256; never include "none".
            clock: Returns the current Unix time in seconds. Defaults to
                ``time.time``.
        """
        if not algorithms:
            raise ValueError("algorithms cannot be empty")

        self._keys = key_store
        self._config = config
        self._algorithms = list(algorithms)
        self._clock = clock or time.time

    def verify(self, token: str, issuer: IssuerSelector = DEFAULT_PROFILE) -> VerificationResult:
        """Verify ``token`` and classify the outcome.

        Args:
            token: Raw compact JWT.
            issuer: Expected issuer, or a ``Profile`` naming one in the config.

        Returns:
            ``Success(subject, claims)`` or ``Failure(reason)``.

        Raises:
            ConfigurationError: ``issuer`` is a profile that cannot be resolved.
        """
        kid: str | None = None
        try:
            kid = self._read_kid(token)
            expected_issuer = self._resolve_issuer(issuer)
            key = self._resolve_key(kid)
            claims = self._decode(token, key, expected_issuer)
            self._check_expiry(claims["exp"])
        except _Rejected as e:
            logger.debug("Token rejected: %s (kid=%s)", e.reason.value, kid)
            return Failure(e.reason)

        return Success(subject=claims["sub"], claims=claims)

    def verify_or_raise(self, token: str, issuer: IssuerSelector = DEFAULT_PROFILE) -> Success:
        """Verify ``token``, raising ``TokenRejected`` instead of returning a Failure."""
        result = self.verify(token, issuer)
        if isinstance(result, Failure):
            raise TokenRejected(result.reason)
        return result

    # ------------------------------------------------------------------
    # Pipeline steps
    # ------------------------------------------------------------------

    @staticmethod
    def _read_kid(token: str) -> str:
        if not isinstance(token, str) or token.count(".") != 2:
            raise _Rejected(FailureReason.INVALID_TOKEN)

        try:
            header = jwt.get_unverified_header(token)
        except jwt.DecodeError as e:
            raise _Rejected(FailureReason.INVALID_TOKEN) from e
        except jwt.InvalidTokenError as e:
            # Header decoded, but PyJWT refused its kid (not a string)
            raise _Rejected(FailureReason.MISSING_KEY_ID) from e
        except Exception as e:
            raise _Rejected(FailureReason.INVALID_TOKEN) from e

        kid = header.get("kid")
        if not kid or not isinstance(kid, str):
            raise _Rejected(FailureReason.MISSING_KEY_ID)
        return kid

    def _resolve_issuer(self, issuer: IssuerSelector) -> str:
        if isinstance(issuer, Profile):
            if self._config is None:
                raise ConfigurationError(
                    f"Issuer profile {issuer.name!r} requested but no IssuerConfig was provided"
                )
            return self._config.resolve_issuer(issuer)
        if not isinstance(issuer, str) or not issuer:
            raise ConfigurationError("Expected issuer must be a non-empty string or a Profile")
        return issuer

    def _resolve_key(self, kid: str) -> PublicKey:
        try:
            material = self._keys.lookup(kid)
        except KeyStoreError as e:
            logger.warning("Key store lookup failed for kid=%s: %s", kid, e)
            raise _Rejected(FailureReason.UNKNOWN_OR_INVALID_KEY) from e

        if material is None:
            raise _Rejected(FailureReason.UNKNOWN_OR_INVALID_KEY)

        try:
            return load_public_key(material)
        except InvalidKeyMaterial as e:
            logger.warning("Unusable key material for kid=%s: %s", kid, e)
            raise _Rejected(FailureReason.UNKNOWN_OR_INVALID_KEY) from e

    def _decode(self, token: str, key: PublicKey, expected_issuer: str) -> dict[str, Any]:
        # Claims are only inspected once the signature has been verified.
        try:
            claims = jwt.decode(
                token,
                key,
                algorithms=self._algorithms,
                options=_DECODE_OPTIONS,
            )
        except _SIGNATURE_ERRORS as e:
            raise _Rejected(FailureReason.INVALID_SIGNATURE) from e
        except Exception as e:
            raise _Rejected(FailureReason.MALFORMED_CLAIMS) from e

        iss = claims.get("iss")
        if isinstance(iss, str) and iss != expected_issuer:
            raise _Rejected(FailureReason.ISSUER_MISMATCH)

        sub = claims.get("sub")
        exp = claims.get("exp")
        if (
            not isinstance(iss, str)
            or not isinstance(sub, str)
            or not sub
            or not isinstance(exp, int)
            or isinstance(exp, bool)
        ):
            raise _Rejected(FailureReason.MALFORMED_CLAIMS)

        return claims

    def _check_expiry(self, exp: int) -> None:
        now = int(self._clock())
        # exp == now is already expired
        if exp <= now:
            raise _Rejected(FailureReason.EXPIRED)
