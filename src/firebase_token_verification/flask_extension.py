"""Flask extension protecting routes with Firebase ID token verification.

Request flow:
1. Extract the token (Authorization header or cookie)
2. Verify it against the configured issuer
3. On success store ``g.firebase_uid`` and ``g.firebase_claims``
4. On failure abort with 401 and the coarse failure message

Configuration problems (no verifier, unknown issuer profile) are raised as
``ConfigurationError`` and surface as server errors, never as 401s.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import TYPE_CHECKING, Any, Final

from flask import Flask, abort, g

from .config import DEFAULT_PROFILE, IssuerConfig, Profile
from .errors import ConfigurationError, MissingToken, TokenRejected
from .extractors import BearerExtractor
from .verifier import FirebaseTokenVerifier

if TYPE_CHECKING:
    from .protocols import Extractor, IssuerSelector, TokenVerifier, ViewFunc
    from .results import Success

logger = logging.getLogger(__name__)

_EXT_KEY: Final[str] = "firebase_auth"
"""Flask extensions registry key for FirebaseAuth."""

KEY_STORE_CONFIG: Final[str] = "FIREBASE_AUTH_KEY_STORE"
"""app.config key holding the KeyStore used when no verifier is passed."""


class FirebaseAuth:
    """
    Flask decorator glue for Firebase authentication.

    Pattern:
        auth = FirebaseAuth()
        auth.init_app(app)   # builds a verifier from app.config

    Usage:
        auth = FirebaseAuth(verifier)

        @app.get("/me")
        @auth.require()
        def me():
            return {"uid": g.firebase_uid}
    """

    def __init__(
        self,
        verifier: TokenVerifier | None = None,
        *,
        issuer: IssuerSelector = DEFAULT_PROFILE,
        extractor: Extractor | None = None,
    ) -> None:
        self._verifier: TokenVerifier | None = verifier
        self._issuer: IssuerSelector = issuer
        self._extractor: Extractor = extractor or BearerExtractor()

    def init_app(
        self,
        app: Flask,
        *,
        verifier: TokenVerifier | None = None,
        issuer: IssuerSelector | None = None,
        extractor: Extractor | None = None,
    ) -> None:
        """Register the extension on ``app``.

        Without a verifier (here or in the constructor) one is built from
        ``app.config``: issuer profiles from the ``FIREBASE_AUTH_*`` keys and
        the key store from ``FIREBASE_AUTH_KEY_STORE``.

        Raises:
            ConfigurationError: No verifier and no key store configured, or
                the extension's issuer profile has no issuer in ``app.config``.
        """
        if verifier is not None:
            self._verifier = verifier
        if issuer is not None:
            self._issuer = issuer
        if extractor is not None:
            self._extractor = extractor

        if self._verifier is None:
            store = app.config.get(KEY_STORE_CONFIG)
            if store is None:
                raise ConfigurationError(
                    f"FirebaseAuth needs a verifier or app.config[{KEY_STORE_CONFIG!r}]"
                )
            config = IssuerConfig.from_mapping(app.config)
            if isinstance(self._issuer, Profile):
                # Fail at startup, not on the first well-formed request
                config.resolve_issuer(self._issuer)
            self._verifier = FirebaseTokenVerifier(store, config=config)

        app.extensions[_EXT_KEY] = self

    def require(self, *, issuer: IssuerSelector | None = None):
        """Decorator requiring a valid Firebase ID token.

        Args:
            issuer: Overrides the extension's issuer for this route.

        Side Effects:
            - Writes ``g.firebase_uid`` and ``g.firebase_claims`` before calling the view.
            - May end the request early with ``abort(401)``.
        """
        selector = issuer if issuer is not None else self._issuer

        def decorator(view: ViewFunc) -> ViewFunc:
            @wraps(view)
            def wrapper(*args: Any, **kwargs: Any) -> Any:
                if self._verifier is None:
                    raise ConfigurationError("FirebaseAuth used before a verifier was configured")

                result = get_verified_claims(
                    self._verifier, issuer=selector, extractor=self._extractor
                )
                g.firebase_uid = result.subject
                g.firebase_claims = result.claims
                return view(*args, **kwargs)

            return wrapper

        return decorator


def get_verified_claims(
    verifier: TokenVerifier,
    *,
    issuer: IssuerSelector = DEFAULT_PROFILE,
    extractor: Extractor | None = None,
) -> Success:
    """
    Verify the current request's token and return the Success result.

    Aborts with 401 when the token is missing or rejected.
    """
    try:
        token = (extractor or BearerExtractor()).extract()
        return verifier.verify_or_raise(token, issuer)
    except MissingToken:
        abort(401, description="Missing token")
    except TokenRejected as e:
        logger.info("Rejected Firebase token: %s", e.reason.value)
        abort(401, description=e.reason.message)
