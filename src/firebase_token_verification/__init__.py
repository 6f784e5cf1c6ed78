"""
Firebase ID token verification.

Flow (per call)
---------------
1. `FirebaseTokenVerifier.verify(token, issuer)`:
   - Reads the unverified header to get `kid`         -> InvalidToken / MissingKeyId
   - Resolves the expected issuer (literal or Profile)
   - Looks `kid` up in the injected KeyStore            -> UnknownOrInvalidKey
   - Verifies the signature with PyJWT                  -> InvalidSignature
   - Checks `iss`, then `sub` / `exp` shape             -> IssuerMismatch / MalformedClaims
   - Compares `exp` with the clock (exp == now fails)   -> Expired
2. Returns `Success(subject, claims)` or `Failure(reason)`.

Keys are populated out-of-band, e.g. by `GoogleKeySetLoader.refresh(store)`.

Security notes
--------------
- Claims are never inspected before the signature verifies.
- Only allow known algorithms (RS256 for Firebase).
- Failure reasons are coarse and safe to log; claim contents of rejected
  tokens are never exposed.

Example usage
-------------

.. code-block:: python

    from firebase_token_verification import (
        FirebaseAuth,
        FirebaseTokenVerifier,
        GoogleKeySetLoader,
        InMemoryKeyStore,
        IssuerConfig,
    )

    store = InMemoryKeyStore()
    GoogleKeySetLoader().refresh(store)

    verifier = FirebaseTokenVerifier(store, config=IssuerConfig.from_env())

    result = verifier.verify(raw_token)
    if result.ok:
        print(result.subject)

    # Flask
    auth = FirebaseAuth(verifier)

    @app.route("/me")
    @auth.require()
    def me():
        return {"uid": g.firebase_uid}
"""

# Configuration
from .config import DEFAULT_PROFILE, IssuerConfig, Profile, issuer_for_project

# Errors
from .errors import (
    AuthError,
    ConfigurationError,
    FailureReason,
    KeyRefreshError,
    KeyRefreshThrottled,
    KeyStoreError,
    MissingToken,
    TokenRejected,
)

# Extractors
from .extractors import BearerExtractor, CookieExtractor

# Flask extension
from .flask_extension import FirebaseAuth, get_verified_claims

# Key loaders
from .key_loaders import GOOGLE_SECURETOKEN_JWKS_URL, GoogleKeySetLoader

# Key stores
from .key_stores import InMemoryKeyStore, RedisKeyStore

# Keys
from .keys import InvalidKeyMaterial, load_public_key

# Protocols
from .protocols import (
    Claims,
    Extractor,
    IssuerSelector,
    KeyMaterial,
    KeyStore,
    TokenVerifier,
    ViewFunc,
    WritableKeyStore,
)

# Refresh gate
from .refresh_gate import RefreshGate

# Results
from .results import Failure, Success, VerificationResult

# Verifier
from .verifier import FirebaseTokenVerifier

__all__ = [
    # Configuration
    "DEFAULT_PROFILE",
    "IssuerConfig",
    "Profile",
    "issuer_for_project",
    # Errors
    "AuthError",
    "ConfigurationError",
    "FailureReason",
    "KeyRefreshError",
    "KeyRefreshThrottled",
    "KeyStoreError",
    "MissingToken",
    "TokenRejected",
    # Protocols
    "Claims",
    "Extractor",
    "IssuerSelector",
    "KeyMaterial",
    "KeyStore",
    "TokenVerifier",
    "ViewFunc",
    "WritableKeyStore",
    # Results
    "Failure",
    "Success",
    "VerificationResult",
    # Keys
    "InvalidKeyMaterial",
    "load_public_key",
    # Key stores
    "InMemoryKeyStore",
    "RedisKeyStore",
    # Key loaders
    "GOOGLE_SECURETOKEN_JWKS_URL",
    "GoogleKeySetLoader",
    # Refresh gate
    "RefreshGate",
    # Verifier
    "FirebaseTokenVerifier",
    # Flask extension
    "FirebaseAuth",
    "get_verified_claims",
]
