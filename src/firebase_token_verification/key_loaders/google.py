"""
Google Secure Token key-set loader.

Populates a key store with the public keys Google uses to sign Firebase ID
tokens, fetched from the published JWKS endpoint.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

import jwt
from jwt import PyJWK, PyJWKClient

from ..errors import KeyRefreshError, KeyRefreshThrottled
from ..refresh_gate import RefreshGate

if TYPE_CHECKING:
    from ..protocols import WritableKeyStore

logger = logging.getLogger(__name__)

GOOGLE_SECURETOKEN_JWKS_URL: Final[str] = (
    "https://www.googleapis.com/service_accounts/v1/jwk/securetoken@system.gserviceaccount.com"
)


class GoogleKeySetLoader:
    """
    Fetches Google's Firebase signing keys and writes them into a key store.

    Responsibilities
    ----------------
    1. Download the current JWKS (through PyJWKClient).
    2. Keep only signing keys that carry a `kid`.
    3. Replace the store's key set in one call.
    4. Refuse to fetch more often than the RefreshGate allows.

    Nothing here runs on a timer: call `refresh()` at startup, and again
    whenever your application decides the set may be stale (for example after
    a burst of UnknownOrInvalidKey failures). The gate keeps such
    refresh-on-miss logic from turning into an outbound request flood.

    Parameters
    ----------
    jwks_url : str
        JWKS endpoint. Defaults to Google's Secure Token endpoint.

    min_interval : float
        Minimum seconds between fetches.

    alert_threshold : int
        Throttled attempts before the gate logs a warning.

    timeout : int
        HTTP timeout for the fetch, in seconds.

    Example
    -------
    store = InMemoryKeyStore()
    loader = GoogleKeySetLoader()
    loader.refresh(store)
    """

    def __init__(
        self,
        jwks_url: str = GOOGLE_SECURETOKEN_JWKS_URL,
        *,
        min_interval: float = 60.0,
        alert_threshold: int = 20,
        timeout: int = 10,
        gate: RefreshGate | None = None,
    ) -> None:
        self._url = jwks_url
        self._gate = gate or RefreshGate(min_interval=min_interval, alert_threshold=alert_threshold)
        self._client = PyJWKClient(jwks_url, cache_keys=False, timeout=timeout)

    def fetch(self) -> dict[str, PyJWK]:
        """Download the key set and return signing keys by kid.

        Raises:
            KeyRefreshError: The endpoint could not be reached or returned no usable keys.
        """
        try:
            jwk_set = self._client.get_jwk_set(refresh=True)
        except (jwt.PyJWKClientError, jwt.PyJWKSetError) as e:
            logger.warning("Fetching Firebase signing keys from %s failed: %s", self._url, e)
            raise KeyRefreshError("Unable to fetch Firebase signing keys") from e

        keys = {
            key.key_id: key
            for key in jwk_set.keys
            if key.key_id and key.public_key_use in ("sig", None)
        }
        if not keys:
            raise KeyRefreshError("Firebase key set contained no signing keys")
        return keys

    def refresh(self, store: WritableKeyStore) -> int:
        """Fetch the key set and replace the store's contents with it.

        Returns:
            Number of keys written.

        Raises:
            KeyRefreshThrottled: The gate refused; the store is left untouched.
            KeyRefreshError: The fetch failed; the store is left untouched.
        """
        if not self._gate.allow():
            raise KeyRefreshThrottled("Key-set refresh throttled")

        keys = self.fetch()
        store.replace_all(keys)
        logger.info("Loaded %d Firebase signing keys: %s", len(keys), ", ".join(sorted(keys)))
        return len(keys)
