"""Key store implementations for Firebase signing keys.

Both stores satisfy the KeyStore protocol the verifier reads from, plus the
write operations a loader uses to populate them.

Implementations:
- InMemoryKeyStore: in-process dict (single instance, tests)
- RedisKeyStore: shared across processes via Redis

Security Note:
    A store only holds public keys, but whatever it returns for a kid is
    trusted to verify signatures. Populate it from Google's published key
    set only.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any

from jwt import PyJWK

from .errors import KeyStoreError

if TYPE_CHECKING:
    from .protocols import KeyMaterial

logger = logging.getLogger(__name__)


class InMemoryKeyStore:
    """Thread-safe in-process key store.

    ``replace_all`` swaps the whole key set in one step, so a concurrent
    reader sees either the old set or the new one, never a mix.

    Example:
        ```python
        store = InMemoryKeyStore()
        store.put("k1", pem_certificate)
        store.lookup("k1")       # -> pem_certificate
        store.lookup("missing")  # -> None
        ```
    """

    def __init__(self, keys: Mapping[str, KeyMaterial] | None = None) -> None:
        self._lock = threading.Lock()
        self._keys: dict[str, KeyMaterial] = dict(keys or {})

    def lookup(self, kid: str) -> KeyMaterial | None:
        return self._keys.get(kid)

    def put(self, kid: str, material: KeyMaterial) -> None:
        if not kid:
            raise ValueError("kid cannot be empty")
        with self._lock:
            keys = dict(self._keys)
            keys[kid] = material
            self._keys = keys

    def replace_all(self, keys: Mapping[str, KeyMaterial]) -> None:
        if any(not kid for kid in keys):
            raise ValueError("kid cannot be empty")
        with self._lock:
            self._keys = dict(keys)

    def remove(self, kid: str) -> None:
        with self._lock:
            keys = dict(self._keys)
            keys.pop(kid, None)
            self._keys = keys

    def kids(self) -> list[str]:
        return sorted(self._keys)

    def __contains__(self, kid: object) -> bool:
        return kid in self._keys

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[str]:
        return iter(self.kids())


class RedisKeyStore:
    """Redis-backed key store shared by several verifier processes.

    Storage Format:
        - JWK material (mapping or PyJWK): ``{"jwk": {...}}``
        - PEM certificate / public key: ``{"pem": "-----BEGIN ..."}``

    Keys are stored under ``{prefix}{kid}``. ``lookup`` returns the JWK
    mapping or the PEM string; the verifier loads it into a usable key.

    Example:
        ```python
        import redis

        client = redis.Redis(host="localhost", port=6379)
        store = RedisKeyStore(client)
        GoogleKeySetLoader().refresh(store)
        ```

    Attributes:
        _client: Redis client (redis-py, fakeredis, or anything with
            get/set/setex/delete).
        _prefix: Namespace prepended to every kid.
    """

    def __init__(
        self,
        redis_client: Any,
        *,
        prefix: str = "firebase:keys:",
        ttl_seconds: int | None = None,
    ) -> None:
        """Initialize the Redis key store.

        Args:
            redis_client: Redis client instance.
            prefix: Key namespace in Redis.
            ttl_seconds: Default expiry for stored keys. None keeps them until
                replaced or removed.
        """
        self._client = redis_client
        self._prefix = prefix
        self._ttl = ttl_seconds

    def _name(self, kid: str) -> str:
        return f"{self._prefix}{kid}"

    def lookup(self, kid: str) -> KeyMaterial | None:
        """Return the stored JWK mapping or PEM string, or None.

        Raises:
            KeyStoreError: The Redis read failed, or the stored entry is not
                valid JSON in the expected shape.
        """
        try:
            data = self._client.get(self._name(kid))
        except Exception as e:
            raise KeyStoreError("Failed to read key from Redis") from e
        if data is None:
            return None

        try:
            obj = json.loads(data)
            if isinstance(obj, dict):
                if isinstance(obj.get("jwk"), Mapping):
                    return dict(obj["jwk"])
                if isinstance(obj.get("pem"), str):
                    return obj["pem"]
        except (ValueError, TypeError) as e:
            logger.warning("Corrupt key store entry for kid=%s", kid)
            raise KeyStoreError(f"Corrupt key store entry for kid {kid!r}") from e

        logger.warning("Corrupt key store entry for kid=%s", kid)
        raise KeyStoreError(f"Corrupt key store entry for kid {kid!r}")

    def put(self, kid: str, material: KeyMaterial, ttl_seconds: int | None = None) -> None:
        """Store key material for ``kid``.

        Raises:
            ValueError: Empty kid, or material that cannot be serialized.
            KeyStoreError: The Redis write failed.
        """
        if not kid:
            raise ValueError("kid cannot be empty")

        payload = json.dumps(_serialize(material))
        ttl = ttl_seconds if ttl_seconds is not None else self._ttl

        try:
            if ttl is None:
                self._client.set(self._name(kid), payload)
            else:
                self._client.setex(self._name(kid), ttl, payload)
        except Exception as e:
            raise KeyStoreError("Failed to store key in Redis") from e

    def replace_all(self, keys: Mapping[str, KeyMaterial], ttl_seconds: int | None = None) -> None:
        """Write every entry of ``keys``.

        Kids that are no longer published are not deleted; give the store a
        TTL so rotated-out keys age away.
        """
        for kid, material in keys.items():
            self.put(kid, material, ttl_seconds=ttl_seconds)

    def remove(self, kid: str) -> None:
        try:
            self._client.delete(self._name(kid))
        except Exception as e:
            raise KeyStoreError("Failed to remove key from Redis") from e


def _serialize(material: KeyMaterial) -> dict[str, Any]:
    if isinstance(material, PyJWK):
        return {"jwk": material._jwk_data}  # pyright: ignore[reportPrivateUsage]
    if isinstance(material, Mapping):
        return {"jwk": dict(material)}
    if isinstance(material, bytes):
        material = material.decode("ascii")
    if isinstance(material, str):
        return {"pem": material}
    raise ValueError(f"Cannot store key material of type {type(material).__name__}")
