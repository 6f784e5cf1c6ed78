import datetime
import time
from collections.abc import Callable
from typing import Any

import jwt
from jwt.algorithms import RSAAlgorithm
import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID
from flask import Flask

NOW = 1_700_000_000
ISSUER = "https://example.com/proj"


@pytest.fixture()
def app():
    app = Flask(__name__)
    app.config["TESTING"] = True
    return app


@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def public_pem(rsa_key: rsa.RSAPrivateKey) -> str:
    return (
        rsa_key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode("ascii")
    )


@pytest.fixture
def certificate_pem(rsa_key: rsa.RSAPrivateKey) -> str:
    """Self-signed X.509 certificate, the format Google publishes Firebase keys in."""
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "securetoken.system.gserviceaccount.com")])
    now = datetime.datetime.now(datetime.UTC)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(rsa_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=1))
        .sign(rsa_key, hashes.SHA256())
    )
    return cert.public_bytes(serialization.Encoding.PEM).decode("ascii")


@pytest.fixture
def public_jwk(rsa_key: rsa.RSAPrivateKey) -> Callable[..., dict[str, Any]]:
    """Factory returning the RSA public key as a JWK dict."""

    def _make(*, kid: str = "k1") -> dict[str, Any]:
        jwk = RSAAlgorithm.to_jwk(rsa_key.public_key(), as_dict=True)
        jwk.update({"kid": kid, "alg": "RS256", "use": "sig"})
        return jwk

    return _make


@pytest.fixture
def make_token(rsa_key: rsa.RSAPrivateKey) -> Callable[..., str]:
    """
    Factory fixture that returns a function.

    Usage in tests:
        token = make_token(sub="user-42", exp=NOW + 60)
        token = make_token(headers={}, key=other_key)  # no kid, other signer
    """
    _unset: Any = object()

    def _make(
        *,
        kid: str | None = "k1",
        iss: Any = ISSUER,
        sub: Any = "user-42",
        exp: Any = NOW + 3600,
        key: Any = _unset,
        algorithm: str = "RS256",
        headers: dict[str, Any] | None = None,
        extra: dict[str, Any] | None = None,
        omit: tuple[str, ...] = (),
    ) -> str:
        payload: dict[str, Any] = {"iss": iss, "sub": sub, "exp": exp, "aud": "proj"}
        payload.update(extra or {})
        for claim in omit:
            payload.pop(claim, None)

        if headers is None:
            headers = {} if kid is None else {"kid": kid}

        return jwt.encode(
            payload,
            rsa_key if key is _unset else key,
            algorithm=algorithm,
            headers=headers,
        )

    return _make


@pytest.fixture
def clock() -> Callable[[], float]:
    return lambda: float(NOW)


class FakeRedis:
    """
    Minimal redis stub for RedisKeyStore tests.
    Stores bytes under keys and supports get/set/setex/delete.
    """

    def __init__(self):
        self._store: dict[str, tuple[bytes, int | None]] = {}
        self.ttls: dict[str, int] = {}

    def get(self, key: str):
        item = self._store.get(key)
        if item is None:
            return None
        data, expires_at = item
        if expires_at is not None and int(time.time()) >= expires_at:
            self._store.pop(key, None)
            return None
        return data

    def set(self, key: str, value: str | bytes):
        if isinstance(value, str):
            value = value.encode("utf-8")
        self._store[key] = (value, None)

    def setex(self, key: str, ttl_seconds: int, value: str | bytes):
        if isinstance(value, str):
            value = value.encode("utf-8")
        self._store[key] = (value, int(time.time()) + int(ttl_seconds))
        self.ttls[key] = int(ttl_seconds)

    def delete(self, key: str):
        self._store.pop(key, None)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def now() -> int:
    return NOW


@pytest.fixture
def issuer() -> str:
    return ISSUER
