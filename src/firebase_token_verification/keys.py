"""Turning stored key material into something PyJWT can verify with.

Google publishes the Firebase signing keys both as X.509 certificates and as
a JWK set, so a key store may hold either form. ``load_public_key`` accepts:

- ``jwt.PyJWK`` (returned as-is)
- a JWK mapping (``{"kty": "RSA", "n": ..., "e": ...}``)
- a PEM X.509 certificate (``str`` or ``bytes``)
- a PEM SubjectPublicKeyInfo public key (``str`` or ``bytes``)
- an already-loaded ``cryptography`` public key

and raises ``InvalidKeyMaterial`` for everything else.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ec import EllipticCurvePublicKey
from cryptography.hazmat.primitives.asymmetric.ed448 import Ed448PublicKey
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey
from jwt import PyJWK
from jwt.exceptions import InvalidKeyError, PyJWKError

from .protocols import KeyMaterial

type PublicKey = PyJWK | RSAPublicKey | EllipticCurvePublicKey | Ed25519PublicKey | Ed448PublicKey

_PUBLIC_KEY_TYPES = (RSAPublicKey, EllipticCurvePublicKey, Ed25519PublicKey, Ed448PublicKey)
_PEM_CERTIFICATE = b"-----BEGIN CERTIFICATE-----"


class InvalidKeyMaterial(ValueError):
    """Key material could not be loaded into a usable public key."""


def load_public_key(material: KeyMaterial) -> PublicKey:
    """Load ``material`` into a key object accepted by ``jwt.decode``.

    Raises:
        InvalidKeyMaterial: Unsupported type, or the material fails to parse.
    """
    if isinstance(material, PyJWK):
        return _require_public(material)
    if isinstance(material, _PUBLIC_KEY_TYPES):
        return material
    if isinstance(material, Mapping):
        return _from_jwk(material)
    if isinstance(material, str):
        material = material.encode("utf-8")
    if isinstance(material, bytes):
        return _from_pem(material)

    raise InvalidKeyMaterial(f"Unsupported key material type: {type(material).__name__}")


def _from_jwk(data: Mapping[str, Any]) -> PyJWK:
    try:
        jwk = PyJWK.from_dict(dict(data))
    except (PyJWKError, InvalidKeyError, KeyError, TypeError, ValueError) as e:
        raise InvalidKeyMaterial("JWK could not be parsed") from e
    return _require_public(jwk)


def _require_public(jwk: PyJWK) -> PyJWK:
    # Private and symmetric ("oct") JWKs would verify with their own algorithm
    if not isinstance(jwk.key, _PUBLIC_KEY_TYPES):
        raise InvalidKeyMaterial(f"JWK does not hold a public key: {type(jwk.key).__name__}")
    return jwk


def _from_pem(data: bytes) -> PublicKey:
    try:
        if data.lstrip().startswith(_PEM_CERTIFICATE):
            key = x509.load_pem_x509_certificate(data).public_key()
        else:
            key = serialization.load_pem_public_key(data)
    except (ValueError, TypeError) as e:
        raise InvalidKeyMaterial("PEM key material could not be parsed") from e

    # DSA / DH keys load fine but cannot verify JWT signatures
    if not isinstance(key, _PUBLIC_KEY_TYPES):
        raise InvalidKeyMaterial(f"Unsupported public key type: {type(key).__name__}")
    return key
