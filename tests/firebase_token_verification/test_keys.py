from collections.abc import Callable
from typing import Any

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import dsa, ec, rsa
from jwt import PyJWK
from jwt.algorithms import RSAAlgorithm
from jwt.utils import base64url_encode

from firebase_token_verification import InvalidKeyMaterial, load_public_key


def test_certificate_yields_its_public_key(certificate_pem: str, rsa_key: rsa.RSAPrivateKey):
    key = load_public_key(certificate_pem)

    assert isinstance(key, rsa.RSAPublicKey)
    assert key.public_numbers() == rsa_key.public_key().public_numbers()


def test_public_key_pem_bytes(public_pem: str):
    assert isinstance(load_public_key(public_pem.encode("ascii")), rsa.RSAPublicKey)


def test_jwk_mapping_becomes_pyjwk(public_jwk: Callable[..., dict[str, Any]]):
    key = load_public_key(public_jwk(kid="k9"))

    assert isinstance(key, PyJWK)
    assert key.key_id == "k9"


def test_pyjwk_and_key_objects_pass_through(public_jwk: Callable[..., dict[str, Any]]):
    jwk = PyJWK.from_dict(public_jwk())
    ec_key = ec.generate_private_key(ec.SECP256R1()).public_key()

    assert load_public_key(jwk) is jwk
    assert load_public_key(ec_key) is ec_key


@pytest.mark.parametrize(
    "material",
    [
        "",
        "not a key",
        b"-----BEGIN CERTIFICATE-----\nAAAA\n-----END CERTIFICATE-----\n",
        {"kty": "RSA"},
        {"n": "abc"},
        {"kty": "nope"},
        42,
        ["k1"],
    ],
)
def test_unusable_material_raises(material: Any):
    with pytest.raises(InvalidKeyMaterial):
        load_public_key(material)


def test_dsa_public_key_is_rejected():
    pem = (
        dsa.generate_private_key(key_size=2048)
        .public_key()
        .public_bytes(serialization.Encoding.PEM, serialization.PublicFormat.SubjectPublicKeyInfo)
    )

    with pytest.raises(InvalidKeyMaterial):
        load_public_key(pem)


def test_private_rsa_jwk_is_rejected(rsa_key: rsa.RSAPrivateKey):
    private_jwk = RSAAlgorithm.to_jwk(rsa_key, as_dict=True)

    with pytest.raises(InvalidKeyMaterial):
        load_public_key(private_jwk)
    with pytest.raises(InvalidKeyMaterial):
        load_public_key(PyJWK.from_dict(private_jwk))


def test_symmetric_jwk_is_rejected():
    oct_jwk = {"kty": "oct", "k": base64url_encode(b"s" * 32).decode("ascii")}

    with pytest.raises(InvalidKeyMaterial):
        load_public_key(oct_jwk)
