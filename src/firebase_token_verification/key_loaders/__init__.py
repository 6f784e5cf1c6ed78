"""
Loaders that populate a key store with an identity provider's public keys.
"""

from .google import GOOGLE_SECURETOKEN_JWKS_URL, GoogleKeySetLoader

__all__ = ["GOOGLE_SECURETOKEN_JWKS_URL", "GoogleKeySetLoader"]
