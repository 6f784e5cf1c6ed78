"""Token extraction strategies for Flask requests.

Implementations:
- BearerExtractor: ``Authorization: Bearer <id token>`` (what the Firebase
  client SDKs send via ``getIdToken()``)
- CookieExtractor: an ID token or session token kept in a cookie
"""

from __future__ import annotations

from flask import request

from .errors import MissingToken


class BearerExtractor:
    """Extracts the ID token from the Authorization header.

    Expects requests with header format:
        Authorization: Bearer <token>
    """

    def extract(self) -> str:
        """Return the token without the "Bearer " prefix.

        Raises:
            MissingToken: Header missing, not using the Bearer scheme, or empty.
        """
        auth_header = request.headers.get("Authorization", "").strip()

        if not auth_header:
            raise MissingToken("Missing Authorization header")

        scheme, _, token = auth_header.partition(" ")
        if scheme.lower() != "bearer":
            raise MissingToken("Invalid authorization scheme (expected 'Bearer <token>')")

        token = token.strip()
        if not token:
            raise MissingToken("Bearer token is empty")

        return token


class CookieExtractor:
    """Extracts the ID token from a cookie.

    Security Notes:
        - Set the cookie HttpOnly and Secure
        - Cookie-based auth needs CSRF protection

    Attributes:
        _name: Name of the cookie containing the token.
    """

    def __init__(self, cookie_name: str = "id_token") -> None:
        if not cookie_name or not cookie_name.strip():
            raise ValueError("cookie_name cannot be empty")
        self._name = cookie_name

    def extract(self) -> str:
        token = request.cookies.get(self._name)

        if not token:
            raise MissingToken(f"Missing cookie '{self._name}'")

        return token
