"""Issuer configuration.

Issuers are looked up by named profile. The ``default`` profile reads the
un-prefixed keys; any other profile reads keys with the profile name in
them::

    FIREBASE_AUTH_ISSUER=https://securetoken.google.com/my-project
    FIREBASE_AUTH_PROJECT_ID=my-project            # same effect as above
    FIREBASE_AUTH_ADMIN_ISSUER=https://securetoken.google.com/admin-project

An explicit ``*_ISSUER`` wins over ``*_PROJECT_ID``. ``DEFAULT`` is not a
valid profile name in keys (``FIREBASE_AUTH_DEFAULT_ISSUER`` is rejected).
A profile that resolves to nothing raises ``ConfigurationError``; there is
no fallback issuer.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Final

from dotenv import load_dotenv

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

_PREFIX: Final[str] = "FIREBASE_AUTH_"
_SECURETOKEN_ISSUER: Final[str] = "https://securetoken.google.com/"
_PROFILE_KEY = re.compile(r"^FIREBASE_AUTH_(?:(?P<name>[A-Z0-9_]+?)_)?(?P<kind>ISSUER|PROJECT_ID)$")


@dataclass(frozen=True, slots=True)
class Profile:
    """Selects an issuer by configuration profile name rather than literally."""

    name: str


DEFAULT_PROFILE: Final[Profile] = Profile("default")


def issuer_for_project(project_id: str) -> str:
    """Return the Secure Token issuer for a Firebase project id."""
    if not project_id:
        raise ConfigurationError("Firebase project id cannot be empty")
    return f"{_SECURETOKEN_ISSUER}{project_id}"


class IssuerConfig:
    """Maps profile names to issuer strings.

    Example:
        ```python
        config = IssuerConfig.from_env()
        config.resolve_issuer(DEFAULT_PROFILE)
        config.resolve_issuer(Profile("admin"))
        ```
    """

    def __init__(self, profiles: Mapping[str, str]) -> None:
        self._profiles: dict[str, str] = dict(profiles)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> IssuerConfig:
        """Build from a flat mapping such as ``os.environ`` or ``app.config``."""
        issuers: dict[str, str] = {}
        projects: dict[str, str] = {}

        for key, value in mapping.items():
            if not isinstance(key, str) or not key.startswith(_PREFIX):
                continue
            match = _PROFILE_KEY.match(key)
            if match is None or not value:
                continue
            if match.group("name") == "DEFAULT":
                # Would compete with the un-prefixed keys for the same profile
                raise ConfigurationError(
                    f"{key}: use the un-prefixed FIREBASE_AUTH_* keys for the default profile"
                )
            name = (match.group("name") or DEFAULT_PROFILE.name).lower()
            if match.group("kind") == "ISSUER":
                issuers[name] = str(value)
            else:
                projects[name] = str(value)

        profiles = {name: issuer_for_project(pid) for name, pid in projects.items()}
        profiles.update(issuers)
        return cls(profiles)

    @classmethod
    def from_env(cls, dotenv_path: str | os.PathLike[str] | None = None) -> IssuerConfig:
        """Load ``.env`` (if any) into the environment, then read it."""
        load_dotenv(dotenv_path)
        config = cls.from_mapping(os.environ)
        logger.debug("Loaded issuer profiles: %s", ", ".join(config.profiles) or "<none>")
        return config

    @property
    def profiles(self) -> tuple[str, ...]:
        return tuple(sorted(self._profiles))

    def resolve_issuer(self, profile: Profile | str) -> str:
        """Return the issuer configured for ``profile``.

        Raises:
            ConfigurationError: No issuer is configured for the profile.
        """
        name = profile.name if isinstance(profile, Profile) else profile
        issuer = self._profiles.get(name)
        if not issuer:
            raise ConfigurationError(f"No Firebase issuer configured for profile {name!r}")
        return issuer
