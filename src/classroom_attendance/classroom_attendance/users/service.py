from __future__ import annotations

from dataclasses import dataclass

from werkzeug.security import check_password_hash

from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from .repository import ProfileRepository


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    profile_id: int
    username: str
    name: str
    role: Role


class AuthService:
    """Use case: log a teacher or student in.

    Every demo account shares one password, stored per profile as a
    werkzeug hash.
    """

    def __init__(self, profiles: ProfileRepository):
        self._profiles = profiles

    def authenticate(self, username: str, password: str) -> SessionUser:
        username = require_non_empty(username, "Username")
        profile = self._profiles.get_by_username(username)
        if not profile:
            raise AuthenticationError("Invalid username or password")

        try:
            ok = check_password_hash(profile.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME'
            ok = False

        if not ok:
            raise AuthenticationError("Invalid username or password")

        return SessionUser(
            profile_id=profile.profile_id,
            username=profile.username,
            name=profile.name,
            role=profile.role,
        )
