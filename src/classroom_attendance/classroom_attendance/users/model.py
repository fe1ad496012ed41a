from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Role


@dataclass(frozen=True)
class Profile:
    """Domain entity: a teacher or student identity.

    Note: Plain data object (no DB access code).
    """

    profile_id: int
    username: str
    name: str
    role: Role
    password_hash: str = ""
