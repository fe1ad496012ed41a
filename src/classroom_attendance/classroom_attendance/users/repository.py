from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Profile


class ProfileRepository(Protocol):
    """Repository interface for profiles.

    Note (DIP): services depend on this interface, not on a concrete DB.
    """

    def get_by_id(self, profile_id: int) -> Optional[Profile]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[Profile]:
        raise NotImplementedError

    def get_many(self, profile_ids: Sequence[int]) -> Sequence[Profile]:
        raise NotImplementedError
