from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..users.model import Profile
from .model import ClassRoom


class ClassRepository(Protocol):
    def get_by_id(self, class_id: int) -> Optional[ClassRoom]:
        raise NotImplementedError

    def list_for_teacher(self, teacher_id: int) -> Sequence[ClassRoom]:
        raise NotImplementedError

    def create_class(self, *, name: str, teacher_id: int) -> int:
        raise NotImplementedError

    def delete_class(self, class_id: int) -> bool:
        raise NotImplementedError

    def set_online_mode(self, class_id: int, *, enabled: bool) -> bool:
        raise NotImplementedError

    def activate_if_idle(self, class_id: int, *, session_id: int) -> bool:
        """Set active_session_id only if it is currently NULL (compare-and-swap)."""

        raise NotImplementedError

    def deactivate(self, class_id: int, *, session_id: int) -> bool:
        """Clear active_session_id only if it still points at `session_id`."""

        raise NotImplementedError

    def list_roster(self, class_id: int) -> Sequence[Profile]:
        """Enrolled students in roster order."""

        raise NotImplementedError

    def add_students(self, class_id: int, student_ids: Sequence[int]) -> int:
        raise NotImplementedError

    def replace_roster(self, class_id: int, student_ids: Sequence[int]) -> None:
        raise NotImplementedError

    def list_active_for_student(self, student_id: int) -> Sequence[ClassRoom]:
        raise NotImplementedError
