from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from ..common.validators import require_ids, require_non_empty
from ..core.enums import Role
from ..core.exceptions import NotFound, PermissionDenied, ValidationError
from ..users.model import Profile
from ..users.repository import ProfileRepository
from .model import ClassRoom
from .repository import ClassRepository

logger = logging.getLogger(__name__)


class ClassService:
    """Use cases: create/delete classes and edit their rosters.

    Roster edits are allowed at any time, even while a session is running.
    """

    def __init__(self, classes: ClassRepository, profiles: ProfileRepository):
        self._classes = classes
        self._profiles = profiles

    def _owned(self, teacher_id: int, class_id: int) -> ClassRoom:
        class_room = self._classes.get_by_id(int(class_id))
        if not class_room:
            raise NotFound("Class not found")
        if class_room.teacher_id != int(teacher_id):
            raise PermissionDenied("You don't have permission to manage this class")
        return class_room

    def _require_students(self, student_ids: Iterable[int]) -> list[int]:
        ids = require_ids(student_ids)
        found = {p.profile_id: p for p in self._profiles.get_many(ids)}
        missing = [sid for sid in ids if sid not in found or found[sid].role != Role.STUDENT]
        if missing:
            raise NotFound(f"Unknown students: {', '.join(str(m) for m in missing)}")
        return ids

    def create_class(self, *, teacher_id: int, name: str, student_ids: Sequence[int] = ()) -> int:
        name = require_non_empty(name, "Class name")
        teacher = self._profiles.get_by_id(int(teacher_id))
        if not teacher or teacher.role != Role.TEACHER:
            raise PermissionDenied("Only teachers can create classes")

        ids = self._require_students(student_ids)
        class_id = self._classes.create_class(name=name, teacher_id=teacher.profile_id)
        if ids:
            self._classes.add_students(class_id, ids)
        logger.info("Teacher %s created class %s with %s students", teacher.profile_id, class_id, len(ids))
        return class_id

    def list_for_teacher(self, teacher_id: int) -> Sequence[ClassRoom]:
        return self._classes.list_for_teacher(int(teacher_id))

    def get_class(self, teacher_id: int, class_id: int) -> ClassRoom:
        return self._owned(teacher_id, class_id)

    def roster(self, teacher_id: int, class_id: int) -> Sequence[Profile]:
        class_room = self._owned(teacher_id, class_id)
        return self._classes.list_roster(class_room.class_id)

    def delete_class(self, *, teacher_id: int, class_id: int) -> None:
        class_room = self._owned(teacher_id, class_id)
        if class_room.is_active:
            raise ValidationError("Cannot delete an active class. Please stop the class first.")
        if not self._classes.delete_class(class_room.class_id):
            raise ValidationError("Failed to delete class")
        logger.info("Class %s deleted", class_room.class_id)

    def update_participants(self, *, teacher_id: int, class_id: int, student_ids: Sequence[int]) -> Sequence[Profile]:
        """Replace the roster; past sessions are reconciled against the new one."""

        class_room = self._owned(teacher_id, class_id)
        ids = self._require_students(student_ids)
        self._classes.replace_roster(class_room.class_id, ids)
        return self._classes.list_roster(class_room.class_id)

    def bulk_add_students(self, *, teacher_id: int, class_id: int, usernames: Iterable[str]) -> int:
        """Add students by username; returns how many were newly enrolled."""

        class_room = self._owned(teacher_id, class_id)
        existing = {p.profile_id for p in self._classes.list_roster(class_room.class_id)}

        new_ids: list[int] = []
        for raw in usernames:
            username = (raw or "").strip()
            if not username:
                continue
            profile: Optional[Profile] = self._profiles.get_by_username(username)
            if not profile or profile.role != Role.STUDENT:
                continue
            if profile.profile_id in existing or profile.profile_id in new_ids:
                continue
            new_ids.append(profile.profile_id)

        if new_ids:
            self._classes.add_students(class_room.class_id, new_ids)
        return len(new_ids)
