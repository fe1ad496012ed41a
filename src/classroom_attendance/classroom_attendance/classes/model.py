from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import ClassState


@dataclass(frozen=True)
class ClassRoom:
    """Domain entity: a recurring course owned by one teacher.

    `active_session_id` is the authoritative proof that the class is running.
    """

    class_id: int
    name: str
    teacher_id: int
    active_session_id: Optional[int] = None
    online_mode: bool = False

    @property
    def state(self) -> ClassState:
        return ClassState.ACTIVE if self.active_session_id is not None else ClassState.INACTIVE

    @property
    def is_active(self) -> bool:
        return self.active_session_id is not None
