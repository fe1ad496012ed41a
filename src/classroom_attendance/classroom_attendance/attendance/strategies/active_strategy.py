from __future__ import annotations

from typing import Optional

from ...core.enums import AttendanceStatus
from ...sessions.model import ClassSession
from .base import DefaultStatusStrategy, StatusDecision


class ActiveSessionStrategy(DefaultStatusStrategy):
    """A session is running: no record means the student has not attended."""

    def decide_missing(self, *, session: Optional[ClassSession]) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.ABSENT)
