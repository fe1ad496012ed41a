from __future__ import annotations

from typing import Optional

from ...core.enums import AttendanceStatus
from ...sessions.model import ClassSession
from .base import DefaultStatusStrategy, StatusDecision


class InactiveClassStrategy(DefaultStatusStrategy):
    """No session is running, so nobody can be absent yet."""

    def decide_missing(self, *, session: Optional[ClassSession]) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.UNMARKED)
