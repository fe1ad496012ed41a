from __future__ import annotations

from typing import Optional

from ...core.enums import AttendanceStatus
from ...sessions.model import ClassSession
from .base import DefaultStatusStrategy, StatusDecision


class HistoricalSessionStrategy(DefaultStatusStrategy):
    """Past session: missing students were absent as of the session start."""

    def decide_missing(self, *, session: Optional[ClassSession]) -> StatusDecision:
        return StatusDecision(
            status=AttendanceStatus.ABSENT,
            timestamp=session.start_time if session else None,
        )
