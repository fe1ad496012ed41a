from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..classes.model import ClassRoom
from ..sessions.model import ClassSession
from .strategies.active_strategy import ActiveSessionStrategy
from .strategies.base import DefaultStatusStrategy
from .strategies.history_strategy import HistoricalSessionStrategy
from .strategies.inactive_strategy import InactiveClassStrategy


@dataclass
class DefaultStatusFactory:
    """Factory Pattern: choose the default-status strategy for a view."""

    def for_view(self, *, class_room: ClassRoom, session: Optional[ClassSession]) -> DefaultStatusStrategy:
        if session is None:
            return ActiveSessionStrategy() if class_room.is_active else InactiveClassStrategy()

        if session.is_open and session.session_id == class_room.active_session_id:
            return ActiveSessionStrategy()
        return HistoricalSessionStrategy()
