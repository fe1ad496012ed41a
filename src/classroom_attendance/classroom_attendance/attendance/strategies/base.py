from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ...sessions.model import ClassSession


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    timestamp: Optional[datetime] = None


class DefaultStatusStrategy(ABC):
    """Strategy Pattern: decide the status of a roster member with no record."""

    @abstractmethod
    def decide_missing(self, *, session: Optional[ClassSession]) -> StatusDecision:
        raise NotImplementedError
