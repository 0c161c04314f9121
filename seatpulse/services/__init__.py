"""
Service layer for SeatPulse.

Business logic for officeholder position history, kept out of views and
management commands so it can be called from either and tested on its own.
"""

from .assignment import (
    AssignmentMode,
    AssignmentRequest,
    AssignmentResult,
    PositionAssignmentEngine,
    Transition,
)
from .election_archival import ArchiveResult, ElectionArchivalService
from .position_history_service import PoliticianTimeline, PositionHistoryService
from .position_history_store import PositionHistoryStore

__all__ = [
    "ArchiveResult",
    "AssignmentMode",
    "AssignmentRequest",
    "AssignmentResult",
    "ElectionArchivalService",
    "PoliticianTimeline",
    "PositionAssignmentEngine",
    "PositionHistoryService",
    "PositionHistoryStore",
    "Transition",
]
