"""
Position assignment decision engine.

Given a request to seat a politician, the engine reads the seat's current
holder under a row lock, decides which transition applies and performs it in
the same transaction:

1. Vacant → Held: create a current record.
2. Held(P) → Held(P), correction: update the current record in place.
3. Held(P) → Held(P), new term: close with ``term_change`` and create anew.
4. Held(Q) → Held(P): close Q's record with ``replaced`` and create P's.

Whether a same-politician assignment is a correction or a new term is the
caller's call, passed explicitly as an ``AssignmentMode``. The engine never
touches the cache or the politician projection; it returns what changed and
``PositionHistoryService`` applies the side effects after commit.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from django.conf import settings
from loguru import logger

from seatpulse.exceptions import ConflictError, NotFoundError
from seatpulse.jurisdiction import Jurisdiction
from seatpulse.models import EndedReason, PositionHistory
from seatpulse.services.cache import invalidation_prefixes
from seatpulse.services.position_history_store import PositionHistoryStore
from seatpulse.services.transactions import atomic_transition


class AssignmentMode(Enum):
    """How to treat an assignment of the politician who already holds the seat."""

    CORRECTION = "correction"
    NEW_TERM = "new_term"

    @classmethod
    def from_with_history(cls, with_history: bool) -> "AssignmentMode":
        return cls.NEW_TERM if with_history else cls.CORRECTION


class Transition(Enum):
    CREATED = "created"
    CORRECTED = "corrected"
    TERM_CHANGE = "term_change"
    REPLACED = "replaced"


# Reason recorded on the closed record for each closing transition
CLOSING_REASONS = {
    Transition.TERM_CHANGE: EndedReason.TERM_CHANGE,
    Transition.REPLACED: EndedReason.REPLACED,
}


@dataclass(frozen=True)
class AssignmentRequest:
    politician_id: Any
    position_id: Any
    jurisdiction: Jurisdiction
    term_start: date
    term_end: date | None = None
    party_id: Any = None
    election_id: Any = None
    mode: AssignmentMode = AssignmentMode.CORRECTION
    created_by: Any = None


@dataclass
class AssignmentResult:
    """
    Outcome of one assignment.

    Attributes:
        record: The seat's current record after the assignment
        transition: Which of the four transitions was applied
        closed: The record closed by this assignment, if any
        invalidation_prefixes: Cache prefixes the caller must invalidate
        affected_politician_ids: Politicians whose projection must be refreshed
    """

    record: PositionHistory
    transition: Transition
    closed: PositionHistory | None = None
    invalidation_prefixes: list[str] = field(default_factory=list)
    affected_politician_ids: list[Any] = field(default_factory=list)


def decide_transition(
    current: PositionHistory | None, request: AssignmentRequest
) -> Transition:
    """Pick the transition for ``request`` given the seat's current record."""
    if current is None:
        return Transition.CREATED
    if str(current.politician_id) == str(request.politician_id):
        if request.mode is AssignmentMode.CORRECTION:
            return Transition.CORRECTED
        return Transition.TERM_CHANGE
    return Transition.REPLACED


class PositionAssignmentEngine:
    """
    Executes assignments atomically with bounded retry on conflicts.

    Example:
        >>> engine = PositionAssignmentEngine()
        >>> result = engine.assign(
        ...     AssignmentRequest(
        ...         politician_id=mayor.id,
        ...         position_id=mayor_position.id,
        ...         jurisdiction=Jurisdiction(JurisdictionLevel.CITY, city.id),
        ...         term_start=date(2025, 6, 30),
        ...         mode=AssignmentMode.NEW_TERM,
        ...     )
        ... )
        >>> result.transition
        <Transition.TERM_CHANGE: 'term_change'>
    """

    def __init__(
        self,
        store: PositionHistoryStore | None = None,
        max_retries: int | None = None,
    ) -> None:
        self.store = store or PositionHistoryStore()
        if max_retries is None:
            max_retries = settings.SEATPULSE_ASSIGNMENT_MAX_RETRIES
        self.max_retries = max_retries

    def assign(
        self, request: AssignmentRequest, timeout: float | None = None
    ) -> AssignmentResult:
        """
        Seat ``request.politician_id`` in the requested position.

        Args:
            request: The assignment to perform
            timeout: Optional deadline in seconds for each attempt

        Returns:
            AssignmentResult describing the transition and its side effects.

        Raises:
            ValidationError: Bad dates or references; never retried
            ConflictError: Concurrent writers won on every attempt
            TransactionError: The store failed or the deadline expired
        """
        attempts = self.max_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                return self._assign_once(request, timeout)
            except ConflictError:
                if attempt == attempts:
                    logger.opt(exception=True).error(
                        f"Assignment of politician {request.politician_id} to "
                        f"position {request.position_id} in {request.jurisdiction} "
                        f"still conflicting after {attempts} attempts"
                    )
                    raise
                logger.warning(
                    f"Conflict assigning position {request.position_id} in "
                    f"{request.jurisdiction} (attempt {attempt}/{attempts}), retrying"
                )
        # Unreachable: the loop either returns or re-raises
        raise ConflictError("Assignment retries exhausted.")

    def _assign_once(
        self, request: AssignmentRequest, timeout: float | None
    ) -> AssignmentResult:
        with atomic_transition("assign position", timeout) as deadline:
            current = self.store.get_current_holder(
                request.position_id, request.jurisdiction, for_update=True
            )
            transition = decide_transition(current, request)
            deadline.check(f"applying {transition.value}")

            closed = None
            if transition is Transition.CORRECTED:
                record = self.store.update(
                    current.pk,
                    party_id=request.party_id,
                    term_start=request.term_start,
                    term_end=request.term_end,
                    expected_updated_at=current.updated_at,
                )
            else:
                if current is not None:
                    closed = self._close_current(current, request, transition)
                    deadline.check("creating the new record")
                record = self.store.create(
                    politician_id=request.politician_id,
                    position_id=request.position_id,
                    jurisdiction=request.jurisdiction,
                    term_start=request.term_start,
                    term_end=request.term_end,
                    party_id=request.party_id,
                    election_id=request.election_id,
                    created_by=request.created_by,
                )

        affected = [record.politician_id]
        if closed is not None and closed.politician_id != record.politician_id:
            affected.append(closed.politician_id)
        history_ids = [record.pk] + ([closed.pk] if closed is not None else [])

        logger.info(
            f"Position {request.position_id} in {request.jurisdiction}: "
            f"{transition.value} (record {record.pk})"
        )
        return AssignmentResult(
            record=record,
            transition=transition,
            closed=closed,
            invalidation_prefixes=invalidation_prefixes(
                politician_ids=affected,
                position_ids=[request.position_id],
                history_ids=history_ids,
            ),
            affected_politician_ids=affected,
        )

    def _close_current(
        self,
        current: PositionHistory,
        request: AssignmentRequest,
        transition: Transition,
    ) -> PositionHistory:
        try:
            return self.store.end_term(
                current.pk, request.term_start, CLOSING_REASONS[transition]
            )
        except NotFoundError as e:
            # Closed by another writer after we read it
            raise ConflictError(
                f"Current record {current.pk} was closed concurrently."
            ) from e
