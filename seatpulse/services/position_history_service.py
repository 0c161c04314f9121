"""
Position history service for SeatPulse.

The in-process facade used by API handlers and management commands. Reads go
through the cache; mutations go through the assignment engine or the store
inside ``atomic_transition`` and return the records they changed. After each
mutation this layer, and only this layer, invalidates the affected cache
prefixes and refreshes each affected politician's denormalized current
position.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any

from django.db import transaction
from loguru import logger

from seatpulse.exceptions import NotFoundError
from seatpulse.jurisdiction import Jurisdiction
from seatpulse.models import Politician, PositionHistory
from seatpulse.services.assignment import (
    AssignmentMode,
    AssignmentRequest,
    AssignmentResult,
    PositionAssignmentEngine,
)
from seatpulse.services.cache import (
    PositionCache,
    current_holder_key,
    invalidation_prefixes,
    politician_history_key,
    position_holders_key,
    record_key,
)
from seatpulse.services.position_history_store import PositionHistoryStore
from seatpulse.services.transactions import atomic_transition


@dataclass
class PoliticianTimeline:
    """A politician's tenures split into current and past ones."""

    politician_id: Any
    politician_name: str
    politician_slug: str
    current_positions: list[PositionHistory] = field(default_factory=list)
    past_positions: list[PositionHistory] = field(default_factory=list)
    total_positions: int = 0

    @property
    def current_position(self) -> PositionHistory | None:
        """The most recently started current tenure."""
        return self.current_positions[0] if self.current_positions else None


class PositionHistoryService:
    """
    Cached reads and side-effect-applying mutations for position history.

    Example:
        >>> service = PositionHistoryService()
        >>> result = service.assign_position(request)
        >>> holder = service.get_current_holder(position.id, jurisdiction)
        >>> holder.pk == result.record.pk
        True
    """

    def __init__(
        self,
        store: PositionHistoryStore | None = None,
        engine: PositionAssignmentEngine | None = None,
        cache: PositionCache | None = None,
    ) -> None:
        self.store = store or PositionHistoryStore()
        self.engine = engine or PositionAssignmentEngine(store=self.store)
        self.cache = cache or PositionCache()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def assign_position(
        self, request: AssignmentRequest, timeout: float | None = None
    ) -> AssignmentResult:
        """
        Seat a politician and apply the resulting side effects.

        Args:
            request: The assignment. ``request.mode`` decides whether a
                same-politician assignment corrects the record or starts a
                new term.
            timeout: Optional deadline in seconds per attempt

        Returns:
            The engine's AssignmentResult.
        """
        result = self.engine.assign(request, timeout=timeout)
        self.apply_side_effects(
            result.invalidation_prefixes, result.affected_politician_ids
        )
        return result

    def update_position_with_history(
        self, request: AssignmentRequest, timeout: float | None = None
    ) -> AssignmentResult:
        """Assign with ``NEW_TERM`` mode, for elections and term changes."""
        return self.assign_position(
            replace(request, mode=AssignmentMode.NEW_TERM), timeout=timeout
        )

    def update_position_without_history(
        self,
        history_id: Any,
        *,
        party_id: Any = None,
        term_start: date | None = None,
        term_end: date | None = None,
        expected_updated_at: Any = None,
        timeout: float | None = None,
    ) -> PositionHistory:
        """Correct a current record in place. ``None`` leaves a field unchanged."""
        with atomic_transition("update position history", timeout):
            record = self.store.update(
                history_id,
                party_id=party_id,
                term_start=term_start,
                term_end=term_end,
                expected_updated_at=expected_updated_at,
            )
        self._after_change([record])
        return record

    def end_term(
        self,
        politician_id: Any,
        end_date: date,
        ended_reason: str,
        timeout: float | None = None,
    ) -> list[PositionHistory]:
        """End every current term of a politician. Returns the closed records."""
        with atomic_transition("end term", timeout):
            closed = self.store.end_current_terms(politician_id, end_date, ended_reason)
        self._after_change(closed)
        return closed

    def end_term_by_id(
        self,
        history_id: Any,
        end_date: date,
        ended_reason: str,
        timeout: float | None = None,
    ) -> PositionHistory:
        with atomic_transition("end term", timeout):
            record = self.store.end_term(history_id, end_date, ended_reason)
        self._after_change([record])
        return record

    def delete(self, history_id: Any) -> None:
        with atomic_transition("delete position history"):
            record = self.store.delete(history_id)
        self._after_change([record])

    def apply_side_effects(
        self, prefixes: Iterable[str], politician_ids: Iterable[Any]
    ) -> None:
        """Invalidate cache prefixes, then refresh each politician's projection."""
        self.cache.invalidate(prefixes)
        for politician_id in dict.fromkeys(politician_ids):
            self.refresh_politician_projection(politician_id)

    @transaction.atomic
    def refresh_politician_projection(self, politician_id: Any) -> None:
        """
        Copy the politician's most recent current tenure onto the Politician row.

        Clears ``current_position`` and ``current_party`` when the politician
        holds nothing.
        """
        current = (
            PositionHistory.objects.current()
            .for_politician(politician_id)
            .order_by("-term_start", "-created_at")
            .values("position_id", "party_id")
            .first()
        )
        position_id = current["position_id"] if current else None
        party_id = current["party_id"] if current else None
        updated = Politician.objects.filter(pk=politician_id).update(
            current_position_id=position_id, current_party_id=party_id
        )
        if updated:
            logger.debug(
                f"Politician {politician_id} projection: position {position_id}, "
                f"party {party_id}"
            )
        else:
            logger.warning(
                f"Politician {politician_id} not found for projection refresh"
            )

    def _after_change(self, records: list[PositionHistory]) -> None:
        politician_ids = [r.politician_id for r in records]
        self.apply_side_effects(
            invalidation_prefixes(
                politician_ids=politician_ids,
                position_ids=[r.position_id for r in records],
                history_ids=[r.pk for r in records],
            ),
            politician_ids,
        )

    # ------------------------------------------------------------------
    # Cached reads
    # ------------------------------------------------------------------

    def get_by_id(self, history_id: Any) -> PositionHistory:
        return self.cache.get_or_set(
            record_key(history_id), lambda: self.store.get_by_id(history_id)
        )

    def get_current_holder(
        self, position_id: Any, jurisdiction: Jurisdiction
    ) -> PositionHistory | None:
        """The seat's current holder, or None when vacant. Vacancy is not cached."""
        return self.cache.get_or_set(
            current_holder_key(position_id, jurisdiction),
            lambda: self.store.get_current_holder(position_id, jurisdiction),
        )

    def get_position_holders(self, position_id: Any) -> list[PositionHistory]:
        return self.cache.get_or_set(
            position_holders_key(position_id),
            lambda: self.store.get_holders(position_id),
        )

    def get_timeline(self, politician_id: Any) -> PoliticianTimeline:
        """
        Build a politician's position timeline.

        Raises:
            NotFoundError: The politician has no position history
        """
        return self.cache.get_or_set(
            politician_history_key(politician_id),
            lambda: self._build_timeline(politician_id),
        )

    def _build_timeline(self, politician_id: Any) -> PoliticianTimeline:
        history = self.store.get_history(politician_id)
        if not history:
            raise NotFoundError(
                f"No position history found for politician {politician_id}."
            )

        politician = history[0].politician
        timeline = PoliticianTimeline(
            politician_id=politician.pk,
            politician_name=politician.name,
            politician_slug=politician.slug,
            total_positions=len(history),
        )
        for record in history:
            if record.is_current:
                timeline.current_positions.append(record)
            else:
                timeline.past_positions.append(record)
        return timeline
