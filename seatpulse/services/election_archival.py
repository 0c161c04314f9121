"""
Election archival coordinator for SeatPulse.

Run once per election before its results are imported: every current holder
of the positions up for election is closed as of the election date, and the
election moves to ``in_progress``. The import then seats the winners through
the assignment engine with ``election_id`` set, and the election is marked
``completed`` (or ``failed`` if the import broke).

Archival is idempotent. Seats already archived are skipped, so a retry after
a partial failure closes only what is still open.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from django.db.models import Q
from django.utils import timezone
from loguru import logger

from seatpulse.exceptions import NotFoundError, ValidationError
from seatpulse.models import ElectionEvent, EndedReason, PositionHistory
from seatpulse.services.cache import invalidation_prefixes
from seatpulse.services.position_history_service import PositionHistoryService
from seatpulse.services.position_history_store import PositionHistoryStore
from seatpulse.services.transactions import atomic_transition

# Statuses from which an election can no longer be archived, completed or failed
FINAL_STATUSES = {
    ElectionEvent.STATUS_COMPLETED,
    ElectionEvent.STATUS_CANCELLED,
    ElectionEvent.STATUS_FAILED,
}


@dataclass
class ArchiveResult:
    election_id: Any
    archived_count: int
    closed: list[PositionHistory] = field(default_factory=list)
    invalidation_prefixes: list[str] = field(default_factory=list)


@dataclass
class ElectionStatistics:
    """
    Progress counters for one election.

    Attributes:
        total_positions: Distinct positions touched by the election
        positions_archived: Tenures closed by archival
        politicians_imported: Tenures created by the election's import
    """

    election_id: Any
    election_name: str
    status: str
    total_positions: int
    positions_archived: int
    politicians_imported: int


class ElectionArchivalService:
    """
    Bulk archival and status lifecycle of elections.

    Example:
        >>> service = ElectionArchivalService()
        >>> result = service.archive(election.id, [senator.id, congressman.id])
        >>> print(f"Archived {result.archived_count} seats")
        >>> # ... import the winners ...
        >>> service.complete(election.id)
    """

    def __init__(
        self,
        store: PositionHistoryStore | None = None,
        history_service: PositionHistoryService | None = None,
    ) -> None:
        self.store = store or PositionHistoryStore()
        self.history_service = history_service or PositionHistoryService(
            store=self.store
        )

    def archive(
        self,
        election_id: Any,
        position_ids: Iterable[Any],
        timeout: float | None = None,
    ) -> ArchiveResult:
        """
        Close every current holder of ``position_ids`` for an election.

        Args:
            election_id: ElectionEvent whose date becomes the end date
            position_ids: Positions up for election; vacant ones are skipped
            timeout: Optional deadline in seconds for the whole archival

        Returns:
            ArchiveResult with the records closed by this call. A repeated
            call returns ``archived_count == 0``.

        Raises:
            NotFoundError: Unknown election
            ValidationError: The election is completed, cancelled or failed
            TransactionError: The store failed; nothing was archived
        """
        position_ids = list(dict.fromkeys(position_ids))

        with atomic_transition("archive election", timeout) as deadline:
            election = self._lock_election(election_id)
            if election.status in FINAL_STATUSES:
                raise ValidationError(
                    f"Election {election_id} is {election.status} and cannot be "
                    "archived."
                )

            closed = self.store.bulk_archive_for_election(
                election.pk, position_ids, election.election_date
            )
            deadline.check("updating election status")
            self._set_status(election, ElectionEvent.STATUS_IN_PROGRESS)

        politician_ids = [r.politician_id for r in closed]
        prefixes = invalidation_prefixes(
            politician_ids=politician_ids,
            position_ids=position_ids,
            history_ids=[r.pk for r in closed],
        )
        self.history_service.apply_side_effects(prefixes, politician_ids)

        logger.info(
            f"Election {election_id} ({election.election_date}): archived "
            f"{len(closed)} holder(s) across {len(position_ids)} position(s)"
        )
        return ArchiveResult(
            election_id=election.pk,
            archived_count=len(closed),
            closed=closed,
            invalidation_prefixes=prefixes,
        )

    def complete(self, election_id: Any) -> ElectionEvent:
        """Mark an election's import as finished."""
        return self._finish(election_id, ElectionEvent.STATUS_COMPLETED)

    def fail(self, election_id: Any) -> ElectionEvent:
        """Mark an election's import as failed."""
        return self._finish(election_id, ElectionEvent.STATUS_FAILED)

    def statistics(self, election_id: Any) -> ElectionStatistics:
        try:
            election = ElectionEvent.objects.get(pk=election_id)
        except ElectionEvent.DoesNotExist as e:
            raise NotFoundError(f"Election {election_id} not found.") from e

        records = PositionHistory.objects.for_election(election_id)
        return ElectionStatistics(
            election_id=election.pk,
            election_name=election.name,
            status=election.status,
            total_positions=records.values("position_id").distinct().count(),
            positions_archived=records.filter(
                ended_reason=EndedReason.ELECTION
            ).count(),
            politicians_imported=records.filter(
                Q(ended_reason__isnull=True) | ~Q(ended_reason=EndedReason.ELECTION)
            ).count(),
        )

    def _finish(self, election_id: Any, status: str) -> ElectionEvent:
        with atomic_transition(f"mark election {status}"):
            election = self._lock_election(election_id)
            if election.status == status:
                return election
            if election.status in FINAL_STATUSES:
                raise ValidationError(
                    f"Election {election_id} is already {election.status}."
                )
            self._set_status(election, status)
        return election

    def _lock_election(self, election_id: Any) -> ElectionEvent:
        election = (
            ElectionEvent.objects.select_for_update().filter(pk=election_id).first()
        )
        if election is None:
            raise NotFoundError(f"Election {election_id} not found.")
        return election

    def _set_status(self, election: ElectionEvent, status: str) -> None:
        if election.status == status:
            return
        previous = election.status
        election.status = status
        election.updated_at = timezone.now()
        election.save(update_fields=["status", "updated_at"])
        logger.info(f"Election {election.pk}: {previous} -> {status}")
