"""
Position history store for SeatPulse.

Durable access to the temporal ``politician_position_history`` table. The
store enforces the record-level rules (required dates, valid references,
closing a tenure exactly once) and leaves the decision of *which* records to
create or close to the assignment engine.

Mutating methods run inside ``transaction.atomic`` so they are atomic on
their own and become savepoints when the engine calls them inside its own
transaction. Row locks (``select_for_update``) are taken wherever a read
feeds a write.
"""

from collections.abc import Iterable
from datetime import date
from typing import Any

from django.db import IntegrityError, transaction
from django.db.models import Count, QuerySet
from django.utils import timezone
from loguru import logger

from seatpulse.exceptions import ConflictError, NotFoundError, ValidationError
from seatpulse.jurisdiction import (
    LOCATION_FIELDS,
    Jurisdiction,
    JurisdictionLevel,
    coerce_id,
)
from seatpulse.models import (
    Barangay,
    CityMunicipality,
    CongressionalDistrict,
    ElectionEvent,
    EndedReason,
    GovernmentPosition,
    Politician,
    PoliticalParty,
    PositionHistory,
    Province,
    Region,
)

JURISDICTION_MODELS = {
    JurisdictionLevel.REGION: Region,
    JurisdictionLevel.PROVINCE: Province,
    JurisdictionLevel.CITY: CityMunicipality,
    JurisdictionLevel.BARANGAY: Barangay,
    JurisdictionLevel.DISTRICT: CongressionalDistrict,
}

VALID_ENDED_REASONS = set(EndedReason.values)


class PositionHistoryStore:
    """
    Repository for PositionHistory records.

    Example:
        >>> store = PositionHistoryStore()
        >>> holder = store.get_current_holder(position.id, Jurisdiction.national())
        >>> if holder is None:
        ...     print("Seat is vacant")
    """

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_by_id(self, history_id: Any) -> PositionHistory:
        pk = coerce_id(history_id, "id")
        try:
            return PositionHistory.objects.with_related().get(pk=pk)
        except PositionHistory.DoesNotExist as e:
            raise NotFoundError(f"Position history {history_id} not found.") from e

    def get_current_holder(
        self,
        position_id: Any,
        jurisdiction: Jurisdiction,
        for_update: bool = False,
    ) -> PositionHistory | None:
        """
        Find the current holder of a seat.

        Args:
            position_id: GovernmentPosition UUID
            jurisdiction: Resolved jurisdiction of the seat
            for_update: Lock the current row until the surrounding transaction
                ends. Only valid inside ``transaction.atomic``.

        Returns:
            The record with ``is_current=True`` for the seat, or None if the
            seat is vacant.
        """
        queryset = PositionHistory.objects.current().filter(
            position_id=coerce_id(position_id, "position_id"),
            **jurisdiction.filter_kwargs(),
        )
        if for_update:
            # No joins here: FOR UPDATE cannot lock the nullable side of an
            # outer join on PostgreSQL
            queryset = queryset.select_for_update()
        else:
            queryset = queryset.with_related()
        return queryset.first()

    def get_history(self, politician_id: Any) -> list[PositionHistory]:
        """All tenures of a politician, current first, then newest term first."""
        politician_id = coerce_id(politician_id, "politician_id")
        return list(
            PositionHistory.objects.for_politician(politician_id)
            .with_related()
            .order_by("-is_current", "-term_start")
        )

    def get_holders(self, position_id: Any) -> list[PositionHistory]:
        """Everyone who has held a position, current first, then newest first."""
        position_id = coerce_id(position_id, "position_id")
        return list(
            PositionHistory.objects.for_position(position_id)
            .with_related()
            .order_by("-is_current", "-term_start")
        )

    def get_current_for_politician(self, politician_id: Any) -> list[PositionHistory]:
        return list(
            PositionHistory.objects.current()
            .for_politician(coerce_id(politician_id, "politician_id"))
            .with_related()
            .order_by("-term_start")
        )

    def find_invariant_violations(self) -> list[dict[str, Any]]:
        """
        Seats with more than one current record.

        The partial unique constraints make this impossible for data written
        through the ORM; the check exists for rows loaded by hand or by SQL
        migrations.
        """
        seat_fields = ["position_id", "is_national", *LOCATION_FIELDS]
        rows = (
            PositionHistory.objects.current()
            .order_by()
            .values(*seat_fields)
            .annotate(current_count=Count("id"))
            .filter(current_count__gt=1)
        )
        violations = []
        for row in rows:
            violations.append(
                {
                    "position_id": row["position_id"],
                    "jurisdiction": Jurisdiction.from_record(_Row(row)),
                    "current_count": row["current_count"],
                }
            )
        return violations

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(
        self,
        *,
        politician_id: Any,
        position_id: Any,
        jurisdiction: Jurisdiction,
        term_start: date | None,
        term_end: date | None = None,
        party_id: Any = None,
        election_id: Any = None,
        created_by: Any = None,
    ) -> PositionHistory:
        """
        Insert a new current tenure.

        Args:
            politician_id: Politician holding the seat
            position_id: GovernmentPosition of the seat
            jurisdiction: Resolved jurisdiction of the seat
            term_start: First day of the tenure (required)
            term_end: Scheduled end of the tenure, if known
            party_id: Party affiliation during the tenure
            election_id: Election that produced the tenure
            created_by: User performing the assignment

        Returns:
            The stored record with generated id and timestamps.

        Raises:
            ValidationError: Missing/invalid dates or unknown references
            ConflictError: The seat already has a current holder
        """
        self._validate_dates(term_start, term_end)
        self._validate_references(
            politician_id=politician_id,
            position_id=position_id,
            jurisdiction=jurisdiction,
            party_id=party_id,
            election_id=election_id,
        )

        try:
            with transaction.atomic():
                record = PositionHistory.objects.create(
                    politician_id=politician_id,
                    position_id=position_id,
                    party_id=party_id,
                    election_id=election_id,
                    term_start=term_start,
                    term_end=term_end,
                    is_current=True,
                    created_by=created_by,
                    **jurisdiction.field_values(),
                )
        except IntegrityError as e:
            logger.warning(
                f"Seat {position_id}/{jurisdiction} already has a current holder: {e}"
            )
            raise ConflictError(
                f"Position {position_id} in {jurisdiction} already has a current "
                "holder."
            ) from e

        logger.info(
            f"Created position history {record.pk}: politician {politician_id} "
            f"holds position {position_id} in {jurisdiction} from {term_start}"
        )
        return record

    @transaction.atomic
    def update(
        self,
        history_id: Any,
        *,
        party_id: Any = None,
        term_start: date | None = None,
        term_end: date | None = None,
        is_current: bool | None = None,
        expected_updated_at: Any = None,
    ) -> PositionHistory:
        """
        Correct a current tenure in place.

        ``None`` means "leave unchanged" for every field. No new record is
        created.

        Args:
            history_id: Record to correct
            party_id: New party affiliation
            term_start: Corrected start date
            term_end: Corrected scheduled end date
            is_current: ``False`` closes the tenure with reason ``other``;
                ``True`` is accepted only for a record that is still current
            expected_updated_at: Optimistic check; the update fails with
                ConflictError if the record changed since it was read

        Raises:
            NotFoundError: No record with this id
            ConflictError: The record changed since ``expected_updated_at``
            ValidationError: The record is closed or the dates are invalid
        """
        pk = coerce_id(history_id, "id")
        record = PositionHistory.objects.select_for_update().filter(pk=pk).first()
        if record is None:
            raise NotFoundError(f"Position history {history_id} not found.")

        if expected_updated_at is not None and record.updated_at != expected_updated_at:
            raise ConflictError(
                f"Position history {history_id} was modified concurrently."
            )

        if not record.is_current:
            raise ValidationError(
                f"Position history {history_id} is closed and can no longer be "
                "corrected."
            )

        update_fields = ["updated_at"]
        if party_id is not None:
            self._validate_references(party_id=party_id)
            record.party_id = party_id
            update_fields.append("party")
        if term_start is not None:
            record.term_start = term_start
            update_fields.append("term_start")
        if term_end is not None:
            record.term_end = term_end
            update_fields.append("term_end")
        if is_current is False:
            if record.term_end is None:
                raise ValidationError(
                    {"term_end": "Closing a tenure requires a term end date."}
                )
            record.is_current = False
            record.ended_reason = EndedReason.OTHER
            update_fields.extend(["is_current", "ended_reason"])

        self._validate_dates(record.term_start, record.term_end)
        record.save(update_fields=update_fields)

        logger.info(
            f"Corrected position history {record.pk} in place: "
            f"{', '.join(f for f in update_fields if f != 'updated_at') or 'no fields'}"
        )
        return record

    @transaction.atomic
    def end_term(
        self, history_id: Any, end_date: date, ended_reason: str
    ) -> PositionHistory:
        """
        Close one current tenure.

        Raises:
            NotFoundError: No current record with this id
            ValidationError: Unknown reason or end date before term start
        """
        self._validate_ended_reason(ended_reason)
        record = (
            PositionHistory.objects.current()
            .select_for_update()
            .filter(pk=coerce_id(history_id, "id"))
            .first()
        )
        if record is None:
            raise NotFoundError(f"No current position history {history_id}.")

        self._close(record, end_date, ended_reason)
        logger.info(
            f"Ended term {record.pk} of politician {record.politician_id} "
            f"on {end_date} ({ended_reason})"
        )
        return record

    @transaction.atomic
    def end_current_terms(
        self, politician_id: Any, end_date: date, ended_reason: str
    ) -> list[PositionHistory]:
        """
        Close every current tenure of a politician.

        Raises:
            NotFoundError: The politician holds no current position
            ValidationError: Unknown reason or end date before a term start
        """
        self._validate_ended_reason(ended_reason)
        records = list(
            PositionHistory.objects.current()
            .for_politician(coerce_id(politician_id, "politician_id"))
            .select_for_update()
        )
        if not records:
            raise NotFoundError(
                f"No current term found for politician {politician_id}."
            )

        for record in records:
            self._close(record, end_date, ended_reason)

        logger.info(
            f"Ended {len(records)} current term(s) of politician {politician_id} "
            f"on {end_date} ({ended_reason})"
        )
        return records

    @transaction.atomic
    def bulk_archive_for_election(
        self, election_id: Any, position_ids: Iterable[Any], as_of_date: date
    ) -> list[PositionHistory]:
        """
        Close every current tenure of the given positions for an election.

        Closed records get ``term_end=as_of_date``, reason ``election`` and the
        election id. Seats that are already vacant are skipped, so calling
        this twice closes nothing the second time.

        Returns:
            The records closed by this call (possibly empty).

        Raises:
            ValidationError: A current tenure started after ``as_of_date``
        """
        position_ids = list(position_ids)
        if not position_ids:
            return []

        records = list(
            PositionHistory.objects.current()
            .for_positions(position_ids)
            .select_for_update()
        )
        if not records:
            logger.info(f"Election {election_id}: no current holders to archive")
            return []

        late_starts = [r.pk for r in records if r.term_start > as_of_date]
        if late_starts:
            raise ValidationError(
                f"{len(late_starts)} current tenure(s) start after the election "
                f"date {as_of_date}: {', '.join(str(pk) for pk in late_starts)}"
            )

        now = timezone.now()
        archived = PositionHistory.objects.filter(
            pk__in=[r.pk for r in records], is_current=True
        ).update(
            is_current=False,
            term_end=as_of_date,
            ended_reason=EndedReason.ELECTION,
            election_id=election_id,
            updated_at=now,
        )
        if archived != len(records):
            raise ConflictError(
                f"Election {election_id}: {len(records) - archived} seat(s) changed "
                "while archiving."
            )

        for record in records:
            record.is_current = False
            record.term_end = as_of_date
            record.ended_reason = EndedReason.ELECTION
            record.election_id = election_id
            record.updated_at = now

        logger.info(
            f"Election {election_id}: archived {archived} current holder(s) "
            f"across {len(position_ids)} position(s) as of {as_of_date}"
        )
        return records

    @transaction.atomic
    def delete(self, history_id: Any) -> PositionHistory:
        """Hard-delete a record entered by mistake. Returns the deleted row."""
        pk = coerce_id(history_id, "id")
        record = PositionHistory.objects.select_for_update().filter(pk=pk).first()
        if record is None:
            raise NotFoundError(f"Position history {history_id} not found.")
        record.delete()
        # delete() clears the pk; keep it for cache invalidation
        record.pk = history_id
        logger.info(f"Deleted position history {history_id}")
        return record

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _close(
        self, record: PositionHistory, end_date: date, ended_reason: str
    ) -> None:
        if end_date is None:
            raise ValidationError({"end_date": "An end date is required."})
        if end_date < record.term_start:
            raise ValidationError(
                {
                    "end_date": (
                        f"End date {end_date} is before term start "
                        f"{record.term_start}."
                    )
                }
            )
        record.is_current = False
        record.term_end = end_date
        record.ended_reason = ended_reason
        record.save(
            update_fields=["is_current", "term_end", "ended_reason", "updated_at"]
        )

    def _validate_ended_reason(self, ended_reason: str) -> None:
        if ended_reason not in VALID_ENDED_REASONS:
            raise ValidationError(
                {
                    "ended_reason": (
                        f"'{ended_reason}' is not a valid reason. "
                        f"Choose from: {', '.join(sorted(VALID_ENDED_REASONS))}."
                    )
                }
            )

    def _validate_dates(self, term_start: date | None, term_end: date | None) -> None:
        if term_start is None:
            raise ValidationError({"term_start": "Term start date is required."})
        if term_end is not None and term_end < term_start:
            raise ValidationError(
                {"term_end": "Term end date cannot be before term start date."}
            )

    def _validate_references(
        self,
        *,
        politician_id: Any = None,
        position_id: Any = None,
        jurisdiction: Jurisdiction | None = None,
        party_id: Any = None,
        election_id: Any = None,
    ) -> None:
        checks: list[tuple[str, QuerySet, Any]] = []
        if politician_id is not None:
            checks.append(("politician_id", Politician.objects.all(), politician_id))
        if position_id is not None:
            checks.append(
                ("position_id", GovernmentPosition.objects.all(), position_id)
            )
        if jurisdiction is not None and not jurisdiction.is_national:
            model = JURISDICTION_MODELS[jurisdiction.level]
            checks.append(
                (jurisdiction.level.field_name, model.objects.all(), jurisdiction.id)
            )
        if party_id is not None:
            checks.append(("party_id", PoliticalParty.objects.all(), party_id))
        if election_id is not None:
            checks.append(("election_id", ElectionEvent.objects.all(), election_id))

        errors = {}
        for field, queryset, value in checks:
            # Malformed ids fail here as ValidationError, before any query
            pk = coerce_id(value, field)
            if not queryset.filter(pk=pk).exists():
                errors[field] = f"{queryset.model.__name__} {value} does not exist."
        if errors:
            raise ValidationError(errors)


class _Row:
    """Attribute view over a ``values()`` row, for Jurisdiction.from_record."""

    def __init__(self, row: dict[str, Any]) -> None:
        self.__dict__.update(row)
