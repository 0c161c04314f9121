"""
Integration tests for PositionHistoryStore.

Exercises the temporal table against the database: record creation and its
validation, current-holder lookups per jurisdiction, in-place correction,
closing tenures and bulk archival for an election.
"""

from datetime import date, timedelta

import pytest
from django.core.exceptions import ObjectDoesNotExist

from seatpulse.exceptions import (
    ConflictError,
    NotFoundError,
    PositionHistoryError,
    ValidationError,
)
from seatpulse.jurisdiction import Jurisdiction, JurisdictionLevel
from seatpulse.models import EndedReason, PositionHistory
from seatpulse.services.position_history_store import PositionHistoryStore

TERM_START = date(2022, 6, 30)


@pytest.fixture
def store():
    return PositionHistoryStore()


@pytest.fixture
def seat(store, alice, mayor, city_jurisdiction, party):
    """Alice is the current mayor of Bacoor."""
    return store.create(
        politician_id=alice.id,
        position_id=mayor.id,
        jurisdiction=city_jurisdiction,
        term_start=TERM_START,
        party_id=party.id,
    )


# ============================================================================
# create()
# ============================================================================


@pytest.mark.django_db
class TestCreate:
    def test_create_stores_a_current_record(self, seat, alice, mayor, city, party):
        record = PositionHistory.objects.get(pk=seat.pk)

        assert record.is_current is True
        assert record.politician_id == alice.id
        assert record.position_id == mayor.id
        assert record.party_id == party.id
        assert record.city_id == city.id
        assert record.is_national is False
        assert record.region_id is None
        assert record.term_end is None
        assert record.ended_reason is None

    def test_create_national_record(self, store, alice, senator, national, admin_user):
        record = store.create(
            politician_id=alice.id,
            position_id=senator.id,
            jurisdiction=national,
            term_start=TERM_START,
            created_by=admin_user,
        )

        assert record.is_national is True
        assert record.created_by == admin_user
        assert Jurisdiction.from_record(record) == national

    def test_missing_term_start_is_rejected(self, store, alice, mayor, national):
        with pytest.raises(ValidationError) as exc_info:
            store.create(
                politician_id=alice.id,
                position_id=mayor.id,
                jurisdiction=national,
                term_start=None,
            )

        assert "term_start" in exc_info.value.message_dict
        assert PositionHistory.objects.count() == 0

    def test_term_end_before_term_start_is_rejected(
        self, store, alice, mayor, national
    ):
        with pytest.raises(ValidationError):
            store.create(
                politician_id=alice.id,
                position_id=mayor.id,
                jurisdiction=national,
                term_start=TERM_START,
                term_end=TERM_START - timedelta(days=1),
            )

    def test_unknown_references_are_rejected(self, store, alice, mayor, province):
        missing_city = Jurisdiction(JurisdictionLevel.CITY, province.id)

        with pytest.raises(ValidationError) as exc_info:
            store.create(
                politician_id=alice.id,
                position_id=mayor.id,
                jurisdiction=missing_city,
                term_start=TERM_START,
                party_id=province.id,
            )

        errors = exc_info.value.message_dict
        assert "city_id" in errors
        assert "party_id" in errors

    @pytest.mark.parametrize("field", ["politician_id", "position_id", "party_id"])
    def test_malformed_ids_are_rejected(self, store, alice, mayor, national, field):
        ids = {"politician_id": alice.id, "position_id": mayor.id, "party_id": None}
        ids[field] = "not-a-uuid"

        with pytest.raises(ValidationError) as exc_info:
            store.create(jurisdiction=national, term_start=TERM_START, **ids)

        assert isinstance(exc_info.value, PositionHistoryError)
        assert field in exc_info.value.message_dict
        assert not PositionHistory.objects.exists()

    def test_second_current_holder_for_a_seat_conflicts(
        self, store, seat, bob, mayor, city_jurisdiction
    ):
        with pytest.raises(ConflictError):
            store.create(
                politician_id=bob.id,
                position_id=mayor.id,
                jurisdiction=city_jurisdiction,
                term_start=TERM_START,
            )

        assert PositionHistory.objects.current().count() == 1

    def test_same_position_in_another_city_is_a_different_seat(
        self, store, seat, bob, mayor, other_city_jurisdiction
    ):
        store.create(
            politician_id=bob.id,
            position_id=mayor.id,
            jurisdiction=other_city_jurisdiction,
            term_start=TERM_START,
        )

        assert PositionHistory.objects.current().for_position(mayor.id).count() == 2


# ============================================================================
# Reads
# ============================================================================


@pytest.mark.django_db
class TestReads:
    def test_get_by_id_unknown_raises_not_found(self, store, mayor):
        with pytest.raises(NotFoundError):
            store.get_by_id(mayor.id)

    def test_not_found_is_an_object_does_not_exist(self, store, mayor):
        with pytest.raises(ObjectDoesNotExist):
            store.get_by_id(mayor.id)

    def test_malformed_ids_in_reads_are_rejected(self, store, national):
        with pytest.raises(ValidationError):
            store.get_by_id("not-a-uuid")
        with pytest.raises(ValidationError):
            store.get_current_holder("not-a-uuid", national)
        with pytest.raises(ValidationError):
            store.get_history("not-a-uuid")

    def test_vacant_seat_has_no_current_holder(self, store, mayor, city_jurisdiction):
        assert store.get_current_holder(mayor.id, city_jurisdiction) is None

    def test_current_holder_is_scoped_to_the_jurisdiction(
        self, store, seat, mayor, city_jurisdiction, other_city_jurisdiction
    ):
        assert store.get_current_holder(mayor.id, city_jurisdiction) == seat
        assert store.get_current_holder(mayor.id, other_city_jurisdiction) is None

    def test_history_lists_current_first_then_newest(
        self, store, alice, mayor, senator, national, city_jurisdiction
    ):
        first = store.create(
            politician_id=alice.id,
            position_id=senator.id,
            jurisdiction=national,
            term_start=date(2010, 6, 30),
        )
        store.end_term(first.pk, date(2016, 6, 30), EndedReason.TERM_EXPIRED)
        second = store.create(
            politician_id=alice.id,
            position_id=senator.id,
            jurisdiction=national,
            term_start=date(2016, 6, 30),
        )
        store.end_term(second.pk, date(2019, 6, 30), EndedReason.RESIGNED)
        current = store.create(
            politician_id=alice.id,
            position_id=mayor.id,
            jurisdiction=city_jurisdiction,
            term_start=date(2019, 6, 30),
        )

        history = store.get_history(alice.id)

        assert [r.pk for r in history] == [current.pk, second.pk, first.pk]

    def test_holders_of_a_position(self, store, seat, bob, mayor, city_jurisdiction):
        store.end_term(seat.pk, date(2025, 6, 30), EndedReason.TERM_EXPIRED)
        successor = store.create(
            politician_id=bob.id,
            position_id=mayor.id,
            jurisdiction=city_jurisdiction,
            term_start=date(2025, 6, 30),
        )

        holders = store.get_holders(mayor.id)

        assert [r.pk for r in holders] == [successor.pk, seat.pk]

    def test_current_positions_of_a_politician(
        self, store, seat, alice, captain, barangay
    ):
        store.create(
            politician_id=alice.id,
            position_id=captain.id,
            jurisdiction=Jurisdiction(JurisdictionLevel.BARANGAY, barangay.id),
            term_start=date(2023, 11, 30),
        )

        current = store.get_current_for_politician(alice.id)

        assert len(current) == 2
        assert current[0].position_id == captain.id


# ============================================================================
# update()
# ============================================================================


@pytest.mark.django_db
class TestUpdate:
    def test_update_changes_only_given_fields(self, store, seat, other_party):
        updated = store.update(seat.pk, party_id=other_party.id)

        assert updated.pk == seat.pk
        assert updated.party_id == other_party.id
        assert updated.term_start == TERM_START
        assert updated.is_current is True
        assert PositionHistory.objects.count() == 1

    def test_update_corrects_dates(self, store, seat):
        store.update(
            seat.pk, term_start=date(2022, 7, 1), term_end=date(2025, 6, 30)
        )

        record = PositionHistory.objects.get(pk=seat.pk)
        assert record.term_start == date(2022, 7, 1)
        assert record.term_end == date(2025, 6, 30)

    def test_stale_version_conflicts(self, store, seat, other_party):
        stale = seat.updated_at
        store.update(seat.pk, party_id=other_party.id)

        with pytest.raises(ConflictError):
            store.update(seat.pk, term_end=date(2025, 6, 30), expected_updated_at=stale)

    def test_matching_version_succeeds(self, store, seat):
        record = store.update(
            seat.pk, term_end=date(2025, 6, 30), expected_updated_at=seat.updated_at
        )

        assert record.term_end == date(2025, 6, 30)

    def test_closed_record_cannot_be_corrected(self, store, seat, other_party):
        store.end_term(seat.pk, date(2025, 6, 30), EndedReason.TERM_EXPIRED)

        with pytest.raises(ValidationError):
            store.update(seat.pk, party_id=other_party.id)

    def test_closing_through_update_requires_term_end(self, store, seat):
        with pytest.raises(ValidationError):
            store.update(seat.pk, is_current=False)

    def test_closing_through_update_records_reason_other(self, store, seat):
        record = store.update(seat.pk, is_current=False, term_end=date(2024, 1, 1))

        assert record.is_current is False
        assert record.ended_reason == EndedReason.OTHER

    def test_invalid_corrected_dates_are_rejected(self, store, seat):
        with pytest.raises(ValidationError):
            store.update(seat.pk, term_end=TERM_START - timedelta(days=1))

    def test_unknown_record_raises_not_found(self, store, mayor):
        with pytest.raises(NotFoundError):
            store.update(mayor.id, term_end=date(2025, 6, 30))


# ============================================================================
# end_term() / end_current_terms() / delete()
# ============================================================================


@pytest.mark.django_db
class TestEndTerm:
    def test_ending_a_term_vacates_the_seat(
        self, store, seat, mayor, city_jurisdiction
    ):
        closed = store.end_term(seat.pk, date(2025, 6, 30), EndedReason.RESIGNED)

        assert closed.is_current is False
        assert closed.term_end == date(2025, 6, 30)
        assert closed.ended_reason == EndedReason.RESIGNED
        assert store.get_current_holder(mayor.id, city_jurisdiction) is None

    def test_ending_a_closed_term_raises_not_found(self, store, seat):
        store.end_term(seat.pk, date(2025, 6, 30), EndedReason.RESIGNED)

        with pytest.raises(NotFoundError):
            store.end_term(seat.pk, date(2025, 7, 1), EndedReason.RESIGNED)

    def test_end_date_before_term_start_is_rejected(self, store, seat):
        with pytest.raises(ValidationError):
            store.end_term(seat.pk, TERM_START - timedelta(days=1), EndedReason.OTHER)

        assert PositionHistory.objects.get(pk=seat.pk).is_current is True

    def test_unknown_reason_is_rejected(self, store, seat):
        with pytest.raises(ValidationError):
            store.end_term(seat.pk, date(2025, 6, 30), "impeached")

    def test_end_current_terms_closes_every_current_record(
        self, store, seat, alice, captain, barangay
    ):
        store.create(
            politician_id=alice.id,
            position_id=captain.id,
            jurisdiction=Jurisdiction(JurisdictionLevel.BARANGAY, barangay.id),
            term_start=date(2023, 11, 30),
        )

        closed = store.end_current_terms(
            alice.id, date(2025, 1, 15), EndedReason.DECEASED
        )

        assert len(closed) == 2
        assert not PositionHistory.objects.current().for_politician(alice.id).exists()

    def test_end_current_terms_without_current_record_raises(self, store, bob):
        with pytest.raises(NotFoundError):
            store.end_current_terms(bob.id, date(2025, 1, 15), EndedReason.OTHER)

    def test_delete_removes_the_record(self, store, seat):
        deleted = store.delete(seat.pk)

        assert deleted.pk == seat.pk
        assert not PositionHistory.objects.filter(pk=seat.pk).exists()

    def test_delete_unknown_record_raises_not_found(self, store, seat):
        store.delete(seat.pk)

        with pytest.raises(NotFoundError):
            store.delete(seat.pk)


# ============================================================================
# bulk_archive_for_election()
# ============================================================================


@pytest.mark.django_db
class TestBulkArchiveForElection:
    @pytest.fixture
    def held_seats(self, store, alice, bob, senator, governor, province, national):
        return [
            store.create(
                politician_id=alice.id,
                position_id=senator.id,
                jurisdiction=national,
                term_start=date(2019, 6, 30),
            ),
            store.create(
                politician_id=bob.id,
                position_id=governor.id,
                jurisdiction=Jurisdiction(JurisdictionLevel.PROVINCE, province.id),
                term_start=date(2022, 6, 30),
            ),
        ]

    def test_archival_closes_held_seats_and_skips_vacant_ones(
        self, store, held_seats, senator, governor, mayor, election
    ):
        position_ids = [senator.id, governor.id, mayor.id]

        closed = store.bulk_archive_for_election(
            election.id, position_ids, election.election_date
        )

        assert len(closed) == 2
        for record in PositionHistory.objects.filter(pk__in=[r.pk for r in held_seats]):
            assert record.is_current is False
            assert record.term_end == election.election_date
            assert record.ended_reason == EndedReason.ELECTION
            assert record.election_id == election.id

    def test_archival_is_idempotent(
        self, store, held_seats, senator, governor, mayor, election
    ):
        position_ids = [senator.id, governor.id, mayor.id]
        store.bulk_archive_for_election(
            election.id, position_ids, election.election_date
        )

        again = store.bulk_archive_for_election(
            election.id, position_ids, election.election_date
        )

        assert again == []
        assert PositionHistory.objects.count() == 2

    def test_archival_only_touches_listed_positions(
        self, store, held_seats, senator, governor, election
    ):
        store.bulk_archive_for_election(
            election.id, [senator.id], election.election_date
        )

        assert not PositionHistory.objects.current().for_position(senator.id).exists()
        assert PositionHistory.objects.current().for_position(governor.id).exists()

    def test_empty_position_set_closes_nothing(self, store, held_seats, election):
        assert store.bulk_archive_for_election(election.id, [], date(2025, 5, 12)) == []
        assert PositionHistory.objects.current().count() == 2

    def test_tenure_starting_after_the_election_aborts_everything(
        self, store, held_seats, carol, mayor, senator, city_jurisdiction, election
    ):
        store.create(
            politician_id=carol.id,
            position_id=mayor.id,
            jurisdiction=city_jurisdiction,
            term_start=date(2025, 6, 30),
        )

        with pytest.raises(ValidationError):
            store.bulk_archive_for_election(
                election.id, [senator.id, mayor.id], election.election_date
            )

        assert PositionHistory.objects.current().count() == 3


@pytest.mark.django_db
def test_consistent_table_has_no_invariant_violations(store, seat):
    assert store.find_invariant_violations() == []
