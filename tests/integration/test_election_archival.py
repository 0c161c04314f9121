"""
Integration tests for ElectionArchivalService.

Archival closes current holders as of the election date, moves the election
to in_progress and can be repeated safely. The status lifecycle and the
statistics report are covered as well.
"""

from datetime import date
from unittest.mock import patch

import pytest

from seatpulse.exceptions import NotFoundError, TransactionError, ValidationError
from seatpulse.jurisdiction import Jurisdiction, JurisdictionLevel
from seatpulse.models import ElectionEvent, EndedReason, PositionHistory
from seatpulse.services.assignment import AssignmentMode, AssignmentRequest
from seatpulse.services.election_archival import ElectionArchivalService
from seatpulse.services.position_history_service import PositionHistoryService


@pytest.fixture
def service():
    return ElectionArchivalService()


@pytest.fixture
def held_seats(alice, bob, senator, governor, province, national, party):
    """Alice is a senator and Bob is governor of Cavite; the mayoralty is vacant."""
    history = PositionHistoryService()
    return [
        history.assign_position(
            AssignmentRequest(
                politician_id=alice.id,
                position_id=senator.id,
                jurisdiction=national,
                term_start=date(2019, 6, 30),
                party_id=party.id,
            )
        ).record,
        history.assign_position(
            AssignmentRequest(
                politician_id=bob.id,
                position_id=governor.id,
                jurisdiction=Jurisdiction(JurisdictionLevel.PROVINCE, province.id),
                term_start=date(2022, 6, 30),
            )
        ).record,
    ]


@pytest.fixture
def contested(senator, governor, mayor):
    return [senator.id, governor.id, mayor.id]


@pytest.mark.django_db
class TestArchive:
    def test_archive_closes_held_seats_with_the_election_date(
        self, service, held_seats, contested, election
    ):
        result = service.archive(election.id, contested)

        assert result.archived_count == 2
        assert {r.pk for r in result.closed} == {r.pk for r in held_seats}
        for record in PositionHistory.objects.all():
            assert record.is_current is False
            assert record.term_end == date(2025, 5, 12)
            assert record.ended_reason == EndedReason.ELECTION
            assert record.election_id == election.id

    def test_archive_moves_election_in_progress(
        self, service, held_seats, contested, election
    ):
        service.archive(election.id, contested)

        election.refresh_from_db()
        assert election.status == ElectionEvent.STATUS_IN_PROGRESS

    def test_archive_is_idempotent(self, service, held_seats, contested, election):
        service.archive(election.id, contested)

        again = service.archive(election.id, contested)

        assert again.archived_count == 0
        assert PositionHistory.objects.filter(
            ended_reason=EndedReason.ELECTION
        ).count() == 2

    def test_archive_clears_politician_projection(
        self, service, held_seats, contested, election, alice
    ):
        alice.refresh_from_db()
        assert alice.current_position is not None

        service.archive(election.id, contested)

        alice.refresh_from_db()
        assert alice.current_position is None
        assert alice.current_party is None

    def test_archive_invalidates_cached_holders(
        self, service, held_seats, contested, election, senator, national
    ):
        history = PositionHistoryService()
        assert history.get_current_holder(senator.id, national) is not None

        service.archive(election.id, contested)

        assert history.get_current_holder(senator.id, national) is None

    def test_unknown_election_raises_not_found(self, service, contested, alice):
        with pytest.raises(NotFoundError):
            service.archive(alice.id, contested)

    @pytest.mark.parametrize(
        "status",
        [
            ElectionEvent.STATUS_COMPLETED,
            ElectionEvent.STATUS_CANCELLED,
            ElectionEvent.STATUS_FAILED,
        ],
    )
    def test_finished_elections_cannot_be_archived(
        self, service, held_seats, contested, election, status
    ):
        ElectionEvent.objects.filter(pk=election.pk).update(status=status)

        with pytest.raises(ValidationError):
            service.archive(election.id, contested)

        assert PositionHistory.objects.current().count() == 2

    def test_status_failure_rolls_back_the_archival(
        self, service, held_seats, contested, election
    ):
        with patch.object(
            ElectionArchivalService,
            "_set_status",
            side_effect=TransactionError("status update failed"),
        ):
            with pytest.raises(TransactionError):
                service.archive(election.id, contested)

        assert PositionHistory.objects.current().count() == 2


@pytest.mark.django_db
class TestStatusLifecycle:
    def test_complete_after_archival(self, service, held_seats, contested, election):
        service.archive(election.id, contested)

        completed = service.complete(election.id)

        assert completed.status == ElectionEvent.STATUS_COMPLETED

    def test_fail_marks_the_election_failed(self, service, election):
        assert service.fail(election.id).status == ElectionEvent.STATUS_FAILED

    def test_completing_twice_is_a_no_op(self, service, election):
        service.complete(election.id)

        assert service.complete(election.id).status == ElectionEvent.STATUS_COMPLETED

    def test_failed_election_cannot_be_completed(self, service, election):
        service.fail(election.id)

        with pytest.raises(ValidationError):
            service.complete(election.id)

    def test_unknown_election_raises_not_found(self, service, alice):
        with pytest.raises(NotFoundError):
            service.complete(alice.id)


@pytest.mark.django_db
class TestStatistics:
    def test_statistics_count_archived_and_imported_tenures(
        self, service, held_seats, contested, election, carol, senator, national
    ):
        service.archive(election.id, contested)
        PositionHistoryService().assign_position(
            AssignmentRequest(
                politician_id=carol.id,
                position_id=senator.id,
                jurisdiction=national,
                term_start=date(2025, 6, 30),
                election_id=election.id,
                mode=AssignmentMode.NEW_TERM,
            )
        )

        stats = service.statistics(election.id)

        assert stats.election_name == "2025 Midterm Elections"
        assert stats.status == ElectionEvent.STATUS_IN_PROGRESS
        assert stats.total_positions == 2
        assert stats.positions_archived == 2
        assert stats.politicians_imported == 1

    def test_statistics_for_unknown_election(self, service, alice):
        with pytest.raises(NotFoundError):
            service.statistics(alice.id)
