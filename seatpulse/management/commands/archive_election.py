"""
Django management command for archiving current officeholders before an election.

Closes every current tenure of the positions up for election, as of the
election date, and moves the election to ``in_progress``. Run it once before
importing the election results; running it again archives nothing new.

Usage Examples:
    # Archive every elected national position
    python manage.py archive_election <election-uuid> --level national

    # Archive specific positions
    python manage.py archive_election <election-uuid> \\
        --position <senator-uuid> --position <party-list-uuid>

    # Preview without changing anything
    python manage.py archive_election <election-uuid> --level city --dry-run
"""

import uuid
from typing import Any

from django.core.management.base import BaseCommand, CommandError
from loguru import logger

from seatpulse.exceptions import PositionHistoryError
from seatpulse.models import ElectionEvent, GovernmentPosition, PositionHistory
from seatpulse.services.election_archival import ElectionArchivalService


class Command(BaseCommand):
    """Archive current holders of the positions contested in an election."""

    help = "Archive current holders of positions before importing election results"

    def add_arguments(self, parser) -> None:
        parser.add_argument("election_id", type=uuid.UUID, help="ElectionEvent UUID")
        parser.add_argument(
            "--position",
            action="append",
            default=[],
            dest="positions",
            type=uuid.UUID,
            help="GovernmentPosition UUID to archive (repeatable)",
        )
        parser.add_argument(
            "--level",
            action="append",
            default=[],
            dest="levels",
            choices=[choice for choice, _ in GovernmentPosition.LEVEL_CHOICES],
            help="Archive every elected position at this level (repeatable)",
        )
        parser.add_argument(
            "--timeout",
            type=float,
            default=None,
            help="Abort and roll back if archival takes longer (seconds)",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="List the holders that would be archived without saving",
        )

    def handle(self, *args: Any, **options: Any) -> None:
        election_id = options["election_id"]
        position_ids = self._collect_positions(options["positions"], options["levels"])
        if not position_ids:
            raise CommandError("No positions selected. Use --position or --level.")

        logger.info(
            f"Archiving election {election_id} for {len(position_ids)} position(s)"
        )

        if options["dry_run"]:
            self._preview(election_id, position_ids)
            return

        service = ElectionArchivalService()
        try:
            result = service.archive(
                election_id, position_ids, timeout=options["timeout"]
            )
        except PositionHistoryError as e:
            logger.error(f"Archival of election {election_id} failed: {e}")
            raise CommandError(f"Archival failed: {e}") from e

        self.stdout.write(
            self.style.SUCCESS(
                f"Archived {result.archived_count} current holder(s) across "
                f"{len(position_ids)} position(s)"
            )
        )
        for record in result.closed:
            self.stdout.write(
                f"  - politician {record.politician_id} @ position "
                f"{record.position_id} (ended {record.term_end})"
            )

    def _collect_positions(
        self, positions: list[uuid.UUID], levels: list[str]
    ) -> list[uuid.UUID]:
        position_ids: list[uuid.UUID] = []
        if positions:
            found = set(
                GovernmentPosition.objects.filter(pk__in=positions).values_list(
                    "pk", flat=True
                )
            )
            missing = [str(p) for p in positions if p not in found]
            if missing:
                raise CommandError(f"Unknown position(s): {', '.join(missing)}")
            position_ids.extend(positions)
        if levels:
            position_ids.extend(
                GovernmentPosition.objects.filter(
                    level__in=levels, is_elected=True
                ).values_list("pk", flat=True)
            )
        return list(dict.fromkeys(position_ids))

    def _preview(self, election_id: uuid.UUID, position_ids: list[uuid.UUID]) -> None:
        election = ElectionEvent.objects.filter(pk=election_id).first()
        if election is None:
            raise CommandError(f"Election {election_id} not found.")

        holders = (
            PositionHistory.objects.current()
            .for_positions(position_ids)
            .with_related()
        )
        for record in holders:
            self.stdout.write(
                f"  - {record.politician.name} @ {record.position.name} "
                f"(since {record.term_start})"
            )
        self.stdout.write(
            self.style.WARNING(
                f"DRY RUN MODE - {len(holders)} holder(s) would be archived as of "
                f"{election.election_date}"
            )
        )
