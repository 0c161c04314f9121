"""
Django management command for auditing the one-current-holder-per-seat rule.

Reports every seat (position and jurisdiction) with more than one current
tenure. Exits with an error when any are found so it can gate deployments
and data loads.

Usage Examples:
    python manage.py audit_current_holders
"""

from typing import Any

from django.core.management.base import BaseCommand, CommandError
from loguru import logger

from seatpulse.services.position_history_store import PositionHistoryStore


class Command(BaseCommand):
    help = "Report seats that have more than one current holder"

    def handle(self, *args: Any, **options: Any) -> None:
        violations = PositionHistoryStore().find_invariant_violations()

        if not violations:
            self.stdout.write(self.style.SUCCESS("Every seat has at most one holder"))
            return

        for violation in violations:
            self.stdout.write(
                self.style.ERROR(
                    f"  - position {violation['position_id']} in "
                    f"{violation['jurisdiction']}: "
                    f"{violation['current_count']} current holders"
                )
            )
        logger.error(f"Found {len(violations)} seat(s) with multiple current holders")
        raise CommandError(f"{len(violations)} seat(s) have multiple current holders")
