import uuid

from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import Q, QuerySet


class User(AbstractUser):
    """Extended User model with roles for administrative actions."""

    ROLE_CHOICES = [
        ("admin", "Administrator"),
        ("editor", "Editor"),
        ("importer", "Import Pipeline"),
        ("viewer", "Viewer"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default="viewer")
    organization = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "users"
        indexes = [
            models.Index(fields=["email"], name="users_email_idx"),
            models.Index(fields=["role"], name="users_role_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


# ============================================================================
# Location hierarchy
# ============================================================================


class Region(models.Model):
    """Philippine administrative region."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    code = models.CharField(max_length=20, unique=True)
    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=200, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "regions"
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Province(models.Model):
    """Province within a region."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    region = models.ForeignKey(
        Region, on_delete=models.CASCADE, related_name="provinces"
    )
    code = models.CharField(max_length=20, unique=True)
    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=200, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "provinces"
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class CityMunicipality(models.Model):
    """City or municipality within a province."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    province = models.ForeignKey(
        Province, on_delete=models.CASCADE, related_name="cities_municipalities"
    )
    code = models.CharField(max_length=20, unique=True)
    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=200, unique=True)
    is_city = models.BooleanField(default=False)
    is_capital = models.BooleanField(default=False)
    population = models.IntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "cities_municipalities"
        ordering = ["name"]
        verbose_name_plural = "Cities and municipalities"

    def __str__(self) -> str:
        return self.name


class Barangay(models.Model):
    """Barangay within a city or municipality."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    city_municipality = models.ForeignKey(
        CityMunicipality, on_delete=models.CASCADE, related_name="barangays"
    )
    code = models.CharField(max_length=20, unique=True)
    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=200, unique=True)
    population = models.IntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "barangays"
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class CongressionalDistrict(models.Model):
    """Congressional district, attached to a province or a lone-district city."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    province = models.ForeignKey(
        Province,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="congressional_districts",
    )
    city_municipality = models.ForeignKey(
        CityMunicipality,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="congressional_districts",
    )
    district_number = models.PositiveIntegerField()
    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=200, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "congressional_districts"
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


# ============================================================================
# Political reference data
# ============================================================================


class PoliticalParty(models.Model):
    """Political party a tenure can be affiliated with."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=200, unique=True)
    abbreviation = models.CharField(max_length=20, blank=True)
    color = models.CharField(max_length=7, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "political_parties"
        ordering = ["name"]
        verbose_name_plural = "Political parties"

    def __str__(self) -> str:
        return self.name


class GovernmentPosition(models.Model):
    """Government office such as Senator, Governor or Barangay Captain."""

    LEVEL_CHOICES = [
        ("national", "National"),
        ("regional", "Regional"),
        ("provincial", "Provincial"),
        ("city", "City"),
        ("municipal", "Municipal"),
        ("barangay", "Barangay"),
        ("district", "Congressional District"),
    ]

    BRANCH_CHOICES = [
        ("executive", "Executive"),
        ("legislative", "Legislative"),
        ("judicial", "Judicial"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=200, unique=True)
    level = models.CharField(max_length=20, choices=LEVEL_CHOICES)
    branch = models.CharField(max_length=20, choices=BRANCH_CHOICES)
    display_order = models.IntegerField(default=0)
    description = models.TextField(blank=True)
    max_terms = models.PositiveIntegerField(null=True, blank=True)
    term_years = models.PositiveIntegerField(default=3)
    is_elected = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "government_positions"
        ordering = ["display_order", "name"]
        indexes = [
            models.Index(fields=["level"], name="gov_position_level_idx"),
            models.Index(
                fields=["level", "is_elected"], name="gov_position_level_elect_idx"
            ),
        ]

    def __str__(self) -> str:
        return self.name


class Politician(models.Model):
    """
    Politician profile.

    ``current_position`` and ``current_party`` are a denormalized projection of
    the politician's current PositionHistory record. They are refreshed by the
    position history service after every mutation and must never be used to
    decide who holds a seat.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=200, unique=True)
    current_position = models.ForeignKey(
        GovernmentPosition,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="current_politicians",
    )
    current_party = models.ForeignKey(
        PoliticalParty,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="current_members",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "politicians"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["name"], name="politicians_name_idx"),
        ]

    def __str__(self) -> str:
        return self.name


class ElectionEvent(models.Model):
    """Real-world election that triggers bulk turnover of seats."""

    STATUS_SCHEDULED = "scheduled"
    STATUS_IN_PROGRESS = "in_progress"
    STATUS_COMPLETED = "completed"
    STATUS_CANCELLED = "cancelled"
    STATUS_FAILED = "failed"

    STATUS_CHOICES = [
        (STATUS_SCHEDULED, "Scheduled"),
        (STATUS_IN_PROGRESS, "In Progress"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
        (STATUS_FAILED, "Failed"),
    ]

    LEVEL_CHOICES = [
        ("national", "National"),
        ("local", "Local"),
        ("barangay", "Barangay"),
        ("regional", "Regional"),
        ("provincial", "Provincial"),
        ("city", "City"),
        ("municipal", "Municipal"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    election_date = models.DateField()
    level = models.CharField(max_length=20, choices=LEVEL_CHOICES)
    status = models.CharField(
        max_length=20, choices=STATUS_CHOICES, default=STATUS_SCHEDULED
    )

    # Audit fields
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="elections_created",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "election_events"
        ordering = ["-election_date"]
        indexes = [
            models.Index(fields=["election_date"], name="election_date_idx"),
            models.Index(fields=["status"], name="election_status_idx"),
            models.Index(fields=["level"], name="election_level_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.election_date})"


# ============================================================================
# Position history
# ============================================================================


class EndedReason(models.TextChoices):
    """Why a tenure was closed."""

    TERM_CHANGE = "term_change", "New term for the same politician"
    REPLACED = "replaced", "Replaced by another politician"
    ELECTION = "election", "Archived ahead of an election"
    TERM_EXPIRED = "term_expired", "Term expired"
    RESIGNED = "resigned", "Resigned"
    DECEASED = "deceased", "Deceased"
    OTHER = "other", "Other"


# National with no location, or exactly one location id
_SINGLE_JURISDICTION = (
    Q(
        is_national=True,
        region__isnull=True,
        province__isnull=True,
        city__isnull=True,
        barangay__isnull=True,
        district__isnull=True,
    )
    | Q(
        is_national=False,
        region__isnull=False,
        province__isnull=True,
        city__isnull=True,
        barangay__isnull=True,
        district__isnull=True,
    )
    | Q(
        is_national=False,
        region__isnull=True,
        province__isnull=False,
        city__isnull=True,
        barangay__isnull=True,
        district__isnull=True,
    )
    | Q(
        is_national=False,
        region__isnull=True,
        province__isnull=True,
        city__isnull=False,
        barangay__isnull=True,
        district__isnull=True,
    )
    | Q(
        is_national=False,
        region__isnull=True,
        province__isnull=True,
        city__isnull=True,
        barangay__isnull=False,
        district__isnull=True,
    )
    | Q(
        is_national=False,
        region__isnull=True,
        province__isnull=True,
        city__isnull=True,
        barangay__isnull=True,
        district__isnull=False,
    )
)


class PositionHistoryQuerySet(models.QuerySet):
    """Query helpers for temporal position records."""

    def current(self) -> QuerySet:
        """Return only records that are the current holder of their seat."""
        return self.filter(is_current=True)

    def closed(self) -> QuerySet:
        """Return only records whose tenure has ended."""
        return self.filter(is_current=False)

    def for_politician(self, politician_id) -> QuerySet:
        return self.filter(politician_id=politician_id)

    def for_position(self, position_id) -> QuerySet:
        return self.filter(position_id=position_id)

    def for_positions(self, position_ids) -> QuerySet:
        return self.filter(position_id__in=position_ids)

    def for_election(self, election_id) -> QuerySet:
        return self.filter(election_id=election_id)

    def with_related(self) -> QuerySet:
        """Join the reference rows rendered alongside a tenure."""
        return self.select_related("politician", "position", "party", "election")


class PositionHistory(models.Model):
    """
    One continuous tenure of one politician in one position and jurisdiction.

    At most one record per (position, jurisdiction) has ``is_current=True``.
    Closed records carry a ``term_end`` and an ``ended_reason``.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    politician = models.ForeignKey(
        Politician, on_delete=models.CASCADE, related_name="position_history"
    )
    position = models.ForeignKey(
        GovernmentPosition, on_delete=models.PROTECT, related_name="holders"
    )
    party = models.ForeignKey(
        PoliticalParty,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="tenures",
    )

    # Jurisdiction: the national flag or exactly one location
    is_national = models.BooleanField(default=False)
    region = models.ForeignKey(
        Region,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="tenures",
    )
    province = models.ForeignKey(
        Province,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="tenures",
    )
    city = models.ForeignKey(
        CityMunicipality,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="tenures",
    )
    barangay = models.ForeignKey(
        Barangay,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="tenures",
    )
    district = models.ForeignKey(
        CongressionalDistrict,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="tenures",
    )

    # Term
    term_start = models.DateField()
    term_end = models.DateField(null=True, blank=True)
    is_current = models.BooleanField(default=True)
    ended_reason = models.CharField(
        max_length=20, choices=EndedReason.choices, null=True, blank=True
    )

    election = models.ForeignKey(
        ElectionEvent,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="tenures",
    )

    # Audit fields
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="position_history_created",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = PositionHistoryQuerySet.as_manager()

    class Meta:
        db_table = "politician_position_history"
        ordering = ["-is_current", "-term_start"]
        verbose_name_plural = "Position history"
        indexes = [
            models.Index(fields=["politician"], name="pph_politician_idx"),
            models.Index(fields=["position"], name="pph_position_idx"),
            models.Index(
                fields=["position", "is_current"], name="pph_position_current_idx"
            ),
            models.Index(fields=["term_start", "term_end"], name="pph_term_dates_idx"),
            models.Index(fields=["election"], name="pph_election_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=_SINGLE_JURISDICTION,
                name="check_history_jurisdiction_type",
            ),
            models.CheckConstraint(
                condition=Q(term_end__isnull=True)
                | Q(term_end__gte=models.F("term_start")),
                name="check_term_dates",
            ),
            models.CheckConstraint(
                condition=Q(is_current=True, ended_reason__isnull=True)
                | Q(
                    is_current=False,
                    term_end__isnull=False,
                    ended_reason__isnull=False,
                ),
                name="check_closed_tenure",
            ),
            # One partial unique constraint per level: NULL ids would otherwise
            # make two current rows for the same seat look distinct
            models.UniqueConstraint(
                fields=["position"],
                condition=Q(is_current=True, is_national=True),
                name="unique_current_position_national",
            ),
            models.UniqueConstraint(
                fields=["position", "region"],
                condition=Q(is_current=True, region__isnull=False),
                name="unique_current_position_region",
            ),
            models.UniqueConstraint(
                fields=["position", "province"],
                condition=Q(is_current=True, province__isnull=False),
                name="unique_current_position_province",
            ),
            models.UniqueConstraint(
                fields=["position", "city"],
                condition=Q(is_current=True, city__isnull=False),
                name="unique_current_position_city",
            ),
            models.UniqueConstraint(
                fields=["position", "barangay"],
                condition=Q(is_current=True, barangay__isnull=False),
                name="unique_current_position_barangay",
            ),
            models.UniqueConstraint(
                fields=["position", "district"],
                condition=Q(is_current=True, district__isnull=False),
                name="unique_current_position_district",
            ),
        ]

    def __str__(self) -> str:
        status = "current" if self.is_current else f"ended {self.term_end}"
        return f"{self.politician_id} @ {self.position_id} ({status})"

