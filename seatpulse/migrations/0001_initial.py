import uuid

import django.contrib.auth.models
import django.contrib.auth.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="User",
            fields=[
                ("password", models.CharField(max_length=128, verbose_name="password")),
                (
                    "last_login",
                    models.DateTimeField(
                        blank=True, null=True, verbose_name="last login"
                    ),
                ),
                (
                    "is_superuser",
                    models.BooleanField(
                        default=False,
                        help_text=(
                            "Designates that this user has all permissions without "
                            "explicitly assigning them."
                        ),
                        verbose_name="superuser status",
                    ),
                ),
                (
                    "username",
                    models.CharField(
                        error_messages={
                            "unique": "A user with that username already exists."
                        },
                        help_text=(
                            "Required. 150 characters or fewer. Letters, digits and "
                            "@/./+/-/_ only."
                        ),
                        max_length=150,
                        unique=True,
                        validators=[
                            django.contrib.auth.validators.UnicodeUsernameValidator()
                        ],
                        verbose_name="username",
                    ),
                ),
                (
                    "first_name",
                    models.CharField(
                        blank=True, max_length=150, verbose_name="first name"
                    ),
                ),
                (
                    "last_name",
                    models.CharField(
                        blank=True, max_length=150, verbose_name="last name"
                    ),
                ),
                (
                    "email",
                    models.EmailField(
                        blank=True, max_length=254, verbose_name="email address"
                    ),
                ),
                (
                    "is_staff",
                    models.BooleanField(
                        default=False,
                        help_text=(
                            "Designates whether the user can log into this admin "
                            "site."
                        ),
                        verbose_name="staff status",
                    ),
                ),
                (
                    "is_active",
                    models.BooleanField(
                        default=True,
                        help_text=(
                            "Designates whether this user should be treated as "
                            "active. Unselect this instead of deleting accounts."
                        ),
                        verbose_name="active",
                    ),
                ),
                (
                    "date_joined",
                    models.DateTimeField(
                        default=django.utils.timezone.now, verbose_name="date joined"
                    ),
                ),
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "role",
                    models.CharField(
                        choices=[
                            ("admin", "Administrator"),
                            ("editor", "Editor"),
                            ("importer", "Import Pipeline"),
                            ("viewer", "Viewer"),
                        ],
                        default="viewer",
                        max_length=20,
                    ),
                ),
                ("organization", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "groups",
                    models.ManyToManyField(
                        blank=True,
                        help_text=(
                            "The groups this user belongs to. A user will get all "
                            "permissions granted to each of their groups."
                        ),
                        related_name="user_set",
                        related_query_name="user",
                        to="auth.group",
                        verbose_name="groups",
                    ),
                ),
                (
                    "user_permissions",
                    models.ManyToManyField(
                        blank=True,
                        help_text="Specific permissions for this user.",
                        related_name="user_set",
                        related_query_name="user",
                        to="auth.permission",
                        verbose_name="user permissions",
                    ),
                ),
            ],
            options={
                "db_table": "users",
                "indexes": [
                    models.Index(fields=["email"], name="users_email_idx"),
                    models.Index(fields=["role"], name="users_role_idx"),
                ],
            },
            managers=[
                ("objects", django.contrib.auth.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name="Region",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("code", models.CharField(max_length=20, unique=True)),
                ("name", models.CharField(max_length=200)),
                ("slug", models.SlugField(max_length=200, unique=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "regions",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Province",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("code", models.CharField(max_length=20, unique=True)),
                ("name", models.CharField(max_length=200)),
                ("slug", models.SlugField(max_length=200, unique=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "region",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="provinces",
                        to="seatpulse.region",
                    ),
                ),
            ],
            options={
                "db_table": "provinces",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="CityMunicipality",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("code", models.CharField(max_length=20, unique=True)),
                ("name", models.CharField(max_length=200)),
                ("slug", models.SlugField(max_length=200, unique=True)),
                ("is_city", models.BooleanField(default=False)),
                ("is_capital", models.BooleanField(default=False)),
                ("population", models.IntegerField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "province",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="cities_municipalities",
                        to="seatpulse.province",
                    ),
                ),
            ],
            options={
                "db_table": "cities_municipalities",
                "ordering": ["name"],
                "verbose_name_plural": "Cities and municipalities",
            },
        ),
        migrations.CreateModel(
            name="Barangay",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("code", models.CharField(max_length=20, unique=True)),
                ("name", models.CharField(max_length=200)),
                ("slug", models.SlugField(max_length=200, unique=True)),
                ("population", models.IntegerField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "city_municipality",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="barangays",
                        to="seatpulse.citymunicipality",
                    ),
                ),
            ],
            options={
                "db_table": "barangays",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="CongressionalDistrict",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("district_number", models.PositiveIntegerField()),
                ("name", models.CharField(max_length=200)),
                ("slug", models.SlugField(max_length=200, unique=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "city_municipality",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="congressional_districts",
                        to="seatpulse.citymunicipality",
                    ),
                ),
                (
                    "province",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="congressional_districts",
                        to="seatpulse.province",
                    ),
                ),
            ],
            options={
                "db_table": "congressional_districts",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="PoliticalParty",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("name", models.CharField(max_length=200)),
                ("slug", models.SlugField(max_length=200, unique=True)),
                ("abbreviation", models.CharField(blank=True, max_length=20)),
                ("color", models.CharField(blank=True, max_length=7)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "political_parties",
                "ordering": ["name"],
                "verbose_name_plural": "Political parties",
            },
        ),
        migrations.CreateModel(
            name="GovernmentPosition",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("name", models.CharField(max_length=200)),
                ("slug", models.SlugField(max_length=200, unique=True)),
                (
                    "level",
                    models.CharField(
                        choices=[
                            ("national", "National"),
                            ("regional", "Regional"),
                            ("provincial", "Provincial"),
                            ("city", "City"),
                            ("municipal", "Municipal"),
                            ("barangay", "Barangay"),
                            ("district", "Congressional District"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "branch",
                    models.CharField(
                        choices=[
                            ("executive", "Executive"),
                            ("legislative", "Legislative"),
                            ("judicial", "Judicial"),
                        ],
                        max_length=20,
                    ),
                ),
                ("display_order", models.IntegerField(default=0)),
                ("description", models.TextField(blank=True)),
                ("max_terms", models.PositiveIntegerField(blank=True, null=True)),
                ("term_years", models.PositiveIntegerField(default=3)),
                ("is_elected", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "government_positions",
                "ordering": ["display_order", "name"],
                "indexes": [
                    models.Index(fields=["level"], name="gov_position_level_idx"),
                    models.Index(
                        fields=["level", "is_elected"],
                        name="gov_position_level_elect_idx",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Politician",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("name", models.CharField(max_length=200)),
                ("slug", models.SlugField(max_length=200, unique=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "current_party",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="current_members",
                        to="seatpulse.politicalparty",
                    ),
                ),
                (
                    "current_position",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="current_politicians",
                        to="seatpulse.governmentposition",
                    ),
                ),
            ],
            options={
                "db_table": "politicians",
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["name"], name="politicians_name_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ElectionEvent",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("name", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True)),
                ("election_date", models.DateField()),
                (
                    "level",
                    models.CharField(
                        choices=[
                            ("national", "National"),
                            ("local", "Local"),
                            ("barangay", "Barangay"),
                            ("regional", "Regional"),
                            ("provincial", "Provincial"),
                            ("city", "City"),
                            ("municipal", "Municipal"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("scheduled", "Scheduled"),
                            ("in_progress", "In Progress"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                            ("failed", "Failed"),
                        ],
                        default="scheduled",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="elections_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "election_events",
                "ordering": ["-election_date"],
                "indexes": [
                    models.Index(fields=["election_date"], name="election_date_idx"),
                    models.Index(fields=["status"], name="election_status_idx"),
                    models.Index(fields=["level"], name="election_level_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PositionHistory",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("is_national", models.BooleanField(default=False)),
                ("term_start", models.DateField()),
                ("term_end", models.DateField(blank=True, null=True)),
                ("is_current", models.BooleanField(default=True)),
                (
                    "ended_reason",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("term_change", "New term for the same politician"),
                            ("replaced", "Replaced by another politician"),
                            ("election", "Archived ahead of an election"),
                            ("term_expired", "Term expired"),
                            ("resigned", "Resigned"),
                            ("deceased", "Deceased"),
                            ("other", "Other"),
                        ],
                        max_length=20,
                        null=True,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "barangay",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="tenures",
                        to="seatpulse.barangay",
                    ),
                ),
                (
                    "city",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="tenures",
                        to="seatpulse.citymunicipality",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="position_history_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "district",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="tenures",
                        to="seatpulse.congressionaldistrict",
                    ),
                ),
                (
                    "election",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="tenures",
                        to="seatpulse.electionevent",
                    ),
                ),
                (
                    "party",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="tenures",
                        to="seatpulse.politicalparty",
                    ),
                ),
                (
                    "politician",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="position_history",
                        to="seatpulse.politician",
                    ),
                ),
                (
                    "position",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="holders",
                        to="seatpulse.governmentposition",
                    ),
                ),
                (
                    "province",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="tenures",
                        to="seatpulse.province",
                    ),
                ),
                (
                    "region",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="tenures",
                        to="seatpulse.region",
                    ),
                ),
            ],
            options={
                "db_table": "politician_position_history",
                "ordering": ["-is_current", "-term_start"],
                "verbose_name_plural": "Position history",
                "indexes": [
                    models.Index(fields=["politician"], name="pph_politician_idx"),
                    models.Index(fields=["position"], name="pph_position_idx"),
                    models.Index(
                        fields=["position", "is_current"],
                        name="pph_position_current_idx",
                    ),
                    models.Index(
                        fields=["term_start", "term_end"], name="pph_term_dates_idx"
                    ),
                    models.Index(fields=["election"], name="pph_election_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(
                                ("barangay__isnull", True),
                                ("city__isnull", True),
                                ("district__isnull", True),
                                ("is_national", True),
                                ("province__isnull", True),
                                ("region__isnull", True),
                            ),
                            models.Q(
                                ("barangay__isnull", True),
                                ("city__isnull", True),
                                ("district__isnull", True),
                                ("is_national", False),
                                ("province__isnull", True),
                                ("region__isnull", False),
                            ),
                            models.Q(
                                ("barangay__isnull", True),
                                ("city__isnull", True),
                                ("district__isnull", True),
                                ("is_national", False),
                                ("province__isnull", False),
                                ("region__isnull", True),
                            ),
                            models.Q(
                                ("barangay__isnull", True),
                                ("city__isnull", False),
                                ("district__isnull", True),
                                ("is_national", False),
                                ("province__isnull", True),
                                ("region__isnull", True),
                            ),
                            models.Q(
                                ("barangay__isnull", False),
                                ("city__isnull", True),
                                ("district__isnull", True),
                                ("is_national", False),
                                ("province__isnull", True),
                                ("region__isnull", True),
                            ),
                            models.Q(
                                ("barangay__isnull", True),
                                ("city__isnull", True),
                                ("district__isnull", False),
                                ("is_national", False),
                                ("province__isnull", True),
                                ("region__isnull", True),
                            ),
                            _connector="OR",
                        ),
                        name="check_history_jurisdiction_type",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("term_end__isnull", True),
                            ("term_end__gte", models.F("term_start")),
                            _connector="OR",
                        ),
                        name="check_term_dates",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(
                                ("ended_reason__isnull", True), ("is_current", True)
                            ),
                            models.Q(
                                ("ended_reason__isnull", False),
                                ("is_current", False),
                                ("term_end__isnull", False),
                            ),
                            _connector="OR",
                        ),
                        name="check_closed_tenure",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("is_current", True), ("is_national", True)),
                        fields=("position",),
                        name="unique_current_position_national",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(
                            ("is_current", True), ("region__isnull", False)
                        ),
                        fields=("position", "region"),
                        name="unique_current_position_region",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(
                            ("is_current", True), ("province__isnull", False)
                        ),
                        fields=("position", "province"),
                        name="unique_current_position_province",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(
                            ("city__isnull", False), ("is_current", True)
                        ),
                        fields=("position", "city"),
                        name="unique_current_position_city",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(
                            ("barangay__isnull", False), ("is_current", True)
                        ),
                        fields=("position", "barangay"),
                        name="unique_current_position_barangay",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(
                            ("district__isnull", False), ("is_current", True)
                        ),
                        fields=("position", "district"),
                        name="unique_current_position_district",
                    ),
                ],
            },
        ),
    ]
