"""
Jurisdiction keys for seats.

A seat is a (government position, jurisdiction) pair. Requests arrive with a
national flag and up to five optional location ids; ``resolve_jurisdiction``
collapses them once, at the boundary, into a single ``Jurisdiction`` value.
Everything downstream (ORM filters, record creation, cache keys) works from
that value and never re-derives the priority order.

Priority order: national, region, province, city, barangay, district. The
first non-empty field wins and all later fields are ignored.
"""

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any

from seatpulse.exceptions import ValidationError


class JurisdictionLevel(Enum):
    """Jurisdiction levels in priority order."""

    NATIONAL = "national"
    REGION = "region"
    PROVINCE = "province"
    CITY = "city"
    BARANGAY = "barangay"
    DISTRICT = "district"

    @property
    def field_name(self) -> str | None:
        """PositionHistory foreign key column for this level, None for national."""
        if self is JurisdictionLevel.NATIONAL:
            return None
        return f"{self.value}_id"


# Location levels, checked after the national flag
LOCATION_LEVELS: tuple[JurisdictionLevel, ...] = (
    JurisdictionLevel.REGION,
    JurisdictionLevel.PROVINCE,
    JurisdictionLevel.CITY,
    JurisdictionLevel.BARANGAY,
    JurisdictionLevel.DISTRICT,
)

LOCATION_FIELDS: tuple[str, ...] = tuple(
    level.field_name for level in LOCATION_LEVELS  # type: ignore[misc]
)


@dataclass(frozen=True)
class Jurisdiction:
    """
    Canonical jurisdiction of a seat.

    Either national (``id`` is None) or exactly one location level with its id.

    Example:
        >>> Jurisdiction.national().cache_key()
        'national'
        >>> Jurisdiction(JurisdictionLevel.CITY, city_id).filter_kwargs()
        {'is_national': False, 'city_id': UUID('...')}
    """

    level: JurisdictionLevel
    id: uuid.UUID | None = None

    def __post_init__(self) -> None:
        if self.level is JurisdictionLevel.NATIONAL:
            if self.id is not None:
                raise ValidationError(
                    "A national jurisdiction carries no location id."
                )
        elif self.id is None:
            raise ValidationError(
                f"A {self.level.value} jurisdiction requires a location id."
            )

    @classmethod
    def national(cls) -> "Jurisdiction":
        return cls(JurisdictionLevel.NATIONAL)

    @classmethod
    def from_record(cls, record: Any) -> "Jurisdiction":
        """Rebuild the jurisdiction of a stored PositionHistory record."""
        return resolve_jurisdiction(
            is_national=record.is_national,
            **{name: getattr(record, name) for name in LOCATION_FIELDS},
        )

    @property
    def is_national(self) -> bool:
        return self.level is JurisdictionLevel.NATIONAL

    def filter_kwargs(self) -> dict[str, Any]:
        """ORM lookups selecting records in this jurisdiction."""
        if self.is_national:
            return {"is_national": True}
        return {"is_national": False, self.level.field_name: self.id}

    def field_values(self) -> dict[str, Any]:
        """Column values for a new record: the matching id set, all others null."""
        values: dict[str, Any] = {"is_national": self.is_national}
        for level in LOCATION_LEVELS:
            values[level.field_name] = self.id if level is self.level else None
        return values

    def cache_key(self) -> str:
        if self.is_national:
            return "national"
        return f"{self.level.value}:{self.id}"

    def __str__(self) -> str:
        return self.cache_key()


def coerce_id(value: Any, field_name: str) -> uuid.UUID | None:
    if value is None or value == "":
        return None
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError as e:
        raise ValidationError({field_name: f"'{value}' is not a valid UUID."}) from e


def resolve_jurisdiction(
    is_national: bool = False,
    region_id: Any = None,
    province_id: Any = None,
    city_id: Any = None,
    barangay_id: Any = None,
    district_id: Any = None,
) -> Jurisdiction:
    """
    Collapse request fields into a single Jurisdiction.

    Args:
        is_national: National flag, checked first
        region_id: Region UUID (or its string form)
        province_id: Province UUID
        city_id: City/municipality UUID
        barangay_id: Barangay UUID
        district_id: Congressional district UUID

    Returns:
        The jurisdiction of the first non-empty field in priority order.

    Raises:
        ValidationError: If no field is set or an id is not a UUID.
    """
    if is_national:
        return Jurisdiction.national()

    candidates = (region_id, province_id, city_id, barangay_id, district_id)
    for level, raw_value in zip(LOCATION_LEVELS, candidates):
        location_id = coerce_id(raw_value, level.field_name)
        if location_id is not None:
            return Jurisdiction(level, location_id)

    raise ValidationError(
        "A jurisdiction is required: set is_national or one of "
        f"{', '.join(LOCATION_FIELDS)}."
    )
