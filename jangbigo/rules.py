"""
Cross-field business rules for job posts.

Structural checks (types, ranges, enum membership) live on the pydantic
schemas. What a post *needs* depends on its type, category and ladder type,
and is described here by ``REQUIREMENTS``: each row says "when the post
matches this key, these fields must be present". Every applicable row is
evaluated; nothing short-circuits, so one request reports every missing
field at once.

Candidates are plain dicts keyed by model attribute names (snake_case).
"""
from __future__ import annotations

import itertools
import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from .errors import FieldError
from .models import JobPostCategory, JobPostType, LadderType

# Equipment type -> allowed boom lengths (m)
EQUIPMENT_LENGTHS: dict[str, tuple[int, ...]] = {
    "1 ton": (16, 18, 20, 21),
    "2.5 ton": (22, 24, 25),
    "3.5 ton": (28, 30, 32, 35),
    "5 ton": (38, 40, 45, 50, 54),
    "18 ton": (58, 60, 65, 70),
    "19 ton": (75,),
    "3.5 tons of bending": (28,),
    "Refraction 5 tons": (40,),
    "Refraction 60M": (60,),
    "Refraction 70M": (70,),
}
EQUIPMENT_TYPES: tuple[str, ...] = tuple(EQUIPMENT_LENGTHS)

LUGGAGE_VOLUMES: tuple[str, ...] = (
    "1톤짐", "2.5톤짐", "5톤짐", "6톤짐", "7.5톤짐",
    "10톤짐", "12.5톤짐", "15톤짐", "17.5톤짐", "20톤짐",
    "1 ton", "2.5 ton", "5 ton", "6 ton", "7.5 ton",
    "10 ton", "12.5 ton", "15 ton", "17.5 ton", "20 ton",
)

_TIME_RE = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")

FIELD_LABELS: dict[str, str] = {
    "community_id": "Community ID",
    "designated_user_id": "Designated user ID",
    "with_fee": "withFee",
    "equipment_type": "Equipment type",
    "equipment_lengths": "Equipment lengths",
    "ladder_type": "Ladder type",
    "luggage_volume": "Luggage volume",
    "work_floor": "Work floor",
    "overall_height": "Overall height",
    "ladder_work_duration": "Ladder work duration",
    "ladder_work_hours": "Ladder work hours",
    "work_schedule": "Work schedule",
    "work_contents": "Work contents",
    "work_cost": "Work cost",
    "payment_method": "Payment method",
    "expected_payment_date": "Expected payment date",
    "site_address": "Site address",
    "contact_number": "Contact number",
    "delivery_info": "Delivery info",
}


def is_valid_time(value: str) -> bool:
    return bool(_TIME_RE.match(value))


@dataclass(frozen=True)
class Requirement:
    """Fields required whenever a post matches every non-None constraint.

    A constraint is a set of allowed values; ``None`` inside a set matches a
    candidate whose value is missing or unrecognised.
    """

    fields: tuple[str, ...]
    reason: str
    post_types: frozenset | None = None
    categories: frozenset | None = None
    ladder_types: frozenset | None = None

    def applies(self, key: tuple) -> bool:
        post_type, category, ladder_type = key
        return (
            (self.post_types is None or post_type in self.post_types)
            and (self.categories is None or category in self.categories)
            and (self.ladder_types is None or ladder_type in self.ladder_types)
        )


def _set(*values) -> frozenset:
    return frozenset(values)


PT, CAT, LT = JobPostType, JobPostCategory, LadderType

REQUIREMENTS: tuple[Requirement, ...] = (
    Requirement(("community_id", "with_fee"), "community job posts", post_types=_set(PT.COMMUNITY)),
    Requirement(("designated_user_id",), "designated job posts", post_types=_set(PT.DESIGNATED)),
    Requirement(("equipment_type", "equipment_lengths"), "SKY category", categories=_set(CAT.SKY)),
    Requirement(
        ("ladder_type", "luggage_volume", "work_floor", "overall_height"),
        "LADDER category",
        categories=_set(CAT.LADDER),
    ),
    Requirement(
        ("ladder_work_duration", "ladder_work_hours", "work_schedule"),
        "ON_SITE ladder work",
        categories=_set(CAT.LADDER),
        ladder_types=_set(LT.ON_SITE),
    ),
    # work contents: everywhere except GLOBAL/DESIGNATED ladder moving jobs
    Requirement(("work_contents",), "SKY category", categories=_set(CAT.SKY)),
    Requirement(("work_contents",), "community job posts", post_types=_set(PT.COMMUNITY)),
    Requirement(
        ("work_contents",),
        "this ladder type",
        categories=_set(CAT.LADDER),
        ladder_types=_set(LT.ON_SITE, None),
    ),
    Requirement(
        (
            "work_cost",
            "payment_method",
            "expected_payment_date",
            "with_fee",
            "site_address",
            "contact_number",
            "delivery_info",
        ),
        "every job post",
    ),
)


def _coerce(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None


def rule_key(candidate: Mapping[str, Any]) -> tuple:
    post_type = _coerce(JobPostType, candidate.get("post_type"))
    category = _coerce(JobPostCategory, candidate.get("category"))
    ladder_type = None
    if category is JobPostCategory.LADDER:
        ladder_type = _coerce(LadderType, candidate.get("ladder_type"))
    return post_type, category, ladder_type


def required_fields(key: tuple) -> dict[str, str]:
    """Field -> reason for every requirement row matching ``key``."""
    required: dict[str, str] = {}
    for req in REQUIREMENTS:
        if req.applies(key):
            for name in req.fields:
                required.setdefault(name, req.reason)
    return required


def requirement_matrix() -> dict[tuple, frozenset[str]]:
    """Required field set for every concrete (type, category, ladder type)."""
    matrix = {}
    for post_type, category in itertools.product(JobPostType, JobPostCategory):
        ladder_types: Iterable = LadderType if category is JobPostCategory.LADDER else (None,)
        for ladder_type in ladder_types:
            key = (post_type, category, ladder_type)
            matrix[key] = frozenset(required_fields(key))
    return matrix


def is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def _required_message(name: str, reason: str) -> str:
    label = FIELD_LABELS.get(name, name)
    if reason == "every job post":
        return f"{label} is required"
    return f"{label} is required for {reason}"


# Scope-bound references: a post may only name the target of its own type.
SCOPED_FIELDS: tuple[tuple[str, JobPostType], ...] = (
    ("community_id", JobPostType.COMMUNITY),
    ("designated_user_id", JobPostType.DESIGNATED),
)


def check_scope(candidate: Mapping[str, Any], post_type: JobPostType | None) -> list[FieldError]:
    if post_type is None:
        return []
    return [
        FieldError(name, f"{FIELD_LABELS[name]} is only allowed for {owner.value} job posts")
        for name, owner in SCOPED_FIELDS
        if owner is not post_type and not is_missing(candidate.get(name))
    ]


def check_equipment(candidate: Mapping[str, Any]) -> list[FieldError]:
    """Equipment type must be known and every length must be in its whitelist."""
    equipment_type = candidate.get("equipment_type")
    if is_missing(equipment_type):
        return []
    valid = EQUIPMENT_LENGTHS.get(equipment_type)
    if valid is None:
        return [FieldError(
            "equipment_type",
            f"Invalid equipment type {equipment_type}. Valid types: {', '.join(EQUIPMENT_TYPES)}",
        )]
    lengths = candidate.get("equipment_lengths") or []
    bad = [length for length in lengths if length not in valid]
    if not bad:
        return []
    shown = ", ".join(str(length) for length in bad)
    noun = "length" if len(bad) == 1 else "lengths"
    return [FieldError(
        "equipment_lengths",
        f"Invalid equipment {noun} {shown} for equipment type {equipment_type}. "
        f"Valid lengths: {', '.join(str(v) for v in valid)}",
    )]


def evaluate(candidate: Mapping[str, Any], check_values: bool = True) -> list[FieldError]:
    """Return every rule violation for ``candidate`` in table order.

    With ``check_values=False`` only presence rules run; used when the
    structural validator already rejected some values and their coerced
    form is unknown.
    """
    key = rule_key(candidate)
    errors = [
        FieldError(name, _required_message(name, reason))
        for name, reason in required_fields(key).items()
        if is_missing(candidate.get(name))
    ]
    errors.extend(check_scope(candidate, key[0]))
    if check_values and key[1] is JobPostCategory.SKY:
        errors.extend(check_equipment(candidate))
    return errors
