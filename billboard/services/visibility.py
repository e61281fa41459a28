"""Which campaigns an advertiser gets to see.

Campaign rows are matched loosely: each concept (owner, location,
merchandise, demographics, pay) is looked up under several column names,
and a row matches when any of them does. Works on ORM objects and plain
mappings alike.
"""

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy import inspect
from sqlalchemy.exc import NoInspectionAvailable

OWNER_FIELDS = ("business_id", "advertiser_id", "user_id", "owner", "created_by")
LOCATION_FIELDS = ("location", "city", "place")
MERCHANDISE_FIELDS = ("merchandise_type", "merchandise_types", "items", "products")
DEMOGRAPHIC_FIELDS = ("influencer_demographics", "target_demographics", "demographics")
COMPENSATION_FIELDS = ("compensation_amount", "compensation", "amount", "pay_amount", "budget")

BROWSE_ROW_CAP = 100


@dataclass(frozen=True)
class VisibilityFilter:
    """Raw filter input as typed by the user; nothing here is pre-validated."""

    location: str = ""
    merchandise: str = ""
    gender: str = ""
    age_range: str = ""
    min_comp: str = ""
    max_comp: str = ""


def parse_bound(raw: str | None) -> float | None:
    """Parse a compensation bound. Blank or malformed input means unbounded."""
    if raw is None or not str(raw).strip():
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(value) else value


def as_record(campaign: Any) -> Mapping[str, Any]:
    """Column values of an ORM campaign, or the mapping itself."""
    if isinstance(campaign, Mapping):
        return campaign
    try:
        mapper = inspect(campaign).mapper
    except NoInspectionAvailable:
        return vars(campaign)
    return {attr.key: getattr(campaign, attr.key) for attr in mapper.column_attrs}


def matches_filter(value: Any, needle: str) -> bool:
    """Case-insensitive substring match; lists match on any element."""
    if not needle:
        return True
    if value is None:
        return False
    needle = needle.lower()
    if isinstance(value, (list, tuple, set)):
        return any(needle in str(v).lower() for v in value)
    return needle in str(value).lower()


def is_owned_by(record: Mapping[str, Any], requester_id: Any) -> bool:
    if requester_id is None:
        return False
    requester = str(requester_id)
    return any(
        record.get(k) is not None and str(record.get(k)) == requester
        for k in OWNER_FIELDS
    )


def _any_field_matches(record: Mapping[str, Any], fields: Sequence[str], needle: str) -> bool:
    return any(matches_filter(record.get(k), needle) for k in fields)


def _demographics_match(record: Mapping[str, Any], gender: str, age_range: str) -> bool:
    if not gender and not age_range:
        return True

    gender_ok = False
    age_ok = False
    for key in DEMOGRAPHIC_FIELDS:
        value = record.get(key)
        if not value:
            continue
        if isinstance(value, Mapping):
            if gender and value.get("gender") and matches_filter(value["gender"], gender):
                gender_ok = True
            if age_range and value.get("age_range") and matches_filter(value["age_range"], age_range):
                age_ok = True
        else:
            if gender and matches_filter(value, gender):
                gender_ok = True
            if age_range and matches_filter(value, age_range):
                age_ok = True

    # An unset criterion places no constraint; the older browse form left its
    # flag false and so hid every campaign when only one was supplied
    return (gender_ok or not gender) and (age_ok or not age_range)


def compensation_of(record: Mapping[str, Any]) -> float | None:
    """First non-null pay field as a number; None if absent or not numeric."""
    raw = next(
        (record.get(k) for k in COMPENSATION_FIELDS if record.get(k) is not None),
        None,
    )
    if raw is None:
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(value) else value


def _compensation_in_range(record: Mapping[str, Any], low: float | None, high: float | None) -> bool:
    if low is None and high is None:
        return True
    value = compensation_of(record)
    if value is None:
        return False
    if low is not None and value < low:
        return False
    if high is not None and value > high:
        return False
    return True


def is_visible(campaign: Any, requester_id: Any, filters: VisibilityFilter | None = None) -> bool:
    """True if ``campaign`` should be listed for ``requester_id`` under ``filters``."""
    record = as_record(campaign)
    if is_owned_by(record, requester_id):
        return False

    filters = filters or VisibilityFilter()
    return (
        _compensation_in_range(record, parse_bound(filters.min_comp), parse_bound(filters.max_comp))
        and _any_field_matches(record, LOCATION_FIELDS, filters.location)
        and _any_field_matches(record, MERCHANDISE_FIELDS, filters.merchandise)
        and _demographics_match(record, filters.gender, filters.age_range)
    )


def filter_visible(
    campaigns: Iterable[Any], requester_id: Any, filters: VisibilityFilter | None = None
) -> list[Any]:
    """Keep the campaigns visible to ``requester_id``; order is preserved."""
    return [c for c in campaigns if is_visible(c, requester_id, filters)]
