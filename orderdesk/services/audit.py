# orderdesk/services/audit.py
"""
Field-level change audit for orders.

An update compares the stored order with the proposed next state,
field by field, and records one OrderChange per field whose value
differs. Values are compared in a normalized string form so that
e.g. 10 and 10.0, or "" and None, count as unchanged.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping

from orderdesk.models.order import Order, OrderChange

# Fixed enumeration order; history rows for one update follow it.
AUDITED_FIELDS: tuple[str, ...] = (
    "name",
    "location_type",
    "location_name",
    "district",
    "city_id",
    "district_id",
    "final_price",
    "deposit",
    "is_completed",
    "ordered_at",
    "completed_at",
    "description",
)


@dataclass(frozen=True)
class FieldChange:
    field: str
    old_value: str | None
    new_value: str | None


def normalize_value(value: Any) -> str | None:
    """
    Canonical string form used for comparison and storage.

      None, ""          -> None
      True / False      -> "true" / "false"
      10, 10.0          -> "10"
      10.5              -> "10.5"
      date / datetime   -> ISO-8601
    """
    if value is None or value == "":
        return None
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def snapshot(order: Order) -> dict[str, Any]:
    """Audited field values of a stored order."""
    return {field: getattr(order, field) for field in AUDITED_FIELDS}


def diff_snapshots(
    before: Mapping[str, Any],
    after: Mapping[str, Any],
) -> list[FieldChange]:
    """
    Compare two snapshots over AUDITED_FIELDS.

    Missing keys count as None. Output follows AUDITED_FIELDS order.
    """
    changes: list[FieldChange] = []
    for field in AUDITED_FIELDS:
        old_value = normalize_value(before.get(field))
        new_value = normalize_value(after.get(field))
        if old_value != new_value:
            changes.append(FieldChange(field, old_value, new_value))
    return changes


def build_change_rows(
    order_id: int,
    changes: list[FieldChange],
    changed_at: datetime,
) -> list[OrderChange]:
    return [
        OrderChange(
            order_id=order_id,
            field=change.field,
            old_value=change.old_value,
            new_value=change.new_value,
            changed_at=changed_at,
        )
        for change in changes
    ]
