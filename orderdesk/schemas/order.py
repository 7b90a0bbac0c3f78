# orderdesk/schemas/order.py
from datetime import date, datetime, timezone
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from orderdesk.schemas.location import LocationRef, make_ref

LocationType = Literal["city", "village"]
FilterType = Literal["all", "year", "yearMonth", "price", "location", "name"]
PriceComparison = Literal["gt", "lt"]


def _as_utc(v: datetime) -> datetime:
    # SQLite drops the offset; stored values are UTC.
    if v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v


def _blank_to_none(v: str | None) -> str | None:
    if not isinstance(v, str):
        return v
    v = v.strip()
    return v or None


class OrderInput(SQLModel):
    """
    Payload for creating or updating an order.

    Location input depends on `location_type`:
      - "city":    city_id (selected row) or city_name (typed),
                   plus optional district_id or district_name
      - "village": village_id (selected row) and/or location_name (typed)
      - None:      no location; any previous location is cleared

    `name` is only trimmed here. Blank names are rejected by the
    service so that direct callers get the same ValidationFailed.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=255)

    location_type: LocationType | None = None
    location_name: str | None = Field(default=None, max_length=255)
    village_id: int | None = None
    city_id: int | None = None
    city_name: str | None = Field(default=None, max_length=255)
    district_id: int | None = None
    district_name: str | None = Field(default=None, max_length=255)

    final_price: float | None = Field(default=None, ge=0)
    deposit: float | None = Field(default=None, ge=0)
    is_completed: bool = False

    ordered_at: date | None = None
    completed_at: date | None = None

    description: str | None = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()

    @field_validator(
        "location_name",
        "city_name",
        "district_name",
        "description",
        mode="before",
    )
    @classmethod
    def normalize_text(cls, v: str | None) -> str | None:
        return _blank_to_none(v)

    def city_ref(self) -> LocationRef:
        return make_ref(self.city_id, self.city_name)

    def district_ref(self) -> LocationRef:
        return make_ref(self.district_id, self.district_name)

    def village_ref(self) -> LocationRef:
        return make_ref(self.village_id, self.location_name)


class OrderCreated(SQLModel):
    id: int


class OrderRead(SQLModel):
    """
    Order as returned to clients, with the current canonical city and
    district names next to the denormalized copies.
    """

    id: int
    name: str
    location_type: LocationType | None
    location_name: str | None
    district: str | None
    city_id: int | None
    district_id: int | None
    city_name: str | None = None
    district_name: str | None = None
    final_price: float | None
    deposit: float | None
    is_completed: bool
    ordered_at: date | None
    completed_at: date | None
    description: str | None
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def timestamps_in_utc(cls, v: datetime) -> datetime:
        return _as_utc(v)


class OrderChangeRead(SQLModel):
    """One audited field change."""

    id: int
    order_id: int
    field: str
    old_value: str | None
    new_value: str | None
    changed_at: datetime

    @field_validator("changed_at")
    @classmethod
    def changed_at_in_utc(cls, v: datetime) -> datetime:
        return _as_utc(v)


class OrderFilters(SQLModel):
    """
    Query parameters for listing orders.

    `filter_type` picks exactly one mode; parameters that belong to
    other modes are ignored. A mode whose parameters are missing
    behaves like "all" for that clause.
    """

    model_config = ConfigDict(extra="ignore")

    filter_type: FilterType = "all"

    year: int | None = Field(default=None, ge=1, le=9999)
    month: int | None = Field(default=None, ge=1, le=12)

    price_comparison: PriceComparison | None = None
    price_value: float | None = None

    location_type: LocationType | None = None
    location_name: str | None = None
    district: str | None = None

    name: str | None = None

    @field_validator(
        "year",
        "month",
        "price_comparison",
        "price_value",
        "location_type",
        "location_name",
        "district",
        "name",
        mode="before",
    )
    @classmethod
    def empty_param_to_none(cls, v):
        # Query strings send "" for cleared inputs.
        return _blank_to_none(v)


class CompletionOption(SQLModel):
    """A year with the months ("01".."12") that have orders, newest first."""

    year: str
    months: list[str]
