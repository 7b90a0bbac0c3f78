# orderdesk/models/order.py
from datetime import datetime, date, timezone

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field


def utcnow() -> datetime:
    """Timezone-aware UTC now. Timestamps are stored and returned as UTC."""
    return datetime.now(timezone.utc)


class Order(SQLModel, table=True):
    """
    Customer booking.

    Location columns:
      - location_type: "city" | "village" | None
      - location_name: city name or village name (denormalized)
      - district:      district name, city orders only (denormalized)
      - city_id / district_id: references, city orders only

    The denormalized names keep showing what was chosen even if a
    reference row is renamed later.
    """

    __tablename__ = "orders"

    id: int | None = Field(default=None, primary_key=True)

    name: str = Field(
        max_length=255,
        description="Customer / booking name (required)",
    )

    # city | village
    location_type: str | None = Field(default=None, max_length=16)
    location_name: str | None = Field(default=None, max_length=255)
    district: str | None = Field(default=None, max_length=255)

    city_id: int | None = Field(
        default=None,
        foreign_key="cities.id",
        index=True,
    )
    district_id: int | None = Field(
        default=None,
        foreign_key="districts.id",
        index=True,
    )

    final_price: float | None = Field(
        default=None,
        description="Final agreed price",
    )
    deposit: float | None = Field(
        default=None,
        description="Deposit already paid",
    )

    is_completed: bool = Field(default=False)

    ordered_at: date | None = Field(default=None)
    completed_at: date | None = Field(default=None)

    description: str | None = Field(default=None)

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime(timezone=True),
        index=True,
        description="Creation timestamp (UTC)",
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime(timezone=True),
        description="Last update timestamp (UTC)",
    )


class OrderChange(SQLModel, table=True):
    """
    One field-level change recorded by an order update.

    Append-only. Rows disappear only together with their order.
    """

    __tablename__ = "order_changes"

    id: int | None = Field(default=None, primary_key=True)

    order_id: int = Field(
        foreign_key="orders.id",
        ondelete="CASCADE",
        index=True,
    )

    field: str = Field(max_length=64)
    old_value: str | None = None
    new_value: str | None = None

    changed_at: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime(timezone=True),
    )
