# orderdesk/models/location.py
from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


def make_name_key(name: str) -> str:
    """
    Case-insensitive lookup key for reference names.

    Uses Unicode case folding so Cyrillic names compare equal
    regardless of case ("софия" == "София"), which SQLite's NOCASE
    collation does not do.
    """
    return name.strip().casefold()


class City(SQLModel, table=True):
    """
    Shared reference row for a city.

    `name` keeps the casing it was first created with; uniqueness is
    enforced on `name_key`.
    """

    __tablename__ = "cities"

    id: int | None = Field(default=None, primary_key=True)

    name: str = Field(
        max_length=255,
        description="Canonical display name (first-seen casing)",
    )

    name_key: str = Field(
        max_length=255,
        unique=True,
        index=True,
        description="Case-folded name used for lookups",
    )


class District(SQLModel, table=True):
    """
    District of a single city. The same name under two cities is two rows.
    """

    __tablename__ = "districts"
    __table_args__ = (
        UniqueConstraint("city_id", "name_key", name="uq_districts_city_name_key"),
    )

    id: int | None = Field(default=None, primary_key=True)

    city_id: int = Field(
        foreign_key="cities.id",
        index=True,
        description="FK to cities.id",
    )

    name: str = Field(max_length=255)

    name_key: str = Field(max_length=255)


class Village(SQLModel, table=True):
    """Village reference row; not scoped to any city."""

    __tablename__ = "villages"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(max_length=255)
    name_key: str = Field(max_length=255, unique=True, index=True)


class Year(SQLModel, table=True):
    """
    Years in which any order was placed or completed.
    Only used to populate filter option lists.
    """

    __tablename__ = "years"

    year: str = Field(
        primary_key=True,
        max_length=4,
        description="4-digit year, e.g. '2024'",
    )
