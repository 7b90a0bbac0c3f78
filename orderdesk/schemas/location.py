# orderdesk/schemas/location.py
from dataclasses import dataclass
from typing import Union

from sqlmodel import SQLModel


@dataclass(frozen=True)
class Reference:
    """Location input that points at an existing reference row."""

    id: int


@dataclass(frozen=True)
class FreeText:
    """Location input typed by hand; resolved by case-insensitive name."""

    name: str


# None = nothing usable was supplied.
LocationRef = Union[Reference, FreeText, None]


def make_ref(ref_id: int | None, name: str | None) -> LocationRef:
    """
    Collapse the (id, free text) pair sent by forms into one variant.
    A selected row wins over typed text.
    """
    if ref_id:
        return Reference(ref_id)
    if name and name.strip():
        return FreeText(name.strip())
    return None


class CityRead(SQLModel):
    id: int
    name: str


class DistrictRead(SQLModel):
    id: int
    city_id: int
    name: str


class VillageRead(SQLModel):
    id: int
    name: str
