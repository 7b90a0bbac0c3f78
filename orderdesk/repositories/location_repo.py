# orderdesk/repositories/location_repo.py
from typing import Callable, TypeVar

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, SQLModel, select

from orderdesk.models.location import City, District, Village, Year, make_name_key

RowT = TypeVar("RowT", bound=SQLModel)


class LocationRepository:
    """
    Data access layer for reference data: cities, districts, villages
    and the years index.

    NOTE:
      - No commits here. Inserts happen inside the caller's transaction,
        each wrapped in a SAVEPOINT so a uniqueness race only rolls back
        that one insert.
      - Name lookups go through `name_key` (case-folded name).
    """

    # ---- insert-if-absent ----

    def _get_or_insert(
        self,
        session: Session,
        lookup: Callable[[], RowT | None],
        build: Callable[[], RowT],
    ) -> tuple[RowT | None, bool]:
        """
        Select; if absent, insert in a savepoint; on a uniqueness
        violation select again.

        Returns:
            (row, created). row is None only if the re-select after a
            failed insert still finds nothing.
        """
        row = lookup()
        if row is not None:
            return row, False

        try:
            with session.begin_nested():
                row = build()
                session.add(row)
        except IntegrityError:
            # Another transaction inserted the same key first.
            return lookup(), False

        return row, True

    # ---- Cities ----

    def get_city(self, session: Session, city_id: int) -> City | None:
        return session.get(City, city_id)

    def get_city_by_name(self, session: Session, name: str) -> City | None:
        stmt = select(City).where(City.name_key == make_name_key(name))
        return session.exec(stmt).first()

    def get_or_create_city(
        self,
        session: Session,
        name: str,
    ) -> tuple[City | None, bool]:
        name = name.strip()
        return self._get_or_insert(
            session,
            lambda: self.get_city_by_name(session, name),
            lambda: City(name=name, name_key=make_name_key(name)),
        )

    def list_cities(self, session: Session) -> list[City]:
        stmt = select(City).order_by(City.name, City.id)
        return list(session.exec(stmt).all())

    def count_cities(self, session: Session) -> int:
        stmt = select(func.count()).select_from(City)
        value = session.exec(stmt).one()
        return int(value or 0)

    # ---- Districts ----

    def get_district(self, session: Session, district_id: int) -> District | None:
        return session.get(District, district_id)

    def get_district_by_name(
        self,
        session: Session,
        city_id: int,
        name: str,
    ) -> District | None:
        stmt = select(District).where(
            District.city_id == city_id,
            District.name_key == make_name_key(name),
        )
        return session.exec(stmt).first()

    def get_or_create_district(
        self,
        session: Session,
        city_id: int,
        name: str,
    ) -> tuple[District | None, bool]:
        name = name.strip()
        return self._get_or_insert(
            session,
            lambda: self.get_district_by_name(session, city_id, name),
            lambda: District(city_id=city_id, name=name, name_key=make_name_key(name)),
        )

    def list_districts(
        self,
        session: Session,
        city_id: int | None = None,
    ) -> list[District]:
        stmt = select(District)
        if city_id is not None:
            stmt = stmt.where(District.city_id == city_id)
        stmt = stmt.order_by(District.name, District.id)
        return list(session.exec(stmt).all())

    # ---- Villages ----

    def get_village(self, session: Session, village_id: int) -> Village | None:
        return session.get(Village, village_id)

    def get_village_by_name(self, session: Session, name: str) -> Village | None:
        stmt = select(Village).where(Village.name_key == make_name_key(name))
        return session.exec(stmt).first()

    def get_or_create_village(
        self,
        session: Session,
        name: str,
    ) -> tuple[Village | None, bool]:
        name = name.strip()
        return self._get_or_insert(
            session,
            lambda: self.get_village_by_name(session, name),
            lambda: Village(name=name, name_key=make_name_key(name)),
        )

    def list_villages(self, session: Session) -> list[Village]:
        stmt = select(Village).order_by(Village.name, Village.id)
        return list(session.exec(stmt).all())

    # ---- Years ----

    def ensure_year(self, session: Session, year: str) -> None:
        """Register `year` in the years index (idempotent)."""
        self._get_or_insert(
            session,
            lambda: session.get(Year, year),
            lambda: Year(year=year),
        )

    def list_years(self, session: Session) -> list[str]:
        stmt = select(Year.year).order_by(Year.year.desc())
        return list(session.exec(stmt).all())
