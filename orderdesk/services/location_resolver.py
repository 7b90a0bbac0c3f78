# orderdesk/services/location_resolver.py
import logging
from dataclasses import dataclass, asdict

from sqlmodel import Session

from orderdesk.core.errors import ConstraintViolation
from orderdesk.models.location import City, District, Village
from orderdesk.repositories.location_repo import LocationRepository
from orderdesk.schemas.location import FreeText, LocationRef, Reference
from orderdesk.schemas.order import OrderInput

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedLocation:
    """
    The location columns of an order, ready to be written.

    Field names match the Order model.
    """

    location_type: str | None = None
    location_name: str | None = None
    district: str | None = None
    city_id: int | None = None
    district_id: int | None = None

    def as_order_fields(self) -> dict:
        return asdict(self)


class LocationResolver:
    """
    Turns order location input into canonical reference rows.

    Rules:
      - Reference(id): use the row if it still exists, otherwise the
        location is unresolved (no error, fields stay null).
      - FreeText(name): case-insensitive get-or-create; an existing row
        keeps its original casing.
      - Districts are only resolved under a resolved city and must
        belong to it.

    All writes happen in the caller's session/transaction.
    """

    def __init__(self, repo: LocationRepository):
        self.repo = repo

    # ----- Per-entity resolution -----

    def resolve_city(self, session: Session, ref: LocationRef) -> City | None:
        if isinstance(ref, Reference):
            city = self.repo.get_city(session, ref.id)
            if city is None:
                logger.warning("City id=%s not found; order keeps no city", ref.id)
            return city

        if isinstance(ref, FreeText):
            city, created = self.repo.get_or_create_city(session, ref.name)
            self._check_upsert(city, "city", ref.name)
            if created:
                logger.info("Created city %r", city.name)
            return city

        return None

    def resolve_district(
        self,
        session: Session,
        city: City,
        ref: LocationRef,
    ) -> District | None:
        if isinstance(ref, Reference):
            district = self.repo.get_district(session, ref.id)
            if district is None:
                logger.warning("District id=%s not found; order keeps no district", ref.id)
                return None
            if district.city_id != city.id:
                logger.warning(
                    "District id=%s belongs to city id=%s, not %s; ignored",
                    ref.id,
                    district.city_id,
                    city.id,
                )
                return None
            return district

        if isinstance(ref, FreeText):
            district, created = self.repo.get_or_create_district(session, city.id, ref.name)
            self._check_upsert(district, "district", ref.name)
            if created:
                logger.info("Created district %r in city id=%s", district.name, city.id)
            return district

        return None

    def resolve_village(self, session: Session, ref: LocationRef) -> Village | None:
        if isinstance(ref, Reference):
            village = self.repo.get_village(session, ref.id)
            if village is None:
                logger.warning("Village id=%s not found", ref.id)
            return village

        if isinstance(ref, FreeText):
            village, created = self.repo.get_or_create_village(session, ref.name)
            self._check_upsert(village, "village", ref.name)
            if created:
                logger.info("Created village %r", village.name)
            return village

        return None

    # ----- Order-level resolution -----

    def resolve(self, session: Session, payload: OrderInput) -> ResolvedLocation:
        """
        Compute all location columns for an order from its input.

          - "city":    city name / district name from the resolved rows;
                       nothing resolvable -> all fields null except the type
          - "village": canonical name of the selected village; if that
                       row is gone, the typed name is resolved or created
                       instead; city fields null
          - None:      everything null
        """
        if payload.location_type == "city":
            city = self.resolve_city(session, payload.city_ref())
            if city is None:
                return ResolvedLocation(location_type="city")

            district = self.resolve_district(session, city, payload.district_ref())
            return ResolvedLocation(
                location_type="city",
                location_name=city.name,
                district=district.name if district else None,
                city_id=city.id,
                district_id=district.id if district else None,
            )

        if payload.location_type == "village":
            ref = payload.village_ref()
            village = self.resolve_village(session, ref)
            if village is None and isinstance(ref, Reference) and payload.location_name:
                # Selected village is gone; fall back to the typed name.
                village = self.resolve_village(session, FreeText(payload.location_name))
            return ResolvedLocation(
                location_type="village",
                location_name=village.name if village else payload.location_name,
            )

        return ResolvedLocation()

    @staticmethod
    def _check_upsert(row, kind: str, name: str) -> None:
        if row is None:
            raise ConstraintViolation(
                f"Could not create or find {kind} {name!r}; please retry"
            )
