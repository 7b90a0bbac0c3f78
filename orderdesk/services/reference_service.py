# orderdesk/services/reference_service.py
import logging

from sqlmodel import Session

from orderdesk.models.location import City, District, Village
from orderdesk.repositories.location_repo import LocationRepository

logger = logging.getLogger(__name__)


class ReferenceService:
    """
    Read access to reference data for form option lists, plus the
    startup seed of the default city.
    """

    def __init__(self, repo: LocationRepository):
        self.repo = repo

    def list_cities(self, session: Session) -> list[City]:
        return self.repo.list_cities(session)

    def list_districts(
        self,
        session: Session,
        city_id: int | None = None,
    ) -> list[District]:
        return self.repo.list_districts(session, city_id=city_id)

    def list_villages(self, session: Session) -> list[Village]:
        return self.repo.list_villages(session)

    def seed_default_city(self, session: Session, name: str | None) -> City | None:
        """
        Make sure the cities table is never empty.

        Inserts `name` only when no city exists yet; a blank or None
        name disables seeding.
        """
        if not name or not name.strip():
            return None
        if self.repo.count_cities(session) > 0:
            return None

        city, created = self.repo.get_or_create_city(session, name)
        session.commit()
        if created:
            logger.info("Seeded default city %r", name.strip())
        return city
