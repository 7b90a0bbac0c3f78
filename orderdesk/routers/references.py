# orderdesk/routers/references.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from orderdesk.database import get_session
from orderdesk.repositories.location_repo import LocationRepository
from orderdesk.schemas.location import CityRead, DistrictRead, VillageRead
from orderdesk.services.reference_service import ReferenceService

router = APIRouter(tags=["Reference data"])

repo = LocationRepository()
service = ReferenceService(repo)


@router.get("/cities", response_model=list[CityRead])
def list_cities(session: Session = Depends(get_session)):
    """All cities, by name."""
    return service.list_cities(session)


@router.get("/cities/{city_id}/districts", response_model=list[DistrictRead])
def list_city_districts(
    city_id: int,
    session: Session = Depends(get_session),
):
    """Districts of one city, by name."""
    return service.list_districts(session, city_id=city_id)


@router.get("/districts", response_model=list[DistrictRead])
def list_districts(
    city_id: int | None = None,
    session: Session = Depends(get_session),
):
    """
    All districts, by name.

    Query params (optional):
      - city_id: only districts of that city
    """
    return service.list_districts(session, city_id=city_id)


@router.get("/villages", response_model=list[VillageRead])
def list_villages(session: Session = Depends(get_session)):
    """All villages, by name."""
    return service.list_villages(session)
