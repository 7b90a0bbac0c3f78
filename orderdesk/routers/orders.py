# orderdesk/routers/orders.py
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from sqlmodel import Session

from orderdesk.core.errors import NotFound
from orderdesk.database import get_session
from orderdesk.repositories.location_repo import LocationRepository
from orderdesk.repositories.order_repo import OrderRepository
from orderdesk.schemas.order import (
    CompletionOption,
    OrderChangeRead,
    OrderCreated,
    OrderFilters,
    OrderInput,
    OrderRead,
)
from orderdesk.services.location_resolver import LocationResolver
from orderdesk.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])

order_repo = OrderRepository()
location_repo = LocationRepository()
service = OrderService(order_repo, location_repo, LocationResolver(location_repo))


@router.get("", response_model=list[OrderRead])
def list_orders(
    filters: Annotated[OrderFilters, Query()],
    session: Session = Depends(get_session),
):
    """
    List orders, newest first.

    `filter_type` selects one mode:
      - all
      - year:      `year`
      - yearMonth: `year`, `month`
      - price:     `price_comparison` (gt | lt), `price_value`
      - location:  `location_type`, `location_name`, `district`
      - name:      `name` (substring, case-insensitive)
    """
    return service.list_orders(session, filters)


@router.post(
    "",
    response_model=OrderCreated,
    status_code=status.HTTP_201_CREATED,
)
def create_order(
    payload: OrderInput,
    session: Session = Depends(get_session),
):
    """
    Create an order. Unknown cities, districts and villages typed as
    free text are added to the reference lists.
    """
    order_id = service.create_order(session, payload)
    return OrderCreated(id=order_id)


# Declared before /{order_id} so the literal path wins.
@router.get("/completion-options", response_model=list[CompletionOption])
def get_completion_options(session: Session = Depends(get_session)):
    """
    Years (newest first) with the months that have orders, for the
    year / yearMonth filters.
    """
    return service.get_completion_options(session)


@router.get("/{order_id}", response_model=OrderRead)
def get_order(
    order_id: int,
    session: Session = Depends(get_session),
):
    order = service.get_order(session, order_id)
    if order is None:
        raise NotFound()
    return order


@router.put("/{order_id}", response_model=OrderRead)
def update_order(
    order_id: int,
    payload: OrderInput,
    session: Session = Depends(get_session),
):
    """
    Replace an order's fields. Every changed field is recorded in the
    order's history.
    """
    return service.update_order(session, order_id, payload)


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_order(
    order_id: int,
    session: Session = Depends(get_session),
):
    """Delete an order and its history."""
    service.delete_order(session, order_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{order_id}/history", response_model=list[OrderChangeRead])
def get_order_history(
    order_id: int,
    session: Session = Depends(get_session),
):
    """Field-level change history, newest first."""
    return service.get_order_history(session, order_id)
