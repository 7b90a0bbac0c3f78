# orderdesk/repositories/order_query.py
from sqlalchemy import extract, func, or_
from sqlmodel import select

from orderdesk.models.location import City, District, make_name_key
from orderdesk.models.order import Order
from orderdesk.schemas.order import OrderFilters

# Completion date if set, otherwise order date.
effective_date = func.coalesce(Order.completed_at, Order.ordered_at)


def base_order_query():
    """
    Orders joined with their current canonical city and district names.

    Yields rows of (Order, city_name, district_name).
    """
    return (
        select(
            Order,
            City.name.label("city_name"),
            District.name.label("district_name"),
        )
        .outerjoin(City, Order.city_id == City.id)
        .outerjoin(District, Order.district_id == District.id)
    )


def _same_name(column, value: str):
    """Case-insensitive equality against a stored (denormalized) name."""
    return func.lower(column) == value.strip().lower()


def filter_conditions(filters: OrderFilters) -> list:
    """
    WHERE clauses for the active filter mode.

    Exactly one mode applies. Missing parameters for that mode add no
    clause, so the mode falls back to "all".
    """
    conditions = []
    mode = filters.filter_type

    if mode == "year":
        if filters.year is not None:
            conditions.append(effective_date.is_not(None))
            conditions.append(extract("year", effective_date) == filters.year)

    elif mode == "yearMonth":
        if filters.year is not None and filters.month is not None:
            conditions.append(effective_date.is_not(None))
            conditions.append(extract("year", effective_date) == filters.year)
            conditions.append(extract("month", effective_date) == filters.month)

    elif mode == "price":
        if filters.price_comparison and filters.price_value is not None:
            conditions.append(Order.final_price.is_not(None))
            if filters.price_comparison == "gt":
                conditions.append(Order.final_price > filters.price_value)
            else:
                conditions.append(Order.final_price < filters.price_value)

    elif mode == "location":
        if filters.location_type:
            conditions.append(Order.location_type == filters.location_type)
        if filters.location_name:
            stored = _same_name(Order.location_name, filters.location_name)
            if filters.location_type == "city":
                conditions.append(
                    or_(City.name_key == make_name_key(filters.location_name), stored)
                )
            else:
                conditions.append(stored)
        if filters.district and filters.location_type == "city":
            conditions.append(
                or_(
                    District.name_key == make_name_key(filters.district),
                    _same_name(Order.district, filters.district),
                )
            )

    elif mode == "name":
        if filters.name:
            conditions.append(Order.name.icontains(filters.name, autoescape=True))

    return conditions


def build_order_query(filters: OrderFilters):
    """
    Single read query for the orders list: filtered, newest first,
    id as tie-break so equal timestamps still sort deterministically.
    """
    stmt = base_order_query()
    conditions = filter_conditions(filters)
    if conditions:
        stmt = stmt.where(*conditions)
    return stmt.order_by(Order.created_at.desc(), Order.id.desc())
