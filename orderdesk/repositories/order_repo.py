# orderdesk/repositories/order_repo.py
from sqlalchemy import delete, extract
from sqlmodel import Session, select

from orderdesk.models.order import Order, OrderChange
from orderdesk.repositories.order_query import (
    base_order_query,
    build_order_query,
    effective_date,
)
from orderdesk.schemas.order import OrderFilters


class OrderRepository:
    """
    Data access layer for orders and order_changes.

    NOTE:
      - No commits here; create/update/delete are multi-step
        transactions. The service is responsible for session.commit().
    """

    # ---- Orders ----

    def get_by_id(self, session: Session, order_id: int) -> Order | None:
        return session.get(Order, order_id)

    def get_with_names(
        self,
        session: Session,
        order_id: int,
    ) -> tuple[Order, str | None, str | None] | None:
        """(order, city_name, district_name) or None."""
        stmt = base_order_query().where(Order.id == order_id)
        return session.exec(stmt).first()

    def list_filtered(
        self,
        session: Session,
        filters: OrderFilters,
    ) -> list[tuple[Order, str | None, str | None]]:
        return list(session.exec(build_order_query(filters)).all())

    def create_order(self, session: Session, order: Order) -> Order:
        """
        Stage a new order and flush so its id is assigned; the caller commits.
        """
        session.add(order)
        session.flush()  # Assign PK
        return order

    def update_order(self, session: Session, order: Order) -> Order:
        session.add(order)
        session.flush()
        return order

    def delete_order(self, session: Session, order: Order) -> None:
        """Delete the order's history rows, then the order itself."""
        session.execute(delete(OrderChange).where(OrderChange.order_id == order.id))
        session.delete(order)
        session.flush()

    # ---- Change history ----

    def add_changes(self, session: Session, changes: list[OrderChange]) -> None:
        session.add_all(changes)
        session.flush()

    def list_changes(self, session: Session, order_id: int) -> list[OrderChange]:
        """
        Newest first. Rows written by the same update share changed_at
        and keep their insertion (field) order.
        """
        stmt = (
            select(OrderChange)
            .where(OrderChange.order_id == order_id)
            .order_by(OrderChange.changed_at.desc(), OrderChange.id)
        )
        return list(session.exec(stmt).all())

    # ---- Filter options ----

    def months_for_year(self, session: Session, year: int) -> list[int]:
        """Distinct months (1-12) with orders in `year`, descending."""
        month_expr = extract("month", effective_date)
        stmt = (
            select(month_expr)
            .where(
                effective_date.is_not(None),
                extract("year", effective_date) == year,
            )
            .distinct()
            .order_by(month_expr.desc())
        )
        return [int(month) for month in session.exec(stmt).all() if month is not None]
