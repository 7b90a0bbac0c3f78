# orderdesk/services/order_service.py
import logging
from datetime import date
from typing import Any, Callable, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from orderdesk.core.errors import ConstraintViolation, NotFound, ValidationFailed
from orderdesk.models.order import Order, OrderChange, utcnow
from orderdesk.repositories.location_repo import LocationRepository
from orderdesk.repositories.order_repo import OrderRepository
from orderdesk.schemas.order import (
    CompletionOption,
    OrderChangeRead,
    OrderFilters,
    OrderInput,
    OrderRead,
)
from orderdesk.services.audit import build_change_rows, diff_snapshots, snapshot
from orderdesk.services.location_resolver import LocationResolver

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OrderService:
    """
    Business logic for orders.

    Responsibilities:
      - Validate the order payload beyond pydantic (non-blank name)
      - Resolve location input to reference rows (LocationResolver)
      - Record a field-level change history on every update
      - Keep the years index in sync with order dates
      - Run every mutation as one transaction: all writes or none
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        location_repo: LocationRepository,
        resolver: LocationResolver,
    ):
        self.order_repo = order_repo
        self.location_repo = location_repo
        self.resolver = resolver

    # -------- Mutations --------

    def create_order(self, session: Session, payload: OrderInput) -> int:
        """
        Create an order and return its id.

        Steps (one transaction):
          1. Reject a blank name.
          2. Resolve the location (may create city/district/village rows).
          3. Register the years of ordered_at / completed_at.
          4. Insert the order.
        """
        self._require_name(payload)

        def work() -> int:
            location = self.resolver.resolve(session, payload)
            order = Order(
                **self._next_values(payload, location.as_order_fields()),
            )
            self._register_years(session, order.ordered_at, order.completed_at)
            order = self.order_repo.create_order(session, order)
            return order.id

        order_id = self._in_transaction(session, work)
        logger.info("Created order id=%s", order_id)
        return order_id

    def update_order(
        self,
        session: Session,
        order_id: int,
        payload: OrderInput,
    ) -> OrderRead:
        """
        Replace an order's editable fields and record what changed.

        Location fields are recomputed from the payload, never merged
        with the stored ones: a payload without location_type clears
        the order's location.

        Raises:
            NotFound: unknown order id
            ValidationFailed: blank name
        """
        existing = self.order_repo.get_by_id(session, order_id)
        if existing is None:
            raise NotFound()

        self._require_name(payload)

        def work() -> int:
            before = snapshot(existing)
            location = self.resolver.resolve(session, payload)
            after = self._next_values(payload, location.as_order_fields())
            changes = diff_snapshots(before, after)

            now = utcnow()
            for field, value in after.items():
                setattr(existing, field, value)
            existing.updated_at = now
            self.order_repo.update_order(session, existing)

            self.order_repo.add_changes(
                session,
                build_change_rows(order_id, changes, changed_at=now),
            )
            self._register_years(session, existing.ordered_at, existing.completed_at)
            return len(changes)

        change_count = self._in_transaction(session, work)
        logger.info("Updated order id=%s (%d field changes)", order_id, change_count)
        return self.get_order(session, order_id)

    def delete_order(self, session: Session, order_id: int) -> None:
        """Delete an order together with its change history."""
        order = self.order_repo.get_by_id(session, order_id)
        if order is None:
            raise NotFound()

        self._in_transaction(session, lambda: self.order_repo.delete_order(session, order))
        logger.info("Deleted order id=%s", order_id)

    # -------- Reads --------

    def get_order(self, session: Session, order_id: int) -> OrderRead | None:
        row = self.order_repo.get_with_names(session, order_id)
        if row is None:
            return None
        return self._to_read(*row)

    def list_orders(self, session: Session, filters: OrderFilters) -> list[OrderRead]:
        rows = self.order_repo.list_filtered(session, filters)
        return [self._to_read(*row) for row in rows]

    def get_order_history(self, session: Session, order_id: int) -> list[OrderChangeRead]:
        """
        Change history of an order, newest first.
        Unknown (or deleted) ids return an empty list.
        """
        changes: list[OrderChange] = self.order_repo.list_changes(session, order_id)
        return [OrderChangeRead.model_validate(change) for change in changes]

    def get_completion_options(self, session: Session) -> list[CompletionOption]:
        """
        Years from the years index, newest first, each with the months
        in which orders were completed (or, lacking that, ordered).
        """
        options: list[CompletionOption] = []
        for year in self.location_repo.list_years(session):
            months = self.order_repo.months_for_year(session, int(year))
            options.append(
                CompletionOption(year=year, months=[f"{month:02d}" for month in months])
            )
        return options

    # -------- Helpers --------

    @staticmethod
    def _require_name(payload: OrderInput) -> None:
        if not payload.name or not payload.name.strip():
            raise ValidationFailed("Order name is required")

    @staticmethod
    def _next_values(payload: OrderInput, location: dict[str, Any]) -> dict[str, Any]:
        """Audited column values for the order described by `payload`."""
        return {
            "name": payload.name.strip(),
            **location,
            "final_price": payload.final_price,
            "deposit": payload.deposit,
            "is_completed": payload.is_completed,
            "ordered_at": payload.ordered_at,
            "completed_at": payload.completed_at,
            "description": payload.description,
        }

    def _register_years(self, session: Session, *dates: date | None) -> None:
        for value in dates:
            if value is not None:
                self.location_repo.ensure_year(session, f"{value.year:04d}")

    @staticmethod
    def _in_transaction(session: Session, work: Callable[[], T]) -> T:
        """
        Run `work` and commit; roll back everything on any error.
        """
        try:
            result = work()
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            logger.warning("Integrity error, transaction rolled back: %s", exc.orig)
            raise ConstraintViolation("Data integrity violation; nothing was saved") from exc
        except Exception:
            session.rollback()
            raise
        return result

    @staticmethod
    def _to_read(
        order: Order,
        city_name: str | None,
        district_name: str | None,
    ) -> OrderRead:
        return OrderRead.model_validate(
            order,
            update={"city_name": city_name, "district_name": district_name},
        )
