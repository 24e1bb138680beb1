# phonedeals/services/order_service.py
import csv
import io
import json
from datetime import datetime
from typing import Any, Dict, List, Tuple

from sqlalchemy.orm import Session

from phonedeals.data.models.order import ORDER_STATUSES, OrderModel
from phonedeals.domain import errors
from phonedeals.repos.order_repo import OrderRepo
from phonedeals.services.serializers import order_out
from phonedeals.utils.pagination import page_window, pagination
from phonedeals.utils.logging import get_logger

logger = get_logger(__name__)

EXPORT_COLUMNS = ("Timestamp", "Buyer name", "Items purchased and quantities", "Total amount")


class OrderService:
    """
    Read side of the order domain plus the admin status change.
    Orders are only ever created by CheckoutService.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepo(db)

    def get_order(self, order_id: int) -> Dict[str, Any]:
        order = self.repo.get_populated_order(order_id)
        if not order:
            raise errors.NotFound(f"Order with ID {order_id} not found.", order_id=order_id)
        return order_out(order)

    def list_for_user(self, user_id: int, page: int | None = 1, limit: int | None = None) -> Dict[str, Any]:
        page, limit, offset = page_window(page, limit)
        orders, total = self.repo.list_orders(user_id=user_id, offset=offset, limit=limit)
        return {"orders": [order_out(o) for o in orders], "pagination": pagination(total, page, limit)}

    def list_all(
        self,
        status: str | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        page: int | None = 1,
        limit: int | None = None,
    ) -> Dict[str, Any]:
        self._check_filters(status, start_date, end_date)

        page, limit, offset = page_window(page, limit)
        orders, total = self.repo.list_orders(
            status=status, start_date=start_date, end_date=end_date, offset=offset, limit=limit
        )
        return {"orders": [order_out(o) for o in orders], "pagination": pagination(total, page, limit)}

    def update_status(self, order_id: int, status: str) -> Dict[str, Any]:
        # any status can move to any other one, there is no payment step to guard
        if status not in ORDER_STATUSES:
            raise errors.ValidationError(f"Unknown order status {status!r}.", allowed=list(ORDER_STATUSES))

        order = self.repo.update_order_status(order_id, status)
        if not order:
            raise errors.NotFound(f"Order with ID {order_id} not found.", order_id=order_id)

        logger.info(f"Order {order_id} status set to {status}")
        return self.get_order(order_id)

    # export

    def export(
        self,
        fmt: str = "csv",
        status: str | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> Tuple[str, str]:
        """Returns (content, media type)."""
        if fmt not in ("csv", "json"):
            raise errors.ValidationError(f"Unsupported export format {fmt!r}.", allowed=["csv", "json"])
        self._check_filters(status, start_date, end_date)

        orders, total = self.repo.list_orders(status=status, start_date=start_date, end_date=end_date, limit=None)
        rows = [self._export_row(o) for o in orders]
        logger.info(f"Exporting {total} orders as {fmt}")

        if fmt == "json":
            return json.dumps(rows, indent=2), "application/json"

        buffer = io.StringIO()
        writer = csv.DictWriter(buffer, fieldnames=EXPORT_COLUMNS)
        writer.writeheader()
        writer.writerows(rows)
        return buffer.getvalue(), "text/csv"

    @staticmethod
    def _export_row(order: OrderModel) -> Dict[str, str]:
        items: List[str] = [
            f"{item.phone.title if item.phone is not None else 'Removed listing'} x{item.quantity}"
            for item in order.items
        ]
        return {
            "Timestamp": order.created_at.isoformat(),
            "Buyer name": order.user.full_name if order.user else "Unknown",
            "Items purchased and quantities": " | ".join(items),
            "Total amount": f"{order.total_amount:.2f}",
        }

    @staticmethod
    def _check_filters(status: str | None, start_date: datetime | None, end_date: datetime | None) -> None:
        if status and status not in ORDER_STATUSES:
            raise errors.ValidationError(f"Unknown order status {status!r}.", allowed=list(ORDER_STATUSES))
        if start_date and end_date and start_date > end_date:
            raise errors.ValidationError("start_date cannot be after end_date.")
