# phonedeals/repos/order_repo.py
from datetime import datetime
from typing import List, Tuple

from sqlalchemy import select, update, func
from sqlalchemy.orm import Session, selectinload

from phonedeals.data.models.order import OrderModel, OrderItemModel


def _populated(stmt):
    return stmt.options(
        selectinload(OrderModel.user),
        selectinload(OrderModel.items).selectinload(OrderItemModel.phone),
    )


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def get_populated_order(self, order_id: int) -> OrderModel | None:
        return self.db.execute(
            _populated(select(OrderModel).where(OrderModel.id == order_id))
        ).scalar_one_or_none()

    def list_orders(
        self,
        user_id: int | None = None,
        status: str | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        offset: int = 0,
        limit: int | None = 10,
    ) -> Tuple[List[OrderModel], int]:
        stmt = select(OrderModel)

        if user_id is not None:
            stmt = stmt.where(OrderModel.user_id == user_id)
        if status:
            stmt = stmt.where(OrderModel.status == status)
        if start_date:
            stmt = stmt.where(OrderModel.created_at >= start_date)
        if end_date:
            stmt = stmt.where(OrderModel.created_at <= end_date)

        total = self.db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()

        stmt = _populated(stmt).order_by(OrderModel.created_at.desc(), OrderModel.id.desc()).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)

        return list(self.db.execute(stmt).scalars()), total

    def update_order_status(self, order_id: int, status: str) -> OrderModel | None:
        order = self.get_order(order_id)
        if order:
            order.status = status
            self.db.commit()
            self.db.refresh(order)
        return order

    def detach_user(self, user_id: int) -> int:
        # order history outlives the account
        result = self.db.execute(
            update(OrderModel)
            .where(OrderModel.user_id == user_id)
            .values(user_id=None)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
