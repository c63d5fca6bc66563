# restaurant_pos/routes/stats.py

import logging
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from restaurant_pos.database import get_db
from restaurant_pos.models.expense import Expense
from restaurant_pos.models.order import Order, OrderItem, OrderStatus
from restaurant_pos.models.product import Product
from restaurant_pos.models.users import User
from restaurant_pos.schemas.stats import DashboardStats, DashboardStatsRequest, TopProduct
from restaurant_pos.utils.dates import local_day_range
from restaurant_pos.utils.tokenJWT import get_current_user

router = APIRouter(
    prefix="/functions",
    tags=["Stats"]
)
logger = logging.getLogger(__name__)

# Number of entries in the best sellers list
TOP_PRODUCTS_LIMIT = 5


def _top_selling_products(db: Session, start: datetime, end: datetime) -> List[TopProduct]:
    rows = (
        db.query(
            Product.name.label("name"),
            func.sum(OrderItem.quantity).label("quantity"),
        )
        .join(OrderItem, OrderItem.product_id == Product.id)
        .join(Order, Order.id == OrderItem.order_id)
        .filter(
            Order.status == OrderStatus.COMPLETED.value,
            Order.updated_at >= start,
            Order.updated_at < end,
        )
        .group_by(Product.id, Product.name)
        .order_by(func.sum(OrderItem.quantity).desc(), Product.name.asc())
        .limit(TOP_PRODUCTS_LIMIT)
        .all()
    )
    return [TopProduct(name=r.name, quantity=int(r.quantity or 0)) for r in rows]


def compute_dashboard_stats(db: Session, start: datetime, end: datetime) -> DashboardStats:
    # Orders are attributed to the day they were closed (updated_at)
    closed_in_range = (Order.updated_at >= start, Order.updated_at < end)

    income = db.query(func.coalesce(func.sum(Order.total), 0.0)).filter(
        Order.status == OrderStatus.COMPLETED.value, *closed_in_range
    ).scalar() or 0.0

    total_expenses = db.query(func.coalesce(func.sum(Expense.amount), 0.0)).filter(
        Expense.created_at >= start, Expense.created_at < end
    ).scalar() or 0.0

    counts = dict(
        db.query(Order.status, func.count(Order.id))
        .filter(
            Order.status.in_([OrderStatus.COMPLETED.value, OrderStatus.CANCELLED.value]),
            *closed_in_range,
        )
        .group_by(Order.status)
        .all()
    )
    completed = counts.get(OrderStatus.COMPLETED.value, 0)
    cancelled = counts.get(OrderStatus.CANCELLED.value, 0)

    # Live count, not bound to the requested day
    pending = db.query(Order).filter(Order.status == OrderStatus.PENDING.value).count()

    # The best sellers list is optional; never fail the whole report on it
    try:
        top_products = _top_selling_products(db, start, end)
    except SQLAlchemyError as e:
        logger.error("Non-critical error fetching top products: %s", e)
        db.rollback()
        top_products = []

    return DashboardStats(
        income=income,
        total_expenses=total_expenses,
        net=income - total_expenses,
        pending_orders=pending,
        completed_orders_count=completed,
        cancelled_orders_count=cancelled,
        average_order_value=income / completed if completed > 0 else 0.0,
        top_selling_products=top_products,
    )


# === Aggregated statistics for one local day ===

@router.post("/get-dashboard-stats", response_model=DashboardStats)
def get_dashboard_stats(
    payload: DashboardStatsRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        start, end = local_day_range(payload.date, payload.timezone_offset)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return compute_dashboard_stats(db, start, end)
