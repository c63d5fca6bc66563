# restaurant_pos/routes/orders.py
import logging
from typing import Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session, joinedload

from restaurant_pos.database import get_db
from restaurant_pos.models.order import Order, OrderItem, OrderStatus
from restaurant_pos.models.product import Product
from restaurant_pos.models.settings import AppSettings, SETTINGS_ID
from restaurant_pos.models.users import User
from restaurant_pos.schemas.order import (
    OrderCancelPayload, OrderCreatePayload, OrderEditPayload, OrderItemIn,
    OrderItemOut, OrderResponse, OrderStatusName,
)
from restaurant_pos.utils.audit import client_ip, write_log
from restaurant_pos.utils.dates import utcnow
from restaurant_pos.utils.pricing import compute_order_totals, derive_discount_amount
from restaurant_pos.utils.realtime import hub
from restaurant_pos.utils.tokenJWT import capability_required, get_current_user

router = APIRouter(prefix="/orders", tags=["Orders"])
logger = logging.getLogger(__name__)


# Map Order model to OrderResponse schema
def _order_to_out(order: Order) -> OrderResponse:
    items: List[OrderItemOut] = []
    for it in order.items:
        product_name = it.product.name if it.product else "Deleted product"
        items.append(OrderItemOut(
            product_id=it.product_id,
            name=product_name,
            quantity=it.quantity,
            price_at_order=it.price_at_order,
            line_total=it.quantity * it.price_at_order,
        ))
    return OrderResponse(
        id=order.id,
        items=items,
        subtotal=order.subtotal,
        discount_type=order.discount_type,
        discount_value=order.discount_value,
        discount_amount=derive_discount_amount(order.subtotal, order.discount_type, order.discount_value),
        tax_amount=order.tax_amount,
        total=order.total,
        status=order.status,
        note=order.note,
        cancellation_note=order.cancellation_note,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )

def _load_order(db: Session, order_id: int) -> Order:
    order = db.query(Order).options(
        joinedload(Order.items).joinedload(OrderItem.product)
    ).filter(Order.id == order_id).first()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order

def _tax_rate(db: Session) -> float:
    row = db.get(AppSettings, SETTINGS_ID)
    return row.sales_tax_rate if row else 0.0

def _require_pending(order: Order):
    if order.status != OrderStatus.PENDING.value:
        raise HTTPException(status_code=400, detail=f"Cannot change order in status {order.status}")

def _resolve_lines(
    db: Session,
    requested: List[OrderItemIn],
    existing_prices: Optional[Dict[int, float]] = None,
) -> List[Tuple[Product, int, float]]:
    """Validate requested lines and pick the price snapshot for each.

    Lines for the same product at the same price are merged; differing
    prices stay separate lines. Products already on the order keep their
    stored price and may stay even when they went out of stock.
    """
    existing_prices = existing_prices or {}
    requested_ids = {line.product_id for line in requested}
    products = {
        p.id: p for p in db.query(Product).filter(Product.id.in_(requested_ids)).all()
    }

    merged: Dict[Tuple[int, float], int] = {}
    for line in requested:
        product = products.get(line.product_id)
        if product is None:
            raise HTTPException(status_code=400, detail=f"Product {line.product_id} does not exist")
        already_on_order = product.id in existing_prices
        if not product.in_stock and not already_on_order:
            raise HTTPException(status_code=400, detail=f"{product.name} is out of stock")

        if line.price_at_order is not None:
            price = line.price_at_order
        elif already_on_order:
            price = existing_prices[product.id]
        else:
            price = product.price
        key = (product.id, price)
        merged[key] = merged.get(key, 0) + line.quantity

    return [(products[product_id], qty, price) for (product_id, price), qty in merged.items()]

def _apply_pricing(order: Order, lines, discount_type: str, discount_value: float, tax_rate: float):
    # "none" never carries a value
    value = 0.0 if discount_type == "none" else (discount_value or 0.0)
    totals = compute_order_totals(
        [(price, qty) for _, qty, price in lines], discount_type, value, tax_rate
    )
    order.subtotal = totals.subtotal
    order.discount_type = discount_type
    order.discount_value = value
    order.tax_amount = totals.tax_amount
    order.total = totals.total

def _publish_items(event: str, order: Order):
    for it in order.items:
        hub.publish("order_items", event, {
            "id": it.id, "order_id": order.id, "product_id": it.product_id,
            "quantity": it.quantity, "price_at_order": it.price_at_order,
        })


# List orders, newest first
@router.get("", response_model=List[OrderResponse])
def list_orders(
    status: Optional[OrderStatusName] = Query(None, description="Filter by status"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    q = db.query(Order).options(
        joinedload(Order.items).joinedload(OrderItem.product)
    )
    if status:
        q = q.filter(Order.status == status)
    rows = q.order_by(Order.created_at.desc(), Order.id.desc()).all()
    return [_order_to_out(o) for o in rows]


# Get details of a specific order
@router.get("/{order_id}", response_model=OrderResponse)
def get_order_detail(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _order_to_out(_load_order(db, order_id))


# Create a pending order; pricing is always computed here
@router.post("", response_model=OrderResponse)
def create_order(
    payload: OrderCreatePayload,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(capability_required("create_order")),
):
    lines = _resolve_lines(db, payload.items)
    now = utcnow()

    order = Order(status=OrderStatus.PENDING.value, note=payload.note, created_at=now, updated_at=now)
    _apply_pricing(order, lines, payload.discount_type, payload.discount_value, _tax_rate(db))
    order.items = [
        OrderItem(product_id=product.id, quantity=qty, price_at_order=price)
        for product, qty, price in lines
    ]
    db.add(order)
    db.commit()

    out = _order_to_out(_load_order(db, order.id))
    logger.info("Order %s created, total %.2f", out.id, out.total)
    hub.publish("orders", "INSERT", out.model_dump(mode="json"))
    _publish_items("INSERT", _load_order(db, out.id))

    write_log(db, user_id=current_user.id, action="ORDER_CREATE", resource="orders", status="SUCCESS",
              ip=client_ip(request), meta={"order_id": out.id, "total": out.total})
    return out


# Replace items, discount and note of a pending order
@router.put("/{order_id}", response_model=OrderResponse)
def edit_order(
    order_id: int,
    payload: OrderEditPayload,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(capability_required("edit_order")),
):
    order = _load_order(db, order_id)
    _require_pending(order)

    existing_prices = {it.product_id: it.price_at_order for it in order.items}
    removed = [{"id": it.id, "order_id": order.id} for it in order.items]
    lines = _resolve_lines(db, payload.items, existing_prices)

    _apply_pricing(order, lines, payload.discount_type, payload.discount_value, _tax_rate(db))
    order.note = payload.note
    order.updated_at = utcnow()

    # Delete-then-reinsert, committed as one transaction
    order.items.clear()
    db.flush()
    order.items.extend(
        OrderItem(product_id=product.id, quantity=qty, price_at_order=price)
        for product, qty, price in lines
    )
    db.commit()

    out = _order_to_out(_load_order(db, order_id))
    hub.publish("orders", "UPDATE", out.model_dump(mode="json"))
    for record in removed:
        hub.publish("order_items", "DELETE", record)
    _publish_items("INSERT", _load_order(db, order_id))

    write_log(db, user_id=current_user.id, action="ORDER_EDIT", resource="orders", status="SUCCESS",
              ip=client_ip(request), meta={"order_id": order_id, "total": out.total})
    return out


def _transition(db: Session, order_id: int, new_status: OrderStatus, current_user: User,
                request: Request, cancellation_note: Optional[str] = None) -> OrderResponse:
    order = _load_order(db, order_id)
    old_status = order.status
    _require_pending(order)

    order.status = new_status.value
    order.updated_at = utcnow()
    if cancellation_note is not None:
        order.cancellation_note = cancellation_note
    db.commit()

    out = _order_to_out(_load_order(db, order_id))
    hub.publish("orders", "UPDATE", out.model_dump(mode="json"))

    write_log(db, user_id=current_user.id, action="ORDER_STATUS_CHANGE", resource="orders", status="SUCCESS",
              ip=client_ip(request), meta={"order_id": order_id, "old": old_status, "new": new_status.value})
    return out


@router.post("/{order_id}/complete", response_model=OrderResponse)
def complete_order(
    order_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(capability_required("complete_order")),
):
    return _transition(db, order_id, OrderStatus.COMPLETED, current_user, request)


@router.post("/{order_id}/cancel", response_model=OrderResponse)
def cancel_order(
    order_id: int,
    payload: OrderCancelPayload,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(capability_required("cancel_order")),
):
    return _transition(db, order_id, OrderStatus.CANCELLED, current_user, request,
                       cancellation_note=payload.note)
