# restaurant_pos/routes/products.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from restaurant_pos.database import get_db
from restaurant_pos.models.category import Category
from restaurant_pos.models.product import Product
from restaurant_pos.models.users import User
import restaurant_pos.schemas.product as product_schemas
from restaurant_pos.utils.audit import client_ip, write_log
from restaurant_pos.utils.realtime import hub
from restaurant_pos.utils.tokenJWT import capability_required, get_current_user

router = APIRouter(tags=["Products"])


def _serialize(product: Product) -> product_schemas.ProductOut:
    return product_schemas.ProductOut.model_validate(product)


# =========================
# PRODUCT LIST
# =========================
@router.get("/products", response_model=List[product_schemas.ProductOut])
def list_products(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    items = db.query(Product).order_by(Product.name.asc()).all()
    return [_serialize(p) for p in items]


# =========================
# ADD PRODUCT
# =========================
@router.post("/products", response_model=product_schemas.ProductOut)
def add_product(
    payload: product_schemas.ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(capability_required("create_product")),
):
    category = db.query(Category).filter(Category.id == payload.category_id).first()
    if not category:
        raise HTTPException(status_code=400, detail="Category does not exist")

    new_product = Product(
        name=payload.name.strip(), price=payload.price,
        category_id=category.id, in_stock=payload.in_stock,
    )
    db.add(new_product)
    db.commit()
    db.refresh(new_product)

    out = _serialize(new_product)
    hub.publish("products", "INSERT", out.model_dump(mode="json"))

    write_log(
        db, user_id=current_user.id, action="PRODUCT_CREATE", resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"id": new_product.id, "name": new_product.name}
    )
    return out


# =========================
# STOCK FLAG
# =========================
@router.patch("/products/{product_id}/stock", response_model=product_schemas.ProductOut)
def update_product_stock(
    product_id: int,
    payload: product_schemas.ProductStockUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(capability_required("toggle_stock")),
):
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    product.in_stock = payload.in_stock
    db.commit()
    db.refresh(product)

    out = _serialize(product)
    hub.publish("products", "UPDATE", out.model_dump(mode="json"))

    write_log(
        db, user_id=current_user.id, action="PRODUCT_STOCK", resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"id": product.id, "in_stock": product.in_stock}
    )
    return out
