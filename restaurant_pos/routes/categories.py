from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import func
from sqlalchemy.orm import Session

from restaurant_pos.database import get_db
from restaurant_pos.models.category import Category
from restaurant_pos.models.users import User
from restaurant_pos.schemas.category import CategoryCreate, CategoryOut
from restaurant_pos.utils.audit import client_ip, write_log
from restaurant_pos.utils.realtime import hub
from restaurant_pos.utils.tokenJWT import capability_required, get_current_user

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("", response_model=List[CategoryOut])
def list_categories(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return db.query(Category).order_by(Category.name.asc()).all()


@router.post("", response_model=CategoryOut)
def create_category(
    payload: CategoryCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(capability_required("create_category")),
):
    name = payload.name.strip()
    if db.query(Category).filter(func.lower(Category.name) == name.lower()).first():
        raise HTTPException(status_code=400, detail="Category already exists")

    category = Category(name=name)
    db.add(category)
    db.commit()
    db.refresh(category)

    out = CategoryOut.model_validate(category)
    hub.publish("categories", "INSERT", out.model_dump(mode="json"))

    write_log(db, user_id=current_user.id, action="CATEGORY_CREATE", resource="categories",
              status="SUCCESS", ip=client_ip(request), meta={"id": category.id, "name": category.name})
    return out
