# restaurant_pos/routes/admin.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from restaurant_pos.config import settings
from restaurant_pos.database import get_db
from restaurant_pos.models.users import User
from restaurant_pos.schemas.user import (
    Role, UserCreate, UserCreatedResponse, UserDelete, UserResponse,
)
from restaurant_pos.utils.audit import client_ip, write_log
from restaurant_pos.utils.hashing import get_password_hash
from restaurant_pos.utils.realtime import hub
from restaurant_pos.utils.tokenJWT import capability_required

router = APIRouter(tags=["Admin"])
logger = logging.getLogger(__name__)

manage_users = capability_required("manage_users")


# List staff profiles (Admin only)
@router.get("/users", response_model=List[UserResponse])
def get_all_users(
    role: Optional[Role] = Query(None, description="Filter by role"),
    db: Session = Depends(get_db),
    current_user: User = Depends(manage_users),
):
    query = db.query(User)
    if role:
        query = query.filter(User.role == role)
    return query.order_by(User.username.asc()).all()


# Privileged user creation (Admin only)
@router.post("/functions/create-user", response_model=UserCreatedResponse)
def create_user(
    payload: UserCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manage_users),
):
    username = payload.username.strip()
    exists = db.query(User).filter(func.lower(User.username) == username.lower()).first()
    if exists:
        write_log(db, user_id=current_user.id, action="USER_CREATE", resource="profiles",
                  status="FAIL", ip=client_ip(request), meta={"username": username, "reason": "Username exists"})
        raise HTTPException(status_code=400, detail="Username already exists. Please choose another.")

    user = User(username=username, password_hash=get_password_hash(payload.password), role=payload.role)
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("User %s created with role %s", user.username, user.role)
    out = UserResponse.model_validate(user)
    hub.publish("profiles", "INSERT", out.model_dump(mode="json"))

    write_log(db, user_id=current_user.id, action="USER_CREATE", resource="profiles",
              status="SUCCESS", ip=client_ip(request), meta={"id": user.id, "username": user.username})
    return {"message": f"User {user.username} created successfully.", "user": out}


# Privileged user deletion (Admin only)
@router.post("/functions/delete-user")
def delete_user(
    payload: UserDelete,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manage_users),
):
    user = db.query(User).filter(User.id == payload.user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    # Prevent self-deletion and removal of the built-in administrator
    if user.id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot delete your own account")
    if user.username.lower() == settings.ADMIN_USERNAME.lower():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="The system administrator cannot be deleted")

    user_id, username = user.id, user.username
    db.delete(user)
    db.commit()

    logger.info("User %s deleted", username)
    hub.publish("profiles", "DELETE", {"id": user_id})

    write_log(db, user_id=current_user.id, action="USER_DELETE", resource="profiles",
              status="SUCCESS", ip=client_ip(request), meta={"id": user_id, "username": username})
    return {"message": f"User {username} deleted successfully."}
