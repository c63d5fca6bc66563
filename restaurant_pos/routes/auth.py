# restaurant_pos/routes/auth.py
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy import func
from sqlalchemy.orm import Session

from restaurant_pos.database import get_db
from restaurant_pos.models.users import User
from restaurant_pos.schemas import user as schemas
from restaurant_pos.utils.audit import client_ip, write_log
from restaurant_pos.utils.hashing import verify_password
from restaurant_pos.utils.tokenJWT import create_access_token, get_current_user

router = APIRouter(tags=["Auth"])


# Authenticate staff member and issue JWT token
@router.post("/login", response_model=schemas.Token)
def login(payload: schemas.UserLogin, request: Request, db: Session = Depends(get_db)):
    username = payload.username.strip().lower()
    db_user = db.query(User).filter(func.lower(User.username) == username).first()

    # Validate credentials and log failure on error
    if not db_user or not verify_password(payload.password, db_user.password_hash):
        write_log(db, user_id=(db_user.id if db_user else None), action="LOGIN", resource="auth",
                  status="FAIL", ip=client_ip(request), meta={"username": payload.username})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    access_token = create_access_token(data={"sub": db_user.username, "role": db_user.role})

    write_log(db, user_id=db_user.id, action="LOGIN", resource="auth",
              status="SUCCESS", ip=client_ip(request), meta={"username": db_user.username})

    return {"access_token": access_token, "token_type": "bearer", "user": db_user}


# Retrieve current authenticated user details
@router.get("/me", response_model=schemas.UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user
