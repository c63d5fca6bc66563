# restaurant_pos/routes/expenses.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from restaurant_pos.database import get_db
from restaurant_pos.models.expense import Expense
from restaurant_pos.models.users import User
from restaurant_pos.schemas.expense import ExpenseCreate, ExpenseOut
from restaurant_pos.utils.audit import client_ip, write_log
from restaurant_pos.utils.dates import local_day_range, local_today, utcnow
from restaurant_pos.utils.realtime import hub
from restaurant_pos.utils.tokenJWT import capability_required

router = APIRouter(prefix="/expenses", tags=["Expenses"])

manage_expenses = capability_required("manage_expenses")


# Expenses of one local day, newest first (defaults to today)
@router.get("", response_model=List[ExpenseOut])
def list_expenses(
    date: Optional[str] = Query(None, description="Local day, YYYY-MM-DD"),
    timezone_offset: Optional[int] = Query(None, ge=-24 * 60, le=24 * 60),
    db: Session = Depends(get_db),
    current_user: User = Depends(manage_expenses),
):
    day = date or local_today(timezone_offset)
    try:
        start, end = local_day_range(day, timezone_offset)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return (
        db.query(Expense)
        .filter(Expense.created_at >= start, Expense.created_at < end)
        .order_by(Expense.created_at.desc(), Expense.id.desc())
        .all()
    )


@router.post("", response_model=ExpenseOut)
def create_expense(
    payload: ExpenseCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manage_expenses),
):
    expense = Expense(description=payload.description.strip(), amount=payload.amount, created_at=utcnow())
    db.add(expense)
    db.commit()
    db.refresh(expense)

    out = ExpenseOut.model_validate(expense)
    hub.publish("expenses", "INSERT", out.model_dump(mode="json"))

    write_log(db, user_id=current_user.id, action="EXPENSE_CREATE", resource="expenses",
              status="SUCCESS", ip=client_ip(request), meta={"id": expense.id, "amount": expense.amount})
    return out
