# restaurant_pos/routes/settings.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from restaurant_pos.config import settings as app_config
from restaurant_pos.database import get_db
from restaurant_pos.models.settings import ensure_settings_row
from restaurant_pos.models.users import User
from restaurant_pos.schemas.settings import SettingsOut, SettingsUpdate
from restaurant_pos.utils.audit import client_ip, write_log
from restaurant_pos.utils.realtime import hub
from restaurant_pos.utils.tokenJWT import capability_required, get_current_user

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("", response_model=SettingsOut)
def get_settings(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ensure_settings_row(db, app_config.DEFAULT_BUSINESS_NAME)


# Partial update of the singleton row (Admin only)
@router.put("", response_model=SettingsOut)
def update_settings(
    payload: SettingsUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(capability_required("manage_settings")),
):
    row = ensure_settings_row(db, app_config.DEFAULT_BUSINESS_NAME)
    changes = payload.model_dump(exclude_none=True)
    for key, value in changes.items():
        setattr(row, key, value)
    db.commit()
    db.refresh(row)

    out = SettingsOut.model_validate(row)
    hub.publish("app_settings", "UPDATE", out.model_dump(mode="json"))

    write_log(db, user_id=current_user.id, action="SETTINGS_UPDATE", resource="app_settings",
              status="SUCCESS", ip=client_ip(request), meta=changes)
    return out
