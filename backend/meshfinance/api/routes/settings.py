from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from meshfinance.api.deps import db, current_user
from meshfinance.models.user import User
from meshfinance.schemas.settings import CardSettingsIn, CardSettingsOut
from meshfinance.services.audit import log_event
from meshfinance.services.card_settings import billing_config_for, update_card_settings

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("/credit-card", response_model=CardSettingsOut)
def get_card_settings(u: User = Depends(current_user)):
    cfg = billing_config_for(u)
    return CardSettingsOut(closing_day=cfg.closing_day, due_day=cfg.due_day)


@router.put("/credit-card", response_model=CardSettingsOut)
def put_card_settings(body: CardSettingsIn, s: Session = Depends(db), u: User = Depends(current_user)):
    rebased = update_card_settings(s, u, body.closing_day, body.due_day, body.scope)
    log_event(
        s,
        user_id=u.id,
        action="settings.credit_card",
        entity_type="user",
        entity_id=u.id,
        details={**body.model_dump(), "rebased": rebased},
    )
    return CardSettingsOut(closing_day=body.closing_day, due_day=body.due_day, rebased=rebased)
