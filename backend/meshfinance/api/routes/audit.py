from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from meshfinance.api.deps import db, current_user
from meshfinance.models.user import User
from meshfinance.schemas.audit import AuditOut
from meshfinance.services.audit import events_for_user

router = APIRouter(prefix="/audit", tags=["audit"])


@router.get("", response_model=list[AuditOut])
def list_audit(
    entity_type: str | None = Query(default=None),
    action: str | None = Query(default=None),
    limit: int = Query(default=200, ge=1, le=1000),
    s: Session = Depends(db),
    u: User = Depends(current_user),
):
    return events_for_user(s, u.id, entity_type=entity_type, action=action, limit=limit)
