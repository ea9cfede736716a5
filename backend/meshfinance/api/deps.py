from datetime import date

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWTError
from sqlalchemy import select
from sqlalchemy.orm import Session
from meshfinance.db.session import SessionLocal
from meshfinance.core.security import decode_token
from meshfinance.models.user import User
from meshfinance.utils.timezone import today_local

bearer = HTTPBearer()

def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()

def current_user(creds: HTTPAuthorizationCredentials = Depends(bearer), s: Session = Depends(db)) -> User:
    try:
        claims = decode_token(creds.credentials)
    except PyJWTError:
        raise HTTPException(status_code=401, detail="invalid_token")
    # the account may have been removed after the token was issued
    u = s.execute(select(User).where(User.username == claims.get("sub"))).scalar_one_or_none()
    if u is None:
        raise HTTPException(status_code=401, detail="invalid_token")
    return u

def today() -> date:
    return today_local()
