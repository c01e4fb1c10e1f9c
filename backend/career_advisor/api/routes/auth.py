import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from career_advisor.api.deps import get_db
from career_advisor.schemas.api import LoginIn, LoginOut
from career_advisor.services.identity import InvalidToken, verify_google_token
from career_advisor.services.profiles import StoreError, serialize_profile, upsert_login

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=LoginOut)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    try:
        claims = verify_google_token(payload.token or "")
    except InvalidToken as exc:
        logger.warning("Google login rejected: %s", exc)
        raise HTTPException(status_code=401, detail="Invalid Google Login") from exc

    try:
        profile = upsert_login(db, claims)
    except StoreError as exc:
        logger.exception("Login upsert failed for %s", claims["email"])
        raise HTTPException(status_code=500, detail="Login failed") from exc
    return serialize_profile(profile)
