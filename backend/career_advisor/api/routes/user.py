import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.orm import Session

from career_advisor.api.deps import get_db
from career_advisor.schemas.api import MessageOut, OnboardingIn, ProfileOut
from career_advisor.services.profiles import (
    ProfileNotFound,
    StoreError,
    get_profile,
    record_certificate,
    serialize_profile,
    update_onboarding,
)
from career_advisor.services.storage import delete_certificate_file, store_certificate_file

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/user", response_model=ProfileOut)
def read_user(email: str | None = None, db: Session = Depends(get_db)):
    if not email:
        raise HTTPException(status_code=400, detail="Email required")
    try:
        return serialize_profile(get_profile(db, email))
    except ProfileNotFound as exc:
        raise HTTPException(status_code=404, detail="User not found") from exc
    except StoreError as exc:
        logger.exception("Fetching profile failed for %s", email)
        raise HTTPException(status_code=500, detail="Failed to fetch user") from exc


@router.post("/onboarding", response_model=MessageOut)
def onboarding(payload: OnboardingIn, db: Session = Depends(get_db)):
    if not payload.email or not payload.name or not payload.field:
        raise HTTPException(status_code=400, detail="Email, name, and field required")
    try:
        update_onboarding(db, payload.email, payload.name, payload.field)
    except StoreError as exc:
        logger.exception("Onboarding failed for %s", payload.email)
        raise HTTPException(status_code=500, detail="Profile update failed") from exc
    return {"message": "Profile updated"}


def _discard_certificate(stored: dict | None, email: str) -> None:
    if stored is None:
        return
    try:
        delete_certificate_file(stored)
    except (RuntimeError, OSError):
        logger.exception("Could not remove certificate %s for %s", stored.get("file_url"), email)


@router.post("/upload-certificate", response_model=MessageOut)
def upload_certificate(
    skill: str | None = Form(default=None),
    email: str | None = Form(default=None),
    file: UploadFile | None = File(default=None),
    db: Session = Depends(get_db),
):
    if not email or not skill:
        raise HTTPException(status_code=400, detail="Email and skill required")
    stored = None
    try:
        get_profile(db, email)
        if file is not None:
            stored = store_certificate_file(email, file.filename, file.content_type, file.file.read())
            logger.info("Stored certificate for %s at %s", email, stored["file_url"])
        points_earned = record_certificate(db, email, skill)
    except ProfileNotFound as exc:
        _discard_certificate(stored, email)
        raise HTTPException(status_code=404, detail="User not found") from exc
    except (RuntimeError, OSError) as exc:
        logger.exception("Certificate upload failed for %s", email)
        _discard_certificate(stored, email)
        raise HTTPException(status_code=500, detail="Upload failed") from exc
    return {"message": f'Skill "{skill}" added. Points earned: {points_earned}'}
