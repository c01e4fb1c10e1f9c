from fastapi import APIRouter
from sqlalchemy import text

from career_advisor.core.database import engine
from career_advisor.schemas.api import CareerFieldsOut
from career_advisor.services.ai import ai_is_configured, get_active_ai_model, get_active_ai_provider
from career_advisor.services.storage import s3_is_enabled

router = APIRouter(prefix="/meta")

CAREER_FIELDS = [
    "AI / Machine Learning",
    "Cloud Security",
    "Data Science / Marketing",
    "Product Management",
    "Software Development",
]


@router.get("/ai")
def ai_meta():
    return {
        "ai_enabled": ai_is_configured(),
        "model": get_active_ai_model(),
        "provider": get_active_ai_provider(),
    }


@router.get("/career-fields", response_model=CareerFieldsOut)
def career_fields():
    return {"fields": CAREER_FIELDS}


@router.get("/health")
def health_meta():
    db_ok = False
    db_error = None
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        db_ok = True
    except Exception as exc:
        db_error = str(exc)
    return {
        "ok": db_ok,
        "database": {"ok": db_ok, "error": db_error},
        "ai": {
            "enabled": ai_is_configured(),
            "provider": get_active_ai_provider(),
            "model": get_active_ai_model(),
        },
        "storage": {"s3_enabled": s3_is_enabled(), "local_enabled": True},
    }
