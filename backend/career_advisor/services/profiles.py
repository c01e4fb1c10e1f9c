from datetime import datetime
import logging
import time
from typing import Any, Callable

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from career_advisor.core.config import settings
from career_advisor.models.entities import UserProfile
from career_advisor.services.gamification import apply_skill_claim, current_tier

logger = logging.getLogger(__name__)


class ProfileNotFound(ValueError):
    pass


class StoreError(RuntimeError):
    pass


def now_ms() -> int:
    return int(time.time() * 1000)


def serialize_profile(profile: UserProfile) -> dict[str, Any]:
    return {
        "email": profile.email,
        "name": profile.name or "",
        "picture": profile.picture or "",
        "locale": profile.locale or "",
        "field": profile.field or "",
        "points": profile.points or 0,
        "badges": list(profile.badges or []),
        "skills": list(profile.skills or []),
        "learningCoins": profile.learning_coins or 0,
        "lastLogin": profile.last_login,
        "lastAdvice": profile.last_advice,
        "tier": current_tier(profile.points),
    }


def _commit(db: Session, action: str, email: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("%s failed for %s", action, email)
        raise StoreError(f"{action} failed: {exc}") from exc


def _load(db: Session, email: str) -> UserProfile | None:
    try:
        return db.get(UserProfile, email)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Profile lookup failed for %s", email)
        raise StoreError(f"Profile lookup failed: {exc}") from exc


def _reset_progress(profile: UserProfile) -> None:
    profile.points = 0
    profile.badges = []
    profile.skills = []
    profile.field = ""
    profile.learning_coins = 0


def _merge_write(
    db: Session,
    email: str,
    apply: Callable[[UserProfile, bool], None],
    action: str,
) -> tuple[UserProfile, bool]:
    """Create-or-update the profile for ``email`` with last-write-wins.

    ``apply(profile, created)`` sets the merged fields. When another request
    inserts the same email between the read and the commit, the write is
    replayed once against the row that won.
    """
    profile = _load(db, email)
    created = profile is None
    if created:
        profile = UserProfile(email=email)
        db.add(profile)
    apply(profile, created)
    try:
        db.commit()
        return profile, created
    except IntegrityError:
        db.rollback()
        logger.info("%s for %s raced with a concurrent insert, retrying as update", action, email)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("%s failed for %s", action, email)
        raise StoreError(f"{action} failed: {exc}") from exc

    try:
        profile = db.get(UserProfile, email, populate_existing=True)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("%s reload failed for %s", action, email)
        raise StoreError(f"{action} failed: {exc}") from exc
    if profile is None:
        raise StoreError(f"{action} failed: profile vanished during retry")
    apply(profile, False)
    _commit(db, action, email)
    return profile, False


def upsert_login(db: Session, claims: dict[str, str], *, timestamp: int | None = None) -> UserProfile:
    """Create or merge the profile for a verified login.

    With ``login_resets_progress`` enabled every login writes the empty
    progress defaults, wiping points, badges, skills, field and coins of an
    existing profile.
    """
    email = claims["email"]
    last_login = timestamp or now_ms()

    def apply(profile: UserProfile, created: bool) -> None:
        profile.name = claims.get("name") or ""
        profile.picture = claims.get("picture") or ""
        profile.locale = claims.get("locale") or ""
        if created or settings.login_resets_progress:
            _reset_progress(profile)
        profile.last_login = last_login
        profile.updated_at = datetime.utcnow()

    profile, created = _merge_write(db, email, apply, "Login upsert")
    db.refresh(profile)
    logger.info("Login upsert for %s (created=%s)", email, created)
    return profile


def get_profile(db: Session, email: str) -> UserProfile:
    profile = _load(db, email)
    if not profile:
        raise ProfileNotFound("User not found")
    return profile


def update_onboarding(db: Session, email: str, name: str, field: str) -> UserProfile:
    def apply(profile: UserProfile, created: bool) -> None:
        # Onboarding an unseen email creates the document.
        if created:
            _reset_progress(profile)
        profile.name = name
        profile.field = field
        profile.updated_at = datetime.utcnow()

    profile, _ = _merge_write(db, email, apply, "Onboarding update")
    return profile


def record_certificate(db: Session, email: str, skill: str) -> int:
    """Apply a certificate claim to the stored profile and return points earned.

    This is a plain read-modify-write; concurrent claims for the same email
    can overwrite each other.
    """
    profile = get_profile(db, email)
    result = apply_skill_claim(profile.skills, profile.points, profile.badges, skill)
    profile.skills = result.skills
    profile.points = result.points
    profile.badges = result.badges
    profile.updated_at = datetime.utcnow()
    _commit(db, "Certificate update", email)
    logger.info(
        "Certificate %r recorded for %s: +%d points (total %d)",
        skill,
        email,
        result.points_earned,
        result.points,
    )
    return result.points_earned


def increment_learning_coins(
    db: Session,
    email: str,
    delta: int,
    *,
    timestamp: int | None = None,
) -> UserProfile:
    profile = get_profile(db, email)
    profile.learning_coins = (profile.learning_coins or 0) + delta
    profile.last_advice = timestamp or now_ms()
    profile.updated_at = datetime.utcnow()
    _commit(db, "Learning coin update", email)
    return profile
