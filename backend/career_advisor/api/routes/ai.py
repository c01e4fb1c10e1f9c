import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from career_advisor.api.deps import get_db
from career_advisor.schemas.api import CareerAdviceIn, CareerAdviceOut, RoadmapIn, RoadmapOut
from career_advisor.services.ai import ProviderError
from career_advisor.services.ai_orchestrator import (
    DEFAULT_LANGUAGE,
    compose_advice_input,
    generate_career_advice,
    generate_roadmap,
)
from career_advisor.services.profiles import ProfileNotFound, StoreError

logger = logging.getLogger(__name__)

router = APIRouter()


def _advice_input(payload: CareerAdviceIn) -> str:
    if payload.input and payload.input.strip():
        return payload.input
    if payload.skills or payload.interests:
        try:
            return compose_advice_input(payload.skills or "", payload.interests or "")
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
    raise HTTPException(status_code=400, detail="Input required")


@router.post("/career-advice", response_model=CareerAdviceOut)
def career_advice(payload: CareerAdviceIn, db: Session = Depends(get_db)):
    input_text = _advice_input(payload)
    if not payload.email:
        raise HTTPException(status_code=400, detail="Email required")
    try:
        advice_text = generate_career_advice(
            db,
            payload.email,
            input_text,
            payload.language or DEFAULT_LANGUAGE,
        )
    except ProfileNotFound as exc:
        raise HTTPException(status_code=404, detail="User not found") from exc
    except ProviderError as exc:
        logger.exception("Career advice failed for %s", payload.email)
        raise HTTPException(status_code=500, detail=str(exc) or "Failed to generate advice") from exc
    except StoreError as exc:
        logger.exception("Saving advice reward failed for %s", payload.email)
        raise HTTPException(status_code=500, detail="Failed to generate advice") from exc
    return {"adviceText": advice_text}


@router.post("/generate-roadmap", response_model=RoadmapOut)
def roadmap(payload: RoadmapIn):
    try:
        return {"roadmap": generate_roadmap(payload.field or "")}
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ProviderError as exc:
        logger.exception("Roadmap generation failed for field %r", payload.field)
        raise HTTPException(status_code=500, detail=str(exc) or "Failed to generate roadmap") from exc
