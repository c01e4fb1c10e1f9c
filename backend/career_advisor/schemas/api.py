from pydantic import BaseModel, ConfigDict
from typing import List, Optional


class StrictIn(BaseModel):
    model_config = ConfigDict(extra="forbid")


class LoginIn(StrictIn):
    token: Optional[str] = None


class LoginOut(BaseModel):
    email: str
    name: str
    picture: str
    locale: str
    field: str
    points: int
    badges: List[str]
    skills: List[str]


class ProfileOut(BaseModel):
    email: str
    name: str
    picture: str
    locale: str
    field: str
    points: int
    badges: List[str]
    skills: List[str]
    learningCoins: int
    lastLogin: Optional[int] = None
    lastAdvice: Optional[int] = None
    tier: str


class OnboardingIn(StrictIn):
    email: Optional[str] = None
    name: Optional[str] = None
    field: Optional[str] = None


class MessageOut(BaseModel):
    message: str


class CareerAdviceIn(StrictIn):
    input: Optional[str] = None
    skills: Optional[str] = None
    interests: Optional[str] = None
    email: Optional[str] = None
    language: Optional[str] = "en"


class CareerAdviceOut(BaseModel):
    adviceText: str


class RoadmapIn(StrictIn):
    field: Optional[str] = None


class RoadmapOut(BaseModel):
    roadmap: str


class CareerFieldsOut(BaseModel):
    fields: List[str]
