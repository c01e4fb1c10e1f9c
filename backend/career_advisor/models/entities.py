from datetime import datetime
from sqlalchemy import Column, String, Text, Integer, BigInteger, DateTime, JSON
from sqlalchemy.dialects.postgresql import JSONB
from career_advisor.core.database import Base


JsonList = JSON().with_variant(JSONB, "postgresql")


class UserProfile(Base):
    __tablename__ = "user_profiles"

    email = Column(String(320), primary_key=True)
    name = Column(String(255), default="", nullable=False)
    picture = Column(Text, default="", nullable=False)
    locale = Column(String(35), default="", nullable=False)
    field = Column(String(160), default="", nullable=False)
    points = Column(Integer, default=0, nullable=False)
    badges = Column(JsonList, default=list, nullable=False)
    skills = Column(JsonList, default=list, nullable=False)
    learning_coins = Column(Integer, default=0, nullable=False)
    last_login = Column(BigInteger, nullable=True)
    last_advice = Column(BigInteger, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)
