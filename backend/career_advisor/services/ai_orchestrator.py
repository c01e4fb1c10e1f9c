from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from career_advisor.core.config import settings
from career_advisor.services.ai import generate_text
from career_advisor.services.profiles import get_profile, increment_learning_coins

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "en"

ADVICE_PROMPT_TEMPLATE = """
The student says: "{input}".
They have earned {learning_coins} Skill Coins so far.
Preferred language: {language}
Provide all responses in {language}.
Sections:
1. **Personalized Career Roadmaps:** Suggest 3 unique career paths with required skills and market relevance.
2. **Skill Gap Radar:** Show mastered, emerging, and missing skills aligned to market demands.
3. **Gamified Learning:** Recommend 3 tasks/challenges to earn Skill Coins, badges, and leaderboard ranks.
4. **Future-Focused Guidance:** List 2 emerging jobs of the future and how to start preparing now.
5. **Multi-Language Support:** Mention guidance in multiple Indian languages.
6. **Dynamic AI Adaptation:** Advise how students can update skills/interests to always get fresh recommendations.
Add 2 short motivational tips. Use bullet points, bold section titles, and plain text. If relevant, add clickable resource URLs in markdown.
No JSON, only markdown text.
"""

ROADMAP_PROMPT_TEMPLATE = """
Create a detailed personalized roadmap for mastering skills in the field of {field}.
Include milestones, learning steps, recommended free resources, and certifications.
Use bullet points, bold headings, and provide clickable markdown URLs if relevant.
No JSON, only markdown text.
"""


def compose_advice_input(skills: str, interests: str) -> str:
    skills = (skills or "").strip()
    interests = (interests or "").strip()
    if not skills or not interests:
        raise ValueError("Please enter both skills and interests")
    return f"Skills: {skills}, Interests: {interests}"


def build_advice_prompt(input_text: str, learning_coins: int, language: str = DEFAULT_LANGUAGE) -> str:
    return ADVICE_PROMPT_TEMPLATE.format(
        input=input_text,
        learning_coins=learning_coins,
        language=language or DEFAULT_LANGUAGE,
    )


def build_roadmap_prompt(field: str) -> str:
    return ROADMAP_PROMPT_TEMPLATE.format(field=field)


def generate_career_advice(
    db: Session,
    email: str,
    input_text: str,
    language: str = DEFAULT_LANGUAGE,
) -> str:
    """Ask the provider for career advice and reward the student with coins.

    Coins and ``lastAdvice`` are only written after the provider answered,
    so a failed call leaves the profile untouched.
    """
    if not input_text or not input_text.strip():
        raise ValueError("Input required")
    profile = get_profile(db, email)
    prompt = build_advice_prompt(input_text, profile.learning_coins or 0, language)

    advice_text = generate_text(prompt)

    increment_learning_coins(db, email, settings.advice_coin_reward)
    logger.info("Career advice generated for %s (%d chars)", email, len(advice_text))
    return advice_text


def generate_advice(
    db: Session,
    email: str,
    skills: str,
    interests: str,
    language: str = DEFAULT_LANGUAGE,
) -> str:
    return generate_career_advice(db, email, compose_advice_input(skills, interests), language)


def generate_roadmap(field: str) -> str:
    field = (field or "").strip()
    if not field:
        raise ValueError("Field is required")
    return generate_text(build_roadmap_prompt(field))
