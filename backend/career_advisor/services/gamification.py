"""Points and badge accounting for certificate submissions.

Everything in here is pure: callers load the profile, pass its current
state in, and persist whatever comes back.
"""
from dataclasses import dataclass

CODE_SKILLS = ("JavaScript", "Python", "Java", "C++", "React", "Node.js")
CODE_SKILL_POINTS = 10
OTHER_SKILL_POINTS = 5

BRONZE = "Bronze"
SILVER = "Silver"
GOLD = "Gold"
SILVER_THRESHOLD = 50
GOLD_THRESHOLD = 100


@dataclass(frozen=True)
class SkillClaimResult:
    skills: list[str]
    points_earned: int
    points: int
    badges: list[str]


def points_for_skill(skill: str) -> int:
    # Exact, case-sensitive match against the canonical programming skills.
    if skill in CODE_SKILLS:
        return CODE_SKILL_POINTS
    return OTHER_SKILL_POINTS


def next_badge(points: int, badges: list[str]) -> str | None:
    """Return the single badge earned at ``points``, if any.

    Only the first matching tier is considered, so a jump straight past a
    threshold does not backfill lower tiers in the same evaluation.
    """
    if points >= GOLD_THRESHOLD and GOLD not in badges:
        return GOLD
    elif points >= SILVER_THRESHOLD and SILVER not in badges:
        return SILVER
    elif BRONZE not in badges:
        return BRONZE
    return None


def apply_skill_claim(
    skills: list[str] | None,
    points: int | None,
    badges: list[str] | None,
    claimed_skill: str,
) -> SkillClaimResult:
    new_skills = list(skills or [])
    new_badges = list(badges or [])
    points_earned = points_for_skill(claimed_skill)

    # Re-claiming a known skill still earns points.
    if claimed_skill not in new_skills:
        new_skills.append(claimed_skill)
    new_points = (points or 0) + points_earned

    badge = next_badge(new_points, new_badges)
    if badge:
        new_badges.append(badge)

    return SkillClaimResult(
        skills=new_skills,
        points_earned=points_earned,
        points=new_points,
        badges=new_badges,
    )


def current_tier(points: int | None) -> str:
    points = points or 0
    if points >= GOLD_THRESHOLD:
        return GOLD
    if points >= SILVER_THRESHOLD:
        return SILVER
    return BRONZE
