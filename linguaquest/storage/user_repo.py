"""
User Repository - plain data access for the User model.

AICODE-NOTE: The repository holds data access only, NO business logic.
XP / level / streak rules live in core/domain/.
apply_progress() is the single write path for progress fields.
"""

from collections.abc import Mapping
from datetime import date
from typing import Optional

from tortoise.backends.base.client import BaseDBAsyncClient

from linguaquest.core.domain.skills import SKILLS, Skill
from linguaquest.database.models import User


async def get_user(user_id: int) -> Optional[User]:
    """Get a user by id."""
    return await User.get_or_none(id=user_id)


async def get_user_for_update(
    user_id: int, connection: BaseDBAsyncClient
) -> Optional[User]:
    """
    Load a user inside a transaction, locking the row.

    AICODE-NOTE: SQLite has no SELECT ... FOR UPDATE; it serialises
    writers at the database level instead.
    """
    query = User.filter(id=user_id)
    if connection.capabilities.dialect != "sqlite":
        query = query.select_for_update()
    return await query.using_db(connection).first()


async def get_or_create_user(user_id: int, email: str, name: str | None) -> User:
    """Get a user or register it on first sight."""
    user, _ = await User.get_or_create(
        id=user_id, defaults={"email": email, "name": name}
    )
    return user


async def list_user_ids() -> list[int]:
    return await User.all().order_by("id").values_list("id", flat=True)


def get_skill_xp(user: User) -> dict[Skill, int]:
    """Per-skill XP totals of a user."""
    return {skill: getattr(user, f"{skill.value}_xp") for skill in SKILLS}


def get_skill_levels(user: User) -> dict[Skill, int]:
    """Per-skill levels of a user."""
    return {skill: getattr(user, f"{skill.value}_level") for skill in SKILLS}


def set_skill_levels(user: User, skill_levels: Mapping[Skill, int]) -> None:
    for skill, level in skill_levels.items():
        setattr(user, f"{skill.value}_level", level)


async def apply_progress(
    user: User,
    *,
    total_xp: int,
    overall_level: int,
    skill_xp: Mapping[Skill, int],
    skill_levels: Mapping[Skill, int],
    current_streak: int,
    longest_streak: int,
    last_active_date: date,
    connection: BaseDBAsyncClient,
) -> User:
    """Write the new progress state of a user."""
    user.total_xp = total_xp
    user.overall_level = overall_level
    for skill, xp in skill_xp.items():
        setattr(user, f"{skill.value}_xp", xp)
    set_skill_levels(user, skill_levels)
    user.current_streak = current_streak
    user.longest_streak = longest_streak
    user.last_active_date = last_active_date
    await user.save(using_db=connection)
    return user


async def save_levels(user: User, connection: BaseDBAsyncClient) -> User:
    """Write the level columns only; XP and streak columns are left alone."""
    await user.save(
        update_fields=["overall_level", *(f"{s.value}_level" for s in SKILLS)],
        using_db=connection,
    )
    return user
