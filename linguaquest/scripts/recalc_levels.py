"""
Recalculate stored levels of all users from their stored XP.
Run after changing LEVEL_XP_THRESHOLDS or the overall level weights:
    python -m linguaquest.scripts.recalc_levels

AICODE-NOTE: XP is never touched and levels are only raised
(max(stored, computed)), so the job can be re-run safely.
Each user is re-read and written under the same per-user lock and row
lock as progress recording, so a submission landing while the job runs
is never overwritten with older levels.
"""

import asyncio
import logging

from tortoise import Tortoise
from tortoise.transactions import in_transaction

from linguaquest.core.domain.level_rules import (
    calculate_overall_level,
    calculate_skill_levels,
)
from linguaquest.core.domain.skills import SKILLS
from linguaquest.core.use_cases.record_progress import user_locks
from linguaquest.database.config import TORTOISE_ORM
from linguaquest.storage import user_repo

logger = logging.getLogger(__name__)


async def recalculate_user_levels(user_id: int) -> bool:
    """Recompute one user's levels from the current row. Returns True if raised."""
    async with user_locks.get(user_id):
        async with in_transaction() as connection:
            user = await user_repo.get_user_for_update(user_id, connection)
            if not user:
                return False

            stored = user_repo.get_skill_levels(user)
            computed = calculate_skill_levels(user_repo.get_skill_xp(user))
            skill_levels = {skill: max(stored[skill], computed[skill]) for skill in SKILLS}
            overall = max(
                user.overall_level, calculate_overall_level(user.total_xp, skill_levels)
            )

            if skill_levels == stored and overall == user.overall_level:
                return False

            logger.info(
                f"User {user.id}: overall {user.overall_level} -> {overall}, "
                f"skills {[stored[s] for s in SKILLS]} -> {[skill_levels[s] for s in SKILLS]}"
            )
            user_repo.set_skill_levels(user, skill_levels)
            user.overall_level = overall
            await user_repo.save_levels(user, connection)
            return True


async def recalculate_levels() -> int:
    """Recompute levels for every user. Returns the number of users changed."""
    updated = 0
    for user_id in await user_repo.list_user_ids():
        if await recalculate_user_levels(user_id):
            updated += 1
    return updated


async def main() -> None:
    await Tortoise.init(config=TORTOISE_ORM)
    try:
        updated = await recalculate_levels()
        logger.info(f"Done: {updated} users updated")
    finally:
        await Tortoise.close_connections()


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    asyncio.run(main())
