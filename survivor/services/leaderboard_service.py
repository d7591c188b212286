"""
Leaderboard ranking

The standings are a pure projection of users and picks, recomputed on every
call. Survivors rank above eliminated participants; ties are broken by the
last matchweek survived, then points, then correct picks.
"""

import logging

from survivor.models import Matchweek, Pick, User
from survivor.schemas import UserStanding
from survivor.utils.results import LOSS, points_for

logger = logging.getLogger(__name__)

SCOPE_ALL = "all"
SCOPE_DETAILED = "detailed"


def last_week_alive(user, picks):
    """
    Week number a participant last survived.

    Args:
        user: The participant
        picks: The participant's picks, ordered by week number

    Returns:
        The week of the losing pick for eliminated users, otherwise the
        latest week picked (0 without picks)
    """
    weeks = [pick.week_number for pick in picks if pick.week_number is not None]
    latest = max(weeks) if weeks else 0

    if not user.is_eliminated:
        return latest

    for pick in picks:
        if pick.result == LOSS:
            return pick.week_number

    logger.warning(
        f"User {user.id} is eliminated without a losing pick, ranking by latest week {latest}"
    )
    return latest


def ranking_key(standing):
    return (
        standing.is_eliminated,
        -standing.last_week_survived,
        -standing.points,
        -standing.correct_selections,
    )


class LeaderboardService:
    """Builds the ordered standings"""

    def compute_ranking(self, scope=SCOPE_ALL):
        participants = User.get_participants()
        picks_by_user = self._picks_by_user()

        standings = []
        for user in participants:
            picks = picks_by_user.get(user.id, [])
            standing = UserStanding(
                id=user.id,
                name=user.name,
                email=user.email,
                is_eliminated=user.is_eliminated,
                total_selections=len(picks),
                correct_selections=sum(1 for p in picks if p.is_correct),
                losses=sum(1 for p in picks if p.result == LOSS),
                points=sum(points_for(p.result) for p in picks),
                last_week_survived=last_week_alive(user, picks),
                selections=[p.to_summary() for p in picks]
                if scope == SCOPE_DETAILED
                else None,
            )
            standings.append(standing)

        # sorted() is stable, so equal standings keep name order
        return sorted(standings, key=ranking_key)

    @staticmethod
    def _picks_by_user():
        picks = (
            Pick.query.join(Matchweek, Pick.matchweek_id == Matchweek.id)
            .order_by(Pick.user_id, Matchweek.week_number.asc())
            .all()
        )
        grouped = {}
        for pick in picks:
            grouped.setdefault(pick.user_id, []).append(pick)
        return grouped
