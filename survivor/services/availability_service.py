"""
Team availability for the active matchweek
"""

import logging

from survivor import db
from survivor.errors import NotFound
from survivor.models import Match, Matchweek, PickHistory, Team

logger = logging.getLogger(__name__)


class AvailabilityService:
    """Works out which teams a participant may still back"""

    def available_teams(self, user):
        matchweek = Matchweek.get_current()
        if matchweek is None:
            raise NotFound("No active matchweek")

        # Teams consumed in completed matchweeks. This week's own pick stays
        # selectable so the user can re-pick it.
        used_team_ids = {
            team_id
            for (team_id,) in db.session.query(PickHistory.team_id)
            .join(Matchweek, PickHistory.matchweek_id == Matchweek.id)
            .filter(PickHistory.user_id == user.id, Matchweek.is_active.is_(False))
            .all()
        }

        suspended_team_ids = set()
        for match in Match.query.filter_by(
            matchweek_id=matchweek.id, is_active=False
        ).all():
            suspended_team_ids.update((match.home_team_id, match.away_team_id))

        teams = [
            team
            for team in Team.get_all_ordered()
            if team.id not in used_team_ids and team.id not in suspended_team_ids
        ]

        logger.debug(
            f"User {user.id} matchweek {matchweek.week_number}: {len(teams)} teams available, "
            f"{len(used_team_ids)} used, {len(suspended_team_ids)} suspended"
        )
        return teams
