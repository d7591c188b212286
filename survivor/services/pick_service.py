"""
Pick submission for the survivor pool

A participant backs one team per matchweek, may change their mind while the
matchweek is open, and can never reuse a team they consumed in another
matchweek.
"""

import logging

from survivor import db
from survivor.errors import Conflict, Forbidden, InvalidState, NotFound
from survivor.models import Match, Matchweek, Pick, PickHistory
from survivor.schemas import PickOutcome
from survivor.utils.results import PENDING
from survivor.utils.transactions import unit_of_work

logger = logging.getLogger(__name__)


class PickService:
    """Validates and records weekly picks"""

    def __init__(self, clock):
        self.clock = clock

    def submit_pick(self, user, team_id, matchweek_id):
        """
        Create or change the user's pick for a matchweek.

        All preconditions are checked before anything is written.

        Returns:
            PickOutcome with outcome "created" or "updated"
        """
        if user.is_admin:
            raise Forbidden("Administrators cannot take part in the competition")

        matchweek = db.session.get(Matchweek, matchweek_id)
        if matchweek is None:
            raise NotFound("Matchweek not found", matchweek_id=matchweek_id)

        if not matchweek.is_active:
            raise InvalidState(
                "The matchweek is not active. Changes are closed.",
                matchweek_id=matchweek_id,
            )

        used = PickHistory.used_elsewhere(user.id, team_id, matchweek_id)
        if used is not None:
            raise Conflict(
                "Team already used in a previous matchweek",
                team_id=team_id,
                used_in=used.matchweek_id,
            )

        match = Match.find_active_for_team(matchweek_id, team_id)
        if match is None:
            raise InvalidState(
                "The team is not playing this matchweek or its match is inactive",
                team_id=team_id,
                matchweek_id=matchweek_id,
            )

        now = self.clock.now()
        with unit_of_work(
            "submit_pick", user_id=user.id, team_id=team_id, matchweek_id=matchweek_id
        ):
            pick = Pick.get_for_user_week(user.id, matchweek_id)

            if pick is not None:
                old_team_id = pick.team_id
                pick.team_id = team_id
                pick.match_id = match.id
                pick.reset_result()
                pick.updated_at = now

                if old_team_id != team_id:
                    PickHistory.release(user.id, old_team_id, matchweek_id)
                    PickHistory.record(user.id, team_id, matchweek_id, when=now)
                outcome = "updated"
            else:
                pick = Pick(
                    user_id=user.id,
                    matchweek_id=matchweek_id,
                    team_id=team_id,
                    match_id=match.id,
                    result=PENDING,
                    created_at=now,
                    updated_at=now,
                )
                db.session.add(pick)
                PickHistory.record(user.id, team_id, matchweek_id, when=now)
                outcome = "created"

            db.session.flush()

        logger.info(
            f"Pick {outcome} for user {user.id}: team {team_id} in matchweek {matchweek.week_number}"
        )
        return PickOutcome(
            outcome=outcome, pick_id=pick.id, team_id=team_id, match_id=match.id
        )

    def list_picks(self, user):
        """The user's picks, latest matchweek first"""
        return (
            Pick.query.join(Matchweek, Pick.matchweek_id == Matchweek.id)
            .filter(Pick.user_id == user.id)
            .order_by(Matchweek.week_number.desc())
            .all()
        )
