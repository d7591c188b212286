"""
Match result resolution

Entering a final score resolves every pick tied to the match and eliminates
the owners of losing picks. Re-entering a score recomputes the picks from
scratch; eliminations already applied are never reverted.
"""

import logging

from survivor import db
from survivor.errors import NotFound
from survivor.models import Match, Pick
from survivor.models.match import STATUS_FINISHED
from survivor.schemas import FinalizeResult
from survivor.utils.results import LOSS, classify_result, is_survivor_result
from survivor.utils.transactions import unit_of_work

logger = logging.getLogger(__name__)


class ResolutionService:
    """Applies final scores to picks and participants"""

    def __init__(self, clock):
        self.clock = clock

    def finalize_match(self, match_id, home_score, away_score):
        match = db.session.get(Match, match_id)
        if match is None:
            raise NotFound("Match not found", match_id=match_id)

        now = self.clock.now()
        eliminated = 0
        processed = 0

        with unit_of_work("finalize_match", match_id=match_id):
            match.home_score = home_score
            match.away_score = away_score
            match.status = STATUS_FINISHED
            match.updated_at = now

            picks = Pick.query.filter_by(match_id=match.id).all()
            logger.info(
                f"Resolving {len(picks)} picks for match {match.id} ({home_score}-{away_score})"
            )

            for pick in picks:
                result = classify_result(
                    home_score, away_score, pick.team_id, match.home_team_id
                )
                pick.result = result
                pick.is_correct = is_survivor_result(result)
                pick.updated_at = now
                processed += 1

                if result == LOSS:
                    if not pick.user.is_eliminated:
                        logger.info(
                            f"User {pick.user_id} eliminated by match {match.id} (team {pick.team_id})"
                        )
                    pick.user.eliminate(when=now)
                    eliminated += 1

        logger.info(
            f"Match {match_id} finalized: {processed} picks processed, {eliminated} eliminations"
        )
        return FinalizeResult(
            match_id=match_id, eliminated_count=eliminated, processed_count=processed
        )
