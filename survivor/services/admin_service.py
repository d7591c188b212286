"""
Administrative operations: matchweek lifecycle and match scheduling
"""

import logging

from survivor import db
from survivor.errors import Conflict, InvalidState, NotFound
from survivor.models import Match, Matchweek, Pick, Team, User
from survivor.models.match import STATUS_SCHEDULED
from survivor.utils.transactions import unit_of_work

logger = logging.getLogger(__name__)


class AdminService:
    """Matchweek and match management for pool administrators"""

    def __init__(self, clock):
        self.clock = clock

    # Matchweeks

    def list_matchweeks(self):
        return Matchweek.query.order_by(Matchweek.week_number.asc()).all()

    def create_matchweek(self, week_number, name=None, start_date=None, end_date=None):
        if Matchweek.get_by_week_number(week_number) is not None:
            raise Conflict(
                f"Matchweek {week_number} already exists", week_number=week_number
            )

        with unit_of_work("create_matchweek", week_number=week_number):
            matchweek = Matchweek(
                week_number=week_number,
                name=name or f"Matchweek {week_number}",
                start_date=start_date,
                end_date=end_date,
                is_active=False,
            )
            db.session.add(matchweek)

        logger.info(f"Created matchweek {week_number}")
        return matchweek

    def set_matchweek_active(self, matchweek_id, is_active):
        """Activate a matchweek (deactivating every other) or close it"""
        matchweek = db.session.get(Matchweek, matchweek_id)
        if matchweek is None:
            raise NotFound("Matchweek not found", matchweek_id=matchweek_id)

        now = self.clock.now()
        with unit_of_work(
            "set_matchweek_active", matchweek_id=matchweek_id, is_active=is_active
        ):
            if is_active:
                Matchweek.query.filter(Matchweek.id != matchweek.id).update(
                    {"is_active": False, "updated_at": now}
                )
            matchweek.is_active = is_active
            matchweek.updated_at = now

        state = "activated" if is_active else "deactivated"
        logger.info(f"Matchweek {matchweek.week_number} {state}")
        return matchweek

    # Matches

    def list_matches(self):
        return (
            Match.query.join(Matchweek, Match.matchweek_id == Matchweek.id)
            .order_by(Matchweek.week_number.desc(), Match.match_date.asc(), Match.id.asc())
            .all()
        )

    def matches_for_week(self, week_number):
        matchweek = self._get_week(week_number)
        return Match.get_for_matchweek(matchweek.id)

    def replace_matches(self, matchweek_id, entries):
        """
        Replace the whole match list of a matchweek.

        Args:
            matchweek_id: Target matchweek
            entries: MatchEntry records (home_team_id, away_team_id, match_date)

        Returns:
            Number of matches created
        """
        matchweek = db.session.get(Matchweek, matchweek_id)
        if matchweek is None:
            raise NotFound("Matchweek not found", matchweek_id=matchweek_id)

        team_ids = {e.home_team_id for e in entries} | {e.away_team_id for e in entries}
        if team_ids:
            known = {
                team_id
                for (team_id,) in db.session.query(Team.id)
                .filter(Team.id.in_(team_ids))
                .all()
            }
            missing = sorted(team_ids - known)
            if missing:
                raise NotFound(f"Unknown teams: {missing}", team_ids=missing)

        self._ensure_no_picks(matchweek)

        now = self.clock.now()
        with unit_of_work("replace_matches", matchweek_id=matchweek_id):
            for match in Match.query.filter_by(matchweek_id=matchweek.id).all():
                db.session.delete(match)
            db.session.flush()

            for entry in entries:
                db.session.add(
                    Match(
                        matchweek_id=matchweek.id,
                        home_team_id=entry.home_team_id,
                        away_team_id=entry.away_team_id,
                        match_date=entry.match_date,
                        status=STATUS_SCHEDULED,
                        is_active=True,
                        created_at=now,
                        updated_at=now,
                    )
                )

        logger.info(
            f"Replaced matches of matchweek {matchweek.week_number}: {len(entries)} created"
        )
        return len(entries)

    def delete_matches_for_week(self, week_number):
        matchweek = self._get_week(week_number)
        self._ensure_no_picks(matchweek)

        with unit_of_work("delete_matches_for_week", week_number=week_number):
            deleted = Match.query.filter_by(matchweek_id=matchweek.id).delete(
                synchronize_session=False
            )

        logger.info(f"Deleted {deleted} matches of matchweek {week_number}")
        return deleted

    def set_matches_active(self, match_ids, is_active):
        """Suspend or restore matches without touching status or scores"""
        now = self.clock.now()
        with unit_of_work("set_matches_active", match_ids=sorted(match_ids)):
            affected = Match.query.filter(Match.id.in_(match_ids)).update(
                {"is_active": is_active, "updated_at": now},
                synchronize_session=False,
            )

        state = "activated" if is_active else "deactivated"
        logger.info(f"{affected} match(es) {state}")
        return affected

    # Reports

    def weekly_selections(self, week_number):
        """Every pick of a matchweek with participant and match context"""
        matchweek = self._get_week(week_number)
        picks = (
            Pick.query.join(User, Pick.user_id == User.id)
            .filter(Pick.matchweek_id == matchweek.id)
            .order_by(User.name.asc(), User.id.asc())
            .all()
        )

        rows = []
        for pick in picks:
            row = pick.to_dict()
            row["user_name"] = pick.user.name
            row["email"] = pick.user.email
            row["is_eliminated"] = pick.user.is_eliminated
            rows.append(row)
        return rows

    # Helpers

    @staticmethod
    def _get_week(week_number):
        matchweek = Matchweek.get_by_week_number(week_number)
        if matchweek is None:
            raise NotFound("Matchweek not found", week_number=week_number)
        return matchweek

    @staticmethod
    def _ensure_no_picks(matchweek):
        pick_count = Pick.query.filter_by(matchweek_id=matchweek.id).count()
        if pick_count:
            raise InvalidState(
                f"Matchweek {matchweek.week_number} already has {pick_count} picks; "
                "its matches can no longer be replaced",
                matchweek_id=matchweek.id,
            )
