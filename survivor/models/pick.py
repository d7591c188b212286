from datetime import datetime, timezone

from survivor import db
from survivor.utils.results import PENDING, RESULTS


class Pick(db.Model):
    __tablename__ = "user_selections"

    id = db.Column(db.Integer, primary_key=True)

    # Pick identification
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    matchweek_id = db.Column(
        db.Integer, db.ForeignKey("matchweeks.id"), nullable=False
    )

    # Pick details
    team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=False)
    match_id = db.Column(db.Integer, db.ForeignKey("matches.id"), nullable=False)

    # Results (calculated after match completion)
    result = db.Column(db.String(10), nullable=False, default=PENDING)
    is_correct = db.Column(db.Boolean)

    # Timestamps
    created_at = db.Column(
        db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    team = db.relationship("Team", foreign_keys=[team_id], lazy="joined")
    matchweek = db.relationship("Matchweek", foreign_keys=[matchweek_id], lazy="joined")

    # Constraints and indexes
    __table_args__ = (
        db.UniqueConstraint("user_id", "matchweek_id", name="unique_user_matchweek_pick"),
        db.CheckConstraint(
            "result IN ({})".format(", ".join(f"'{r}'" for r in RESULTS)),
            name="valid_pick_result",
        ),
        db.Index("idx_pick_match", "match_id"),
        db.Index("idx_pick_user", "user_id"),
    )

    def __repr__(self):
        return f'<Pick user_id={self.user_id} matchweek_id={self.matchweek_id} team={self.team.short_name if self.team else "TBD"}>'

    @property
    def week_number(self):
        return self.matchweek.week_number if self.matchweek else None

    def reset_result(self):
        """Discard any provisional result after a change of mind"""
        self.result = PENDING
        self.is_correct = None

    @staticmethod
    def get_for_user_week(user_id, matchweek_id):
        return Pick.query.filter_by(user_id=user_id, matchweek_id=matchweek_id).first()

    def to_summary(self):
        """Compact form used by the detailed leaderboard"""
        return {
            "week_number": self.week_number,
            "team_id": self.team_id,
            "team_name": self.team.name if self.team else None,
            "team_short_name": self.team.short_name if self.team else None,
            "team_logo": self.team.logo_url if self.team else None,
            "result": self.result,
            "is_correct": self.is_correct,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def to_dict(self):
        """Convert pick to dictionary for API responses"""
        match = self.match
        return {
            "id": self.id,
            "user_id": self.user_id,
            "matchweek_id": self.matchweek_id,
            "week_number": self.week_number,
            "matchweek_active": self.matchweek.is_active if self.matchweek else None,
            "team": self.team.to_dict() if self.team else None,
            "match_id": self.match_id,
            "result": self.result,
            "is_correct": self.is_correct,
            "match": {
                "home_team_id": match.home_team_id,
                "away_team_id": match.away_team_id,
                "home_team_name": match.home_team.name if match.home_team else None,
                "away_team_name": match.away_team.name if match.away_team else None,
                "home_score": match.home_score,
                "away_score": match.away_score,
                "status": match.status,
            }
            if match
            else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
