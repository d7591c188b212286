from datetime import datetime, timezone

from survivor import db

STATUS_SCHEDULED = "scheduled"
STATUS_LIVE = "live"
STATUS_FINISHED = "finished"


class Match(db.Model):
    __tablename__ = "matches"

    id = db.Column(db.Integer, primary_key=True)
    matchweek_id = db.Column(
        db.Integer, db.ForeignKey("matchweeks.id"), nullable=False
    )

    # Teams
    home_team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=False)
    away_team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=False)

    # Match timing
    match_date = db.Column(db.DateTime(timezone=True))

    # Scores
    home_score = db.Column(db.Integer)
    away_score = db.Column(db.Integer)

    # Match status
    status = db.Column(db.String(20), nullable=False, default=STATUS_SCHEDULED)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

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
    picks = db.relationship("Pick", backref="match", lazy="dynamic")

    __table_args__ = (
        db.Index("idx_match_matchweek", "matchweek_id"),
        db.CheckConstraint("home_team_id != away_team_id", name="different_teams"),
        db.CheckConstraint(
            f"status IN ('{STATUS_SCHEDULED}', '{STATUS_LIVE}', '{STATUS_FINISHED}')",
            name="valid_match_status",
        ),
    )

    def __repr__(self):
        return f'<Match {self.home_team.short_name if self.home_team else "TBD"} vs {self.away_team.short_name if self.away_team else "TBD"}>'

    @property
    def is_finished(self):
        return self.status == STATUS_FINISHED

    @staticmethod
    def find_active_for_team(matchweek_id, team_id):
        """Active match of a matchweek featuring a team, if any"""
        return Match.query.filter(
            Match.matchweek_id == matchweek_id,
            db.or_(Match.home_team_id == team_id, Match.away_team_id == team_id),
            Match.is_active.is_(True),
        ).first()

    @staticmethod
    def get_for_matchweek(matchweek_id):
        return (
            Match.query.filter_by(matchweek_id=matchweek_id)
            .order_by(Match.match_date.asc(), Match.id.asc())
            .all()
        )

    def to_dict(self):
        """Convert match to dictionary for API responses"""
        return {
            "id": self.id,
            "matchweek_id": self.matchweek_id,
            "week_number": self.matchweek.week_number if self.matchweek else None,
            "home_team": self.home_team.to_dict() if self.home_team else None,
            "away_team": self.away_team.to_dict() if self.away_team else None,
            "match_date": self.match_date.isoformat() if self.match_date else None,
            "stadium": self.home_team.stadium if self.home_team else None,
            "home_score": self.home_score,
            "away_score": self.away_score,
            "status": self.status,
            "is_finished": self.is_finished,
            "is_active": self.is_active,
        }
