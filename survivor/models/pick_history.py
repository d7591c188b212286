from datetime import datetime, timezone

from survivor import db


class PickHistory(db.Model):
    """Which matchweek consumed each team a user has backed"""

    __tablename__ = "user_team_history"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=False)
    matchweek_id = db.Column(
        db.Integer, db.ForeignKey("matchweeks.id"), nullable=False
    )

    created_at = db.Column(
        db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    team = db.relationship("Team", foreign_keys=[team_id])
    matchweek = db.relationship("Matchweek", foreign_keys=[matchweek_id])

    __table_args__ = (
        db.UniqueConstraint("user_id", "team_id", name="unique_user_team_history"),
        db.Index("idx_history_user", "user_id"),
    )

    def __repr__(self):
        return f"<PickHistory user_id={self.user_id} team_id={self.team_id} matchweek_id={self.matchweek_id}>"

    @staticmethod
    def used_elsewhere(user_id, team_id, matchweek_id):
        """History row showing the team was consumed by a different matchweek"""
        return PickHistory.query.filter(
            PickHistory.user_id == user_id,
            PickHistory.team_id == team_id,
            PickHistory.matchweek_id != matchweek_id,
        ).first()

    @staticmethod
    def record(user_id, team_id, matchweek_id, when=None):
        """Upsert the (user, team) row so it points at the given matchweek"""
        entry = PickHistory.query.filter_by(user_id=user_id, team_id=team_id).first()
        if entry is None:
            entry = PickHistory(user_id=user_id, team_id=team_id, matchweek_id=matchweek_id)
            if when is not None:
                entry.created_at = when
            db.session.add(entry)
        else:
            entry.matchweek_id = matchweek_id
        if when is not None:
            entry.updated_at = when
        return entry

    @staticmethod
    def release(user_id, team_id, matchweek_id):
        """Forget a team the user backed in this matchweek but then changed"""
        return PickHistory.query.filter_by(
            user_id=user_id, team_id=team_id, matchweek_id=matchweek_id
        ).delete(synchronize_session="fetch")
