from datetime import datetime, timezone

from survivor import db


class Team(db.Model):
    __tablename__ = "teams"

    id = db.Column(db.Integer, primary_key=True)

    # Team identification
    name = db.Column(db.String(100), nullable=False, unique=True)
    short_name = db.Column(db.String(10), nullable=False, index=True)

    # Visual elements
    logo_url = db.Column(db.String(500))
    stadium = db.Column(db.String(150))

    created_at = db.Column(
        db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    # Define bidirectional relationships with Match model
    home_matches = db.relationship(
        "Match",
        foreign_keys="Match.home_team_id",
        backref=db.backref("home_team", lazy="joined"),
        lazy="dynamic",
    )
    away_matches = db.relationship(
        "Match",
        foreign_keys="Match.away_team_id",
        backref=db.backref("away_team", lazy="joined"),
        lazy="dynamic",
    )

    def __repr__(self):
        return f"<Team {self.short_name}>"

    @staticmethod
    def get_all_ordered():
        """All teams in display order"""
        return Team.query.order_by(Team.name.asc()).all()

    def to_dict(self):
        """Convert team to dictionary for API responses"""
        return {
            "id": self.id,
            "name": self.name,
            "short_name": self.short_name,
            "logo_url": self.logo_url,
            "stadium": self.stadium,
        }
