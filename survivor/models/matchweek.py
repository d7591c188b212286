from datetime import datetime, timezone

from survivor import db


class Matchweek(db.Model):
    __tablename__ = "matchweeks"

    id = db.Column(db.Integer, primary_key=True)
    week_number = db.Column(db.Integer, nullable=False, unique=True, index=True)
    name = db.Column(db.String(100), nullable=False)  # e.g., "Jornada 5"

    start_date = db.Column(db.Date)
    end_date = db.Column(db.Date)

    # Status
    is_active = db.Column(db.Boolean, nullable=False, default=False)

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
    matches = db.relationship(
        "Match", backref="matchweek", lazy="dynamic", cascade="all, delete-orphan"
    )

    __table_args__ = (db.Index("idx_matchweek_active", "is_active"),)

    def __repr__(self):
        return f"<Matchweek {self.week_number}>"

    @staticmethod
    def get_current():
        """Get the active matchweek (lowest week number if data is inconsistent)"""
        return (
            Matchweek.query.filter_by(is_active=True)
            .order_by(Matchweek.week_number.asc())
            .first()
        )

    @staticmethod
    def get_by_week_number(week_number):
        return Matchweek.query.filter_by(week_number=week_number).first()

    def to_dict(self):
        """Convert matchweek to dictionary for API responses"""
        return {
            "id": self.id,
            "name": self.name,
            "week_number": self.week_number,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "is_active": self.is_active,
        }
