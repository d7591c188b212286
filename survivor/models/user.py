from datetime import datetime, timezone

from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from survivor import db

ROLE_USER = "user"
ROLE_SUPERADMIN = "superadmin"


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)

    # Competition status
    role = db.Column(db.String(20), nullable=False, default=ROLE_USER)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    is_eliminated = db.Column(db.Boolean, nullable=False, default=False)

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
    picks = db.relationship(
        "Pick", backref="user", lazy="dynamic", cascade="all, delete-orphan"
    )
    team_history = db.relationship(
        "PickHistory", backref="user", lazy="dynamic", cascade="all, delete-orphan"
    )

    __table_args__ = (
        db.CheckConstraint(
            f"role IN ('{ROLE_USER}', '{ROLE_SUPERADMIN}')", name="valid_user_role"
        ),
        db.Index("idx_user_role", "role"),
    )

    def __repr__(self):
        return f"<User {self.email}>"

    @property
    def is_admin(self):
        return self.role == ROLE_SUPERADMIN

    def set_password(self, password):
        """Set password hash"""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        """Check password against hash"""
        return check_password_hash(self.password_hash, password)

    def eliminate(self, when=None):
        """Mark the user as eliminated. There is no way back."""
        if not self.is_eliminated:
            self.is_eliminated = True
            if when is not None:
                self.updated_at = when

    @staticmethod
    def get_by_email(email):
        return User.query.filter_by(email=email.strip().lower()).first()

    @staticmethod
    def get_participants():
        """Competing users in stable display order"""
        return (
            User.query.filter_by(role=ROLE_USER)
            .order_by(User.name, User.id)
            .all()
        )

    def to_dict(self):
        """Convert user to dictionary for API responses"""
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "isEliminated": self.is_eliminated,
        }
