"""
Shared fixtures for the survivor pool tests

Every test gets a fresh application backed by an in-memory SQLite database
and a frozen clock. Service tests run inside the `ctx` app context; HTTP
tests build their data in a short-lived context and then talk to `client`.
"""

from datetime import datetime, timezone

import pytest

from survivor import create_app, db
from survivor.auth import generate_token
from survivor.models import Match, Matchweek, Team, User
from survivor.models.user import ROLE_SUPERADMIN, ROLE_USER
from survivor.utils.clock import FixedClock


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 3, 9, 18, 0, tzinfo=timezone.utc), "America/Mexico_City")


@pytest.fixture
def app(clock):
    app = create_app("testing", clock=clock)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


class Factory:
    """Creates and commits domain rows inside the current app context"""

    def __init__(self):
        self._teams = 0

    def user(self, name, email=None, password="secret123", role=ROLE_USER):
        user = User(
            email=email or f"{name.lower().replace(' ', '.')}@example.com",
            name=name,
            role=role,
        )
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user

    def admin(self, name="Admin"):
        return self.user(name, email="admin@example.com", role=ROLE_SUPERADMIN)

    def team(self, name=None, short_name=None, stadium=None):
        self._teams += 1
        team = Team(
            name=name or f"Team {self._teams}",
            short_name=short_name or f"T{self._teams}",
            stadium=stadium,
        )
        db.session.add(team)
        db.session.commit()
        return team

    def teams(self, count):
        return [self.team() for _ in range(count)]

    def matchweek(self, week_number, is_active=False):
        matchweek = Matchweek(
            week_number=week_number,
            name=f"Matchweek {week_number}",
            is_active=is_active,
        )
        db.session.add(matchweek)
        db.session.commit()
        return matchweek

    def match(self, matchweek, home, away, is_active=True):
        match = Match(
            matchweek_id=matchweek.id,
            home_team_id=home.id,
            away_team_id=away.id,
            is_active=is_active,
        )
        db.session.add(match)
        db.session.commit()
        return match


@pytest.fixture
def factory():
    return Factory()


@pytest.fixture
def auth_header():
    """Build an Authorization header for a user (needs an app context)"""

    def _header(user):
        return {"Authorization": f"Bearer {generate_token(user)}"}

    return _header
