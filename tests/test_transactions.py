import pytest
from sqlalchemy.exc import OperationalError

from survivor import db
from survivor.errors import Conflict, Internal, InvalidState
from survivor.models import Pick, PickHistory
from survivor.services.pick_service import PickService
from survivor.utils.transactions import unit_of_work


@pytest.fixture
def season(ctx, factory):
    teams = factory.teams(4)
    week = factory.matchweek(1, is_active=True)
    factory.match(week, teams[0], teams[1])
    factory.match(week, teams[2], teams[3])
    return teams, week, factory.user("Ana")


def _broken_history(monkeypatch):
    def record(user_id, team_id, matchweek_id, when=None):
        raise OperationalError("INSERT INTO user_team_history", {}, Exception("disk I/O error"))

    monkeypatch.setattr(PickHistory, "record", staticmethod(record))


def test_failed_history_write_rolls_back_new_pick(season, clock, monkeypatch):
    teams, week, user = season
    _broken_history(monkeypatch)

    with pytest.raises(Internal):
        PickService(clock).submit_pick(user, teams[0].id, week.id)

    assert Pick.query.count() == 0
    assert PickHistory.query.count() == 0


def test_failed_history_write_keeps_previous_pick(season, clock, monkeypatch):
    teams, week, user = season
    service = PickService(clock)
    service.submit_pick(user, teams[0].id, week.id)
    _broken_history(monkeypatch)

    with pytest.raises(Internal):
        service.submit_pick(user, teams[2].id, week.id)

    pick = Pick.query.one()
    assert pick.team_id == teams[0].id
    assert [(h.team_id, h.matchweek_id) for h in PickHistory.query.all()] == [
        (teams[0].id, week.id)
    ]


def test_internal_error_hides_details():
    error = Internal("disk I/O error", operation="submit_pick")

    assert error.to_dict() == {"error": "Internal server error", "code": "internal"}


def test_duplicate_pick_becomes_conflict(season, clock):
    teams, week, user = season
    outcome = PickService(clock).submit_pick(user, teams[0].id, week.id)
    match_id = db.session.get(Pick, outcome.pick_id).match_id

    with pytest.raises(Conflict) as excinfo:
        with unit_of_work("duplicate_pick", user_id=user.id):
            db.session.add(
                Pick(
                    user_id=user.id,
                    matchweek_id=week.id,
                    team_id=teams[1].id,
                    match_id=match_id,
                )
            )

    assert excinfo.value.to_dict()["code"] == "conflict"
    assert Pick.query.count() == 1


def test_pool_error_rolls_back_and_propagates(season):
    teams, week, user = season

    with pytest.raises(InvalidState):
        with unit_of_work("rename_team"):
            teams[0].name = "Renamed"
            db.session.flush()
            raise InvalidState("stop")

    db.session.expire_all()
    assert teams[0].name != "Renamed"
