from datetime import date

import pytest

from survivor import db
from survivor.errors import Conflict, InvalidState, NotFound
from survivor.models import Match, Matchweek
from survivor.models.match import STATUS_SCHEDULED
from survivor.schemas import MatchEntry
from survivor.services.admin_service import AdminService
from survivor.services.pick_service import PickService


@pytest.fixture
def service(ctx, clock):
    return AdminService(clock)


def _active_weeks():
    db.session.expire_all()
    return [mw.week_number for mw in Matchweek.query.filter_by(is_active=True)]


def test_create_matchweek(service):
    matchweek = service.create_matchweek(3, start_date=date(2024, 3, 8))

    assert matchweek.name == "Matchweek 3"
    assert matchweek.is_active is False
    assert matchweek.start_date == date(2024, 3, 8)


def test_duplicate_matchweek(service):
    service.create_matchweek(1, "Jornada 1")

    with pytest.raises(Conflict):
        service.create_matchweek(1, "Jornada 1 again")


def test_single_active_matchweek(service):
    weeks = [service.create_matchweek(n) for n in (1, 2, 3)]

    service.set_matchweek_active(weeks[0].id, True)
    service.set_matchweek_active(weeks[2].id, True)
    assert _active_weeks() == [3]

    service.set_matchweek_active(weeks[1].id, True)
    assert _active_weeks() == [2]


def test_deactivate_leaves_no_active_week(service):
    week = service.create_matchweek(1)
    service.set_matchweek_active(week.id, True)

    service.set_matchweek_active(week.id, False)

    assert _active_weeks() == []
    assert Matchweek.get_current() is None


def test_activate_unknown_matchweek(service):
    with pytest.raises(NotFound):
        service.set_matchweek_active(42, True)


def test_replace_matches(service, factory):
    teams = factory.teams(4)
    week = factory.matchweek(1)
    factory.match(week, teams[0], teams[3])

    created = service.replace_matches(
        week.id,
        [
            MatchEntry(home_team_id=teams[0].id, away_team_id=teams[1].id),
            MatchEntry(home_team_id=teams[2].id, away_team_id=teams[3].id),
        ],
    )

    assert created == 2
    matches = service.matches_for_week(1)
    assert [(m.home_team_id, m.away_team_id) for m in matches] == [
        (teams[0].id, teams[1].id),
        (teams[2].id, teams[3].id),
    ]
    assert all(m.status == STATUS_SCHEDULED and m.is_active for m in matches)


def test_replace_matches_unknown_team(service, factory):
    team = factory.team()
    week = factory.matchweek(1)

    with pytest.raises(NotFound):
        service.replace_matches(
            week.id, [MatchEntry(home_team_id=team.id, away_team_id=999)]
        )


def test_replace_matches_refused_once_picked(service, factory, clock):
    teams = factory.teams(2)
    week = factory.matchweek(1, is_active=True)
    factory.match(week, teams[0], teams[1])
    PickService(clock).submit_pick(factory.user("Ana"), teams[0].id, week.id)

    with pytest.raises(InvalidState):
        service.replace_matches(
            week.id, [MatchEntry(home_team_id=teams[1].id, away_team_id=teams[0].id)]
        )
    with pytest.raises(InvalidState):
        service.delete_matches_for_week(1)

    assert Match.query.filter_by(matchweek_id=week.id).count() == 1


def test_delete_matches_for_week(service, factory):
    teams = factory.teams(4)
    week = factory.matchweek(1)
    factory.match(week, teams[0], teams[1])
    factory.match(week, teams[2], teams[3])

    assert service.delete_matches_for_week(1) == 2
    assert service.matches_for_week(1) == []


def test_matches_for_unknown_week(service):
    with pytest.raises(NotFound):
        service.matches_for_week(9)


def test_toggle_matches(service, factory):
    teams = factory.teams(4)
    week = factory.matchweek(1)
    first = factory.match(week, teams[0], teams[1])
    second = factory.match(week, teams[2], teams[3])

    affected = service.set_matches_active([first.id, second.id], False)
    db.session.expire_all()

    assert affected == 2
    assert not db.session.get(Match, first.id).is_active
    assert db.session.get(Match, second.id).status == STATUS_SCHEDULED


def test_weekly_selections(service, factory, clock):
    teams = factory.teams(2)
    week = factory.matchweek(1, is_active=True)
    factory.match(week, teams[0], teams[1])
    picks = PickService(clock)
    picks.submit_pick(factory.user("Beto"), teams[1].id, week.id)
    picks.submit_pick(factory.user("Ana"), teams[0].id, week.id)

    rows = service.weekly_selections(1)

    assert [row["user_name"] for row in rows] == ["Ana", "Beto"]
    assert rows[0]["team"]["id"] == teams[0].id
    assert rows[0]["is_eliminated"] is False
    assert rows[1]["match"]["away_team_id"] == teams[1].id
