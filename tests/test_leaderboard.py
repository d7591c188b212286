import logging

import pytest

from survivor import db
from survivor.models import Pick
from survivor.schemas import UserStanding
from survivor.services.leaderboard_service import (
    SCOPE_ALL,
    SCOPE_DETAILED,
    LeaderboardService,
    ranking_key,
)
from survivor.utils.results import DRAW, LOSS, PENDING, WIN


def _standing(name, is_eliminated, last_week, points, correct=0):
    return UserStanding(
        id=1,
        name=name,
        email=f"{name.lower()}@example.com",
        is_eliminated=is_eliminated,
        total_selections=0,
        correct_selections=correct,
        losses=0,
        points=points,
        last_week_survived=last_week,
    )


def test_ranking_key_orders_survivors_first():
    a = _standing("A", False, 5, 9)
    b = _standing("B", False, 5, 6)
    c = _standing("C", True, 7, 30)

    assert [s.name for s in sorted([c, b, a], key=ranking_key)] == ["A", "B", "C"]


def test_ranking_key_tie_breaks():
    later = _standing("Later", False, 6, 0)
    more_correct = _standing("MoreCorrect", False, 4, 6, correct=3)
    fewer_correct = _standing("FewerCorrect", False, 4, 6, correct=2)

    ranked = sorted([fewer_correct, more_correct, later], key=ranking_key)

    assert [s.name for s in ranked] == ["Later", "MoreCorrect", "FewerCorrect"]


@pytest.fixture
def weeks(ctx, factory):
    home, away = factory.teams(2)
    schedule = []
    for number in range(1, 8):
        week = factory.matchweek(number)
        schedule.append((week, factory.match(week, home, away)))
    return schedule


def _record(user, weeks, results, eliminated=False):
    for (week, match), result in zip(weeks, results):
        db.session.add(
            Pick(
                user_id=user.id,
                matchweek_id=week.id,
                team_id=match.home_team_id,
                match_id=match.id,
                result=result,
                is_correct=None if result == PENDING else result in (WIN, DRAW),
            )
        )
    if eliminated:
        user.is_eliminated = True
    db.session.commit()


def test_compute_ranking(weeks, factory):
    # Created in reverse name order so the sort has to do the work
    c = factory.user("C")
    b = factory.user("B")
    a = factory.user("A")
    factory.admin()

    _record(a, weeks, [WIN, WIN, WIN, PENDING, PENDING])
    _record(b, weeks, [WIN, WIN, PENDING, PENDING, PENDING])
    _record(c, weeks, [WIN] * 6 + [LOSS], eliminated=True)

    standings = LeaderboardService().compute_ranking(SCOPE_ALL)

    assert [s.name for s in standings] == ["A", "B", "C"]
    first, second, third = standings
    assert (first.last_week_survived, first.points, first.correct_selections) == (5, 9, 3)
    assert (second.last_week_survived, second.points) == (5, 6)
    assert (third.last_week_survived, third.points, third.losses) == (7, 18, 1)
    assert third.total_selections == 7


def test_admins_are_not_ranked(ctx, factory):
    factory.admin()
    factory.user("Solo")

    standings = LeaderboardService().compute_ranking()

    assert [s.name for s in standings] == ["Solo"]


def test_ties_keep_name_order(ctx, factory):
    for name in ("Zoe", "Mia", "Leo"):
        factory.user(name)

    standings = LeaderboardService().compute_ranking()

    assert [s.name for s in standings] == ["Leo", "Mia", "Zoe"]
    assert all(s.last_week_survived == 0 for s in standings)


def test_detailed_scope_includes_selections(weeks, factory):
    user = factory.user("Ana")
    _record(user, weeks, [WIN, DRAW])

    detailed = LeaderboardService().compute_ranking(SCOPE_DETAILED)[0]
    summary = LeaderboardService().compute_ranking(SCOPE_ALL)[0]

    assert [s["week_number"] for s in detailed.selections] == [1, 2]
    assert [s["result"] for s in detailed.selections] == [WIN, DRAW]
    assert detailed.points == 4
    assert "selections" not in summary.to_dict()
    assert "selections" in detailed.to_dict()


def test_eliminated_without_loss_falls_back_to_latest_week(weeks, factory, caplog):
    user = factory.user("Ghost")
    _record(user, weeks, [WIN, WIN, WIN], eliminated=True)

    with caplog.at_level(logging.WARNING, logger="survivor.services.leaderboard_service"):
        standing = LeaderboardService().compute_ranking()[0]

    assert standing.is_eliminated
    assert standing.last_week_survived == 3
    assert "without a losing pick" in caplog.text
