from types import SimpleNamespace

import pytest

from survivor import db
from survivor.errors import NotFound
from survivor.models import Match, Pick, User
from survivor.models.match import STATUS_FINISHED
from survivor.services.pick_service import PickService
from survivor.services.resolution_service import ResolutionService
from survivor.utils.results import DRAW, LOSS, WIN


@pytest.fixture
def fixture_week(ctx, factory, clock):
    home, away, other_home, other_away = factory.teams(4)
    week = factory.matchweek(1, is_active=True)
    match = factory.match(week, home, away)
    other = factory.match(week, other_home, other_away)

    ana = factory.user("Ana")
    beto = factory.user("Beto")
    caro = factory.user("Caro")
    picks = PickService(clock)
    picks.submit_pick(ana, home.id, week.id)
    picks.submit_pick(beto, away.id, week.id)
    picks.submit_pick(caro, other_home.id, week.id)

    return SimpleNamespace(
        match=match, other=other, ana=ana, beto=beto, caro=caro, week=week
    )


@pytest.fixture
def service(clock):
    return ResolutionService(clock)


def _pick(user):
    return Pick.query.filter_by(user_id=user.id).one()


def test_home_win_eliminates_away_backers(fixture_week, service):
    result = service.finalize_match(fixture_week.match.id, 2, 1)

    assert result.processed_count == 2
    assert result.eliminated_count == 1

    assert _pick(fixture_week.ana).result == WIN
    assert _pick(fixture_week.ana).is_correct is True
    assert _pick(fixture_week.beto).result == LOSS
    assert _pick(fixture_week.beto).is_correct is False

    assert not db.session.get(User, fixture_week.ana.id).is_eliminated
    assert db.session.get(User, fixture_week.beto.id).is_eliminated


def test_other_matches_untouched(fixture_week, service):
    service.finalize_match(fixture_week.match.id, 0, 4)

    caro_pick = _pick(fixture_week.caro)
    assert caro_pick.result == "pending"
    assert caro_pick.is_correct is None
    assert not db.session.get(User, fixture_week.caro.id).is_eliminated


def test_draw_keeps_everyone_alive(fixture_week, service):
    result = service.finalize_match(fixture_week.match.id, 1, 1)

    assert result.eliminated_count == 0
    assert _pick(fixture_week.ana).result == DRAW
    assert _pick(fixture_week.beto).result == DRAW
    assert _pick(fixture_week.beto).is_correct is True
    assert User.query.filter_by(is_eliminated=True).count() == 0


def test_match_is_marked_finished(fixture_week, service):
    service.finalize_match(fixture_week.match.id, 3, 2)

    match = db.session.get(Match, fixture_week.match.id)
    assert match.status == STATUS_FINISHED
    assert (match.home_score, match.away_score) == (3, 2)


def test_refinalizing_is_idempotent(fixture_week, service):
    first = service.finalize_match(fixture_week.match.id, 2, 1)
    snapshot = [(p.id, p.result, p.is_correct) for p in Pick.query.order_by(Pick.id)]

    second = service.finalize_match(fixture_week.match.id, 2, 1)

    assert second == first
    assert [(p.id, p.result, p.is_correct) for p in Pick.query.order_by(Pick.id)] == snapshot
    assert User.query.filter_by(is_eliminated=True).count() == 1


def test_score_correction_never_revives(fixture_week, service):
    service.finalize_match(fixture_week.match.id, 2, 1)

    corrected = service.finalize_match(fixture_week.match.id, 1, 2)

    # Ana now loses too; Beto's pick becomes a win but Beto stays out
    assert corrected.eliminated_count == 1
    assert _pick(fixture_week.beto).result == WIN
    assert db.session.get(User, fixture_week.beto.id).is_eliminated
    assert db.session.get(User, fixture_week.ana.id).is_eliminated


def test_unknown_match(ctx, service):
    with pytest.raises(NotFound):
        service.finalize_match(12345, 1, 0)


def test_match_without_picks(fixture_week, service, factory):
    lonely = factory.match(fixture_week.week, *factory.teams(2))

    result = service.finalize_match(lonely.id, 0, 0)

    assert result.processed_count == 0
    assert result.eliminated_count == 0
