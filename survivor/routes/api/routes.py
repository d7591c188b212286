from flask import jsonify, request
from flask_login import current_user, login_required

from survivor import no_store
from survivor.errors import NotFound
from survivor.models import Match, Matchweek, Team
from survivor.routes.api import bp
from survivor.schemas import SubmitPickRequest
from survivor.services.availability_service import AvailabilityService
from survivor.services.leaderboard_service import (
    SCOPE_ALL,
    SCOPE_DETAILED,
    LeaderboardService,
)
from survivor.services.pick_service import PickService
from survivor.utils.cache_utils import TEAMS_PREFIX, cached_route
from survivor.utils.clock import get_clock


@bp.route("/selections", methods=["POST"])
@login_required
def submit_selection():
    """Create or change the caller's pick for a matchweek"""
    data = SubmitPickRequest.from_json(request.get_json(silent=True))
    outcome = PickService(get_clock()).submit_pick(
        current_user, data.team_id, data.matchweek_id
    )
    message = "Selection created" if outcome.created else "Selection updated"
    response = jsonify({"success": True, "message": message, **outcome.model_dump()})
    return no_store(response), 201 if outcome.created else 200


@bp.route("/selections")
@login_required
def list_selections():
    """The caller's picks, latest matchweek first"""
    picks = PickService(get_clock()).list_picks(current_user)
    return no_store(jsonify([pick.to_dict() for pick in picks]))


@bp.route("/teams/available")
@login_required
def available_teams():
    """Teams the caller may still pick in the active matchweek"""
    teams = AvailabilityService().available_teams(current_user)
    return no_store(jsonify([team.to_dict() for team in teams]))


@bp.route("/teams")
@cached_route(timeout=3600, key_prefix=TEAMS_PREFIX)
def teams():
    """All teams of the league"""
    return {"teams": [team.to_dict() for team in Team.get_all_ordered()]}


@bp.route("/matchweeks/current")
def current_matchweek():
    """The active matchweek"""
    matchweek = Matchweek.get_current()
    if matchweek is None:
        raise NotFound("No active matchweek")
    return jsonify(matchweek.to_dict())


@bp.route("/matches/current-week")
def current_week_matches():
    """The active matchweek and its matches"""
    matchweek = Matchweek.get_current()
    if matchweek is None:
        return jsonify(
            {"matchweek": None, "matches": [], "error": "No active matchweek"}
        )

    matches = Match.get_for_matchweek(matchweek.id)
    return jsonify(
        {
            "matchweek": matchweek.to_dict(),
            "matches": [match.to_dict() for match in matches],
        }
    )


@bp.route("/leaderboard")
def leaderboard():
    """Standings without per-pick detail"""
    standings = LeaderboardService().compute_ranking(SCOPE_ALL)
    response = jsonify(
        {
            "data": [standing.to_dict() for standing in standings],
            "count": len(standings),
            "timestamp": get_clock().now().isoformat(),
        }
    )
    return no_store(response)


@bp.route("/leaderboard-detailed")
def leaderboard_detailed():
    """Standings with every participant's picks"""
    standings = LeaderboardService().compute_ranking(SCOPE_DETAILED)
    return no_store(jsonify([standing.to_dict() for standing in standings]))
