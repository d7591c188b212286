import logging

from flask import jsonify, request
from flask_login import current_user

from survivor import no_store
from survivor.auth import admin_required
from survivor.routes.admin import bp
from survivor.schemas import (
    BulkMatchesRequest,
    CreateMatchweekRequest,
    FinalizeMatchRequest,
    MatchweekActivationRequest,
    ToggleMatchesRequest,
)
from survivor.services.admin_service import AdminService
from survivor.services.resolution_service import ResolutionService
from survivor.utils.clock import get_clock

logger = logging.getLogger(__name__)


def _week_param(required=False):
    week = request.args.get("week", type=int)
    if week is None and not required:
        return 1
    return week


@bp.route("/matches")
@admin_required
def list_matches():
    """Every match of the season, latest matchweek first"""
    matches = AdminService(get_clock()).list_matches()
    return no_store(jsonify([match.to_dict() for match in matches]))


@bp.route("/matches", methods=["PUT"])
@admin_required
def finalize_match():
    """Record a final score and resolve the picks on that match"""
    data = FinalizeMatchRequest.from_json(request.get_json(silent=True))
    logger.info(
        f"Admin {current_user.id} finalizing match {data.match_id}: {data.home_score}-{data.away_score}"
    )
    clock = get_clock()
    result = ResolutionService(clock).finalize_match(
        data.match_id, data.home_score, data.away_score
    )
    response = jsonify(
        {
            "success": True,
            "message": f"Result updated. {result.processed_count} picks resolved, {result.eliminated_count} lost.",
            "eliminatedCount": result.eliminated_count,
            "processedCount": result.processed_count,
            "timestamp": clock.now().isoformat(),
        }
    )
    return no_store(response)


@bp.route("/matches/bulk", methods=["POST"])
@admin_required
def bulk_matches():
    """Replace the full match list of a matchweek"""
    data = BulkMatchesRequest.from_json(request.get_json(silent=True))
    created = AdminService(get_clock()).replace_matches(data.matchweek_id, data.matches)
    return jsonify(
        {
            "success": True,
            "created": created,
            "message": f"{created} matches created for the matchweek",
        }
    )


@bp.route("/matches/toggle-active", methods=["PUT"])
@admin_required
def toggle_matches():
    """Suspend or restore matches"""
    data = ToggleMatchesRequest.from_json(request.get_json(silent=True))
    affected = AdminService(get_clock()).set_matches_active(data.match_ids, data.is_active)
    action = "activated" if data.is_active else "deactivated"
    return jsonify(
        {
            "success": True,
            "affected": affected,
            "message": f"{affected} match(es) {action}",
        }
    )


@bp.route("/matches/by-week")
@admin_required
def matches_by_week():
    """Matches of one matchweek"""
    matches = AdminService(get_clock()).matches_for_week(_week_param())
    return jsonify([match.to_dict() for match in matches])


@bp.route("/matches/by-week", methods=["DELETE"])
@admin_required
def delete_matches_by_week():
    """Remove every match of one matchweek"""
    week = _week_param(required=True)
    if week is None:
        return jsonify({"error": "Week number required", "code": "validation"}), 400

    deleted = AdminService(get_clock()).delete_matches_for_week(week)
    return jsonify(
        {
            "success": True,
            "deleted": deleted,
            "message": f"Matches of matchweek {week} deleted",
        }
    )


@bp.route("/matchweeks")
@admin_required
def list_matchweeks():
    matchweeks = AdminService(get_clock()).list_matchweeks()
    return jsonify([matchweek.to_dict() for matchweek in matchweeks])


@bp.route("/matchweeks", methods=["POST"])
@admin_required
def create_matchweek():
    data = CreateMatchweekRequest.from_json(request.get_json(silent=True))
    matchweek = AdminService(get_clock()).create_matchweek(
        data.week_number, data.name, data.start_date, data.end_date
    )
    return jsonify(matchweek.to_dict()), 201


@bp.route("/matchweeks", methods=["PUT"])
@admin_required
def update_matchweek():
    """Open or close a matchweek; only one can be open at a time"""
    data = MatchweekActivationRequest.from_json(request.get_json(silent=True))
    matchweek = AdminService(get_clock()).set_matchweek_active(
        data.matchweek_id, data.is_active
    )
    return jsonify({"success": True, "matchweek": matchweek.to_dict()})


@bp.route("/weekly-selections")
@admin_required
def weekly_selections():
    """Every participant's pick for one matchweek"""
    rows = AdminService(get_clock()).weekly_selections(_week_param())
    return no_store(jsonify(rows))
