import logging

from flask import jsonify, request
from flask_login import current_user, login_required

from survivor import limiter
from survivor.auth import authenticate, register_user
from survivor.routes.auth import bp
from survivor.schemas import LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)


@bp.route("/register", methods=["POST"])
@limiter.limit("10 per hour")
def register():
    """Create a participant account"""
    data = RegisterRequest.from_json(request.get_json(silent=True))
    user, token = register_user(data.email, data.password, data.name)
    return jsonify({"user": user.to_dict(), "token": token}), 201


@bp.route("/login", methods=["POST"])
@limiter.limit("20 per minute")
def login():
    """Exchange credentials for a bearer token"""
    data = LoginRequest.from_json(request.get_json(silent=True))
    user, token = authenticate(data.email, data.password)
    logger.info(f"User {user.id} logged in")
    return jsonify({"user": user.to_dict(), "token": token})


@bp.route("/me")
@login_required
def me():
    """The authenticated user"""
    return jsonify({"user": current_user.to_dict()})
