"""
Bearer token authentication

Tokens are HS256 JWTs carrying the user id and role. Flask-Login resolves
the current user from the Authorization header on every request.
"""

import logging
from datetime import timedelta
from functools import wraps

import jwt
from flask import current_app
from flask_login import current_user, login_required

from survivor import db, login_manager
from survivor.errors import Conflict, Forbidden, Unauthorized
from survivor.models import User
from survivor.utils.clock import get_clock
from survivor.utils.transactions import unit_of_work

logger = logging.getLogger(__name__)


def generate_token(user):
    """Issue a signed token for a user"""
    issued_at = get_clock().utcnow()
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role,
        "iat": issued_at,
        "exp": issued_at + timedelta(hours=current_app.config["JWT_EXPIRATION_HOURS"]),
    }
    return jwt.encode(
        payload,
        current_app.config["JWT_SECRET_KEY"],
        algorithm=current_app.config["JWT_ALGORITHM"],
    )


def decode_token(token):
    """Decode a token, returning None when it is invalid or expired"""
    try:
        payload = jwt.decode(
            token,
            current_app.config["JWT_SECRET_KEY"],
            algorithms=[current_app.config["JWT_ALGORITHM"]],
            # Expiry is checked against the application clock below
            options={"require": ["sub", "exp"], "verify_exp": False, "verify_iat": False},
        )
    except jwt.InvalidTokenError:
        logger.debug("Rejected invalid token")
        return None

    if payload["exp"] <= get_clock().utcnow().timestamp():
        logger.debug("Rejected expired token")
        return None
    return payload


def _bearer_token(request):
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    return auth_header[len("Bearer "):].strip() or None


@login_manager.request_loader
def load_user_from_request(request):
    token = _bearer_token(request)
    if not token:
        return None

    payload = decode_token(token)
    if not payload:
        return None

    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        return None

    user = db.session.get(User, user_id)
    if user is None or not user.is_active:
        return None
    return user


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))


@login_manager.unauthorized_handler
def unauthorized():
    raise Unauthorized("Valid bearer token required")


def admin_required(f):
    """Restrict a view to the pool administrators"""

    @wraps(f)
    @login_required
    def decorated_function(*args, **kwargs):
        if not current_user.is_admin:
            raise Forbidden("Administrator access required")
        return f(*args, **kwargs)

    return decorated_function


def register_user(email, password, name):
    """Create a participant account and return it with a fresh token"""
    if User.get_by_email(email):
        raise Conflict("Email is already registered")

    with unit_of_work("register_user", email=email):
        user = User(email=email, name=name)
        user.set_password(password)
        db.session.add(user)

    logger.info(f"Registered user {user.id} ({user.email})")
    return user, generate_token(user)


def authenticate(email, password):
    """Check credentials and return the user with a fresh token"""
    user = User.get_by_email(email)
    if user is None or not user.check_password(password):
        raise Unauthorized("Invalid credentials")

    if not user.is_active:
        raise Unauthorized("Account deactivated")

    return user, generate_token(user)
