"""
User Service — freelancer registration and password login.
"""

import logging
from datetime import timedelta

from flask import current_app
from sqlalchemy import func, select

from scopeflow.core.exceptions import ConflictError, NotFoundError, UnauthorizedError
from scopeflow.models import _utcnow, db
from scopeflow.models.auth import User
from scopeflow.schemas import LoginInput, RegisterInput, parse
from scopeflow.utils.crypto import hash_password, verify_password
from scopeflow.utils.db import commit_or_raise

logger = logging.getLogger(__name__)

DEFAULT_TRIAL_DAYS = 14


def get_user_by_email(email: str) -> User | None:
    return db.session.execute(
        select(User).where(func.lower(User.email) == email.lower())
    ).scalar_one_or_none()


def get_user(user_id: str) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return user


def register_user(payload) -> User:
    """Create a FREE account with a signup trial.

    Emails are stored lower-cased and must be unique.
    """
    data = parse(RegisterInput, payload)
    email = str(data.email).lower()
    if get_user_by_email(email) is not None:
        raise ConflictError("Email already registered")

    trial_days = current_app.config.get("TRIAL_DAYS", DEFAULT_TRIAL_DAYS)
    user = User(
        email=email,
        password_hash=hash_password(data.password),
        full_name=data.full_name,
        trial_ends_at=_utcnow() + timedelta(days=trial_days),
    )
    db.session.add(user)
    commit_or_raise("register user")
    logger.info("User registered", extra={"user_id": user.id, "event_type": "user_registered"})
    return user


def authenticate_user(payload) -> User:
    """Authenticate with email + password. Returns User on success."""
    data = parse(LoginInput, payload)
    user = get_user_by_email(str(data.email))
    if user is None or not verify_password(data.password, user.password_hash):
        logger.warning("Failed login attempt", extra={"event_type": "login_failed"})
        raise UnauthorizedError("Invalid email or password")
    return user
