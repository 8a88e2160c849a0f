"""Transaction helpers for the service layer.

Services own their commits. ``commit_or_raise`` replaces the repeated
try/commit/rollback block and converts storage failures into domain errors:

    IntegrityError          → ConflictError   (409)
    ScopeflowError in flush → re-raised as-is (e.g. ScopeLockedError)
    other SQLAlchemyError   → InternalError   (500)

In every failure branch the session is rolled back first, so no partial
write survives.
"""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from scopeflow.core.exceptions import ConflictError, InternalError, ScopeflowError
from scopeflow.models import db

logger = logging.getLogger(__name__)


def commit_or_raise(context: str = "commit") -> None:
    try:
        db.session.commit()
    except ScopeflowError:
        db.session.rollback()
        raise
    except IntegrityError as exc:
        db.session.rollback()
        logger.warning("Integrity error during %s: %s", context, exc.orig)
        raise ConflictError("Duplicate or constraint violation") from exc
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("Database error during %s", context)
        raise InternalError() from exc
