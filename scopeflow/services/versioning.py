"""
Versioning primitive — project-scoped, gap-free version numbers.

Scopes and deliverables each carry their own sequence per project (separate
tables, separate unique constraints), starting at 1 and growing by 1.

Race handling:
    A plain read-max-then-insert lets two concurrent writers both pick N+1.
    ``create_versioned`` closes that gap in three layers:
      1. the parent Project row is locked (SELECT ... FOR UPDATE) for the
         duration of the transaction on backends that support it;
      2. the (project_id, version) unique constraint turns any remaining
         collision into an IntegrityError instead of a duplicate;
      3. the whole read+insert is retried a bounded number of times, then
         surfaces as VersionConflictError (CONFLICT) for the caller to retry.
"""

from __future__ import annotations

import logging

from flask import current_app
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from scopeflow.core.exceptions import InternalError, VersionConflictError
from scopeflow.models import db
from scopeflow.models.deliverable import Deliverable
from scopeflow.models.project import Project
from scopeflow.models.scope import Scope

logger = logging.getLogger(__name__)

DEFAULT_ATTEMPTS = 3

# model -> human-readable series kind
SERIES_KINDS = {
    Scope: "scope",
    Deliverable: "deliverable",
}


def next_version(model, project_id: str) -> int:
    """Return max(version) + 1 for the project's series, or 1 if empty."""
    if model not in SERIES_KINDS:
        raise ValueError(f"{model.__name__} is not a versioned series")
    current = db.session.execute(
        select(func.max(model.version)).where(model.project_id == project_id)
    ).scalar()
    return (current or 0) + 1


def lock_project_row(project_id: str) -> None:
    """Serialise version assignment per project. No-op on SQLite."""
    db.session.execute(
        select(Project.id).where(Project.id == project_id).with_for_update()
    ).first()


def create_versioned(model, project_id: str, *, attempts: int | None = None, **fields):
    """Insert a new record of ``model`` with the next version and commit.

    Args:
        model: Scope or Deliverable.
        project_id: Owning project (must exist).
        attempts: Max tries before giving up; defaults to the
                  VERSION_ASSIGN_ATTEMPTS config value.
        **fields: Remaining column values for the new record.

    Returns:
        The committed record.

    Raises:
        VersionConflictError: every attempt collided on the unique constraint.
        InternalError: any other storage failure.
    """
    kind = SERIES_KINDS.get(model)
    if kind is None:
        raise ValueError(f"{model.__name__} is not a versioned series")
    if attempts is None:
        attempts = current_app.config.get("VERSION_ASSIGN_ATTEMPTS", DEFAULT_ATTEMPTS)

    for attempt in range(1, attempts + 1):
        lock_project_row(project_id)
        version = next_version(model, project_id)
        record = model(project_id=project_id, version=version, **fields)
        db.session.add(record)
        try:
            db.session.commit()
        except IntegrityError as exc:
            db.session.rollback()
            logger.warning(
                "Version collision on %s v%d (attempt %d/%d): %s",
                kind, version, attempt, attempts, exc.orig,
                extra={"project_id": project_id, "event_type": "version_conflict"},
            )
            continue
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.exception("Database error assigning %s version", kind,
                             extra={"project_id": project_id})
            raise InternalError() from exc
        return record

    logger.error(
        "Gave up assigning %s version after %d attempts", kind, attempts,
        extra={"project_id": project_id, "event_type": "version_conflict"},
    )
    raise VersionConflictError(kind, project_id)
