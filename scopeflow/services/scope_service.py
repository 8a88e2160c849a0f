"""
Scope lifecycle service.

Rules enforced here (ownership of the project is checked by the caller):
    - create_scope always inserts a NEW unlocked version; whether the previous
      latest scope is locked does not matter. Locking freezes a record, it
      never blocks new versions.
    - lock_scope is one-way and idempotent: locking a locked scope is a no-op.
    - update_scope edits content/price of an UNLOCKED scope in place; a locked
      scope raises ScopeLockedError (the model listener backs this up).
    - get_latest_scope ignores lock state: the highest version wins, draft or
      not. The approval engine prices invoices from it.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select

from scopeflow.core.exceptions import NotFoundError, ScopeLockedError
from scopeflow.models import db
from scopeflow.models.project import Project
from scopeflow.models.scope import Scope
from scopeflow.schemas import ScopeCreate, ScopeUpdate, parse
from scopeflow.services import versioning
from scopeflow.utils.db import commit_or_raise

logger = logging.getLogger(__name__)


def _require_project(project_id: str) -> Project:
    project = db.session.get(Project, project_id)
    if project is None:
        raise NotFoundError("Project", project_id)
    return project


def get_scope(project_id: str, scope_id: str) -> Scope:
    """Fetch a scope that belongs to ``project_id``.

    A scope of another project is indistinguishable from a missing one.
    """
    scope = db.session.execute(
        select(Scope).where(Scope.id == scope_id, Scope.project_id == project_id)
    ).scalar_one_or_none()
    if scope is None:
        raise NotFoundError("Scope", scope_id)
    return scope


def create_scope(project_id: str, payload) -> Scope:
    """Create the next scope version for a project.

    Args:
        project_id: Owning project.
        payload: ScopeCreate or raw dict ``{"content": str, "price": number?}``.
                 price defaults to 0.

    Raises:
        ValidationError: empty content, negative / non-numeric price.
        NotFoundError: project does not exist.
        VersionConflictError: concurrent creation collided.
    """
    data = parse(ScopeCreate, payload)
    _require_project(project_id)

    scope = versioning.create_versioned(
        Scope,
        project_id,
        content=data.content,
        price=data.price,
        locked=False,
    )
    logger.info(
        "Scope v%d created", scope.version,
        extra={"project_id": project_id, "scope_id": scope.id, "event_type": "scope_created"},
    )
    return scope


def lock_scope(project_id: str, scope_id: str) -> Scope:
    """Lock a scope. Already-locked scopes are returned unchanged."""
    scope = get_scope(project_id, scope_id)
    if scope.locked:
        return scope

    scope.locked = True
    scope.locked_at = datetime.now(timezone.utc)
    commit_or_raise("lock scope")
    logger.info(
        "Scope v%d locked", scope.version,
        extra={"project_id": project_id, "scope_id": scope_id, "event_type": "scope_locked"},
    )
    return scope


def update_scope(project_id: str, scope_id: str, payload) -> Scope:
    """Edit content and/or price of an unlocked scope in place.

    Raises:
        ScopeLockedError: the scope is locked.
        ValidationError: invalid field values.
    """
    data = parse(ScopeUpdate, payload)
    scope = get_scope(project_id, scope_id)
    if scope.locked:
        raise ScopeLockedError(scope_id=scope.id)

    if data.content is not None:
        scope.content = data.content
    if data.price is not None:
        scope.price = data.price
    commit_or_raise("update scope")
    logger.info(
        "Scope v%d updated", scope.version,
        extra={"project_id": project_id, "scope_id": scope_id, "event_type": "scope_updated"},
    )
    return scope


def get_latest_scope(project_id: str) -> Scope | None:
    """Return the highest-version scope of the project, or None."""
    return db.session.execute(
        select(Scope)
        .where(Scope.project_id == project_id)
        .order_by(Scope.version.desc())
        .limit(1)
    ).scalar_one_or_none()


def list_scopes(project_id: str) -> list[Scope]:
    """Return every scope of the project, newest version first."""
    return list(
        db.session.execute(
            select(Scope)
            .where(Scope.project_id == project_id)
            .order_by(Scope.version.desc())
        ).scalars().all()
    )
