"""Project CRUD service with strict owner scoping.

A project that exists but belongs to another owner is reported exactly like
a missing one (NotFoundError), so owners cannot discover each other's ids.
"""

from __future__ import annotations

import logging

from flask import current_app
from sqlalchemy import func, select

from scopeflow.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from scopeflow.models import db
from scopeflow.models.auth import User
from scopeflow.models.deliverable import Deliverable
from scopeflow.models.invoice import Invoice
from scopeflow.models.project import STATUS_ACTIVE, STATUS_TRANSITIONS, Project
from scopeflow.schemas import ProjectCreate, ProjectStatusUpdate, parse
from scopeflow.services import approval_service, deliverable_service, scope_service
from scopeflow.services.read_models import ProjectDetailView, ProjectSummaryView
from scopeflow.utils.crypto import generate_access_token
from scopeflow.utils.db import commit_or_raise

logger = logging.getLogger(__name__)

DEFAULT_FREE_PLAN_PROJECT_LIMIT = 3


def get_owned_project(project_id: str, owner_id: str) -> Project:
    """Load a project the given owner may act on, else NotFoundError."""
    project = db.session.execute(
        select(Project).where(Project.id == project_id, Project.owner_id == owner_id)
    ).scalar_one_or_none()
    if project is None:
        raise NotFoundError("Project", project_id)
    return project


def _enforce_plan_limit(owner_id: str) -> None:
    """FREE owners past their trial may hold only a few projects."""
    user = db.session.get(User, owner_id, with_for_update=True)
    if user is None:
        raise NotFoundError("User", owner_id)
    if user.is_pro or user.trial_active():
        return

    limit = current_app.config.get("FREE_PLAN_PROJECT_LIMIT", DEFAULT_FREE_PLAN_PROJECT_LIMIT)
    count = db.session.execute(
        select(func.count(Project.id)).where(Project.owner_id == owner_id)
    ).scalar()
    if count >= limit:
        logger.info(
            "Free plan project limit reached",
            extra={"owner_id": owner_id, "event_type": "plan_limit_reached"},
        )
        raise ForbiddenError(
            f"Free Plan Limit Reached: the Free Plan allows {limit} projects; upgrade to Pro",
            details={"limit": limit, "plan": user.plan},
        )


def create_project(owner_id: str, payload) -> Project:
    """Create a project and its client access token.

    The token is generated once here and never rotated.

    Raises:
        ValidationError: bad name or client email.
        ForbiddenError: FREE plan owner at the project limit after the trial.
    """
    data = parse(ProjectCreate, payload)
    _enforce_plan_limit(owner_id)
    project = Project(
        owner_id=owner_id,
        name=data.name,
        client_email=str(data.client_email) if data.client_email else None,
        status=STATUS_ACTIVE,
        access_token=generate_access_token(),
    )
    db.session.add(project)
    commit_or_raise("create project")
    logger.info(
        "Project created",
        extra={"project_id": project.id, "owner_id": owner_id, "event_type": "project_created"},
    )
    return project


def list_projects(owner_id: str) -> list[ProjectSummaryView]:
    """List the owner's projects, most recently updated first."""
    projects = db.session.execute(
        select(Project)
        .where(Project.owner_id == owner_id)
        .order_by(Project.updated_at.desc(), Project.created_at.desc())
    ).scalars().all()
    if not projects:
        return []

    ids = [p.id for p in projects]
    deliverable_counts = dict(
        db.session.execute(
            select(Deliverable.project_id, func.count(Deliverable.id))
            .where(Deliverable.project_id.in_(ids))
            .group_by(Deliverable.project_id)
        ).all()
    )
    invoice_counts = dict(
        db.session.execute(
            select(Invoice.project_id, func.count(Invoice.id))
            .where(Invoice.project_id.in_(ids))
            .group_by(Invoice.project_id)
        ).all()
    )
    return [
        ProjectSummaryView(
            project=p,
            latest_scope=scope_service.get_latest_scope(p.id),
            deliverable_count=deliverable_counts.get(p.id, 0),
            invoice_count=invoice_counts.get(p.id, 0),
        )
        for p in projects
    ]


def get_project_detail(project_id: str, owner_id: str) -> ProjectDetailView:
    project = get_owned_project(project_id, owner_id)
    return ProjectDetailView(
        project=project,
        scopes=scope_service.list_scopes(project.id),
        deliverables=deliverable_service.list_deliverables(project.id),
        invoices=approval_service.list_invoices(project.id),
    )


def update_status(project_id: str, owner_id: str, payload) -> Project:
    """Move a project along ACTIVE → COMPLETED → ARCHIVED.

    Re-applying the current status is a no-op. Going backwards raises
    ConflictError.
    """
    data = parse(ProjectStatusUpdate, payload)
    project = get_owned_project(project_id, owner_id)
    target = data.status.value

    if target == project.status:
        return project
    if target not in STATUS_TRANSITIONS.get(project.status, frozenset()):
        raise ConflictError(
            f"Cannot change project status from {project.status} to {target}",
            details={"status": project.status, "requested": target},
        )

    previous = project.status
    project.status = target
    commit_or_raise("update project status")
    logger.info(
        "Project status %s -> %s", previous, target,
        extra={"project_id": project_id, "owner_id": owner_id, "event_type": "project_status"},
    )
    return project
