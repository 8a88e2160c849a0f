"""
Deliverable lifecycle service.

Deliverables get their own per-project version sequence, independent of
scope versions and of scope lock state. Listing returns newest first; the
client portal relies on that to show the latest upload prominently.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from scopeflow.core.exceptions import NotFoundError
from scopeflow.models import db
from scopeflow.models.deliverable import Deliverable
from scopeflow.models.project import Project
from scopeflow.schemas import DeliverableCreate, parse
from scopeflow.services import versioning

logger = logging.getLogger(__name__)


def create_deliverable(project_id: str, payload) -> Deliverable:
    """Upload the next deliverable version for a project.

    Args:
        project_id: Owning project.
        payload: DeliverableCreate or raw dict ``{"file_url": url, "notes": str?}``.

    Raises:
        ValidationError: missing or malformed file_url.
        NotFoundError: project does not exist.
        VersionConflictError: concurrent creation collided.
    """
    data = parse(DeliverableCreate, payload)
    if db.session.get(Project, project_id) is None:
        raise NotFoundError("Project", project_id)

    deliverable = versioning.create_versioned(
        Deliverable,
        project_id,
        file_url=data.file_url,
        notes=data.notes,
    )
    logger.info(
        "Deliverable v%d created", deliverable.version,
        extra={
            "project_id": project_id,
            "deliverable_id": deliverable.id,
            "event_type": "deliverable_created",
        },
    )
    return deliverable


def list_deliverables(project_id: str) -> list[Deliverable]:
    """Return the project's deliverables with approvals, newest version first."""
    return list(
        db.session.execute(
            select(Deliverable)
            .where(Deliverable.project_id == project_id)
            .options(selectinload(Deliverable.approvals))
            .order_by(Deliverable.version.desc())
        ).scalars().all()
    )
