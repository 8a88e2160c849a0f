"""
Client access gate — the project access token as a bearer credential.

The portal has no accounts: whoever holds a project's access token may read
its client-facing aggregate and decide on its deliverables. Consequences:

    - Unknown and malformed tokens get the same NOT_FOUND answer, so the
      endpoint is not an oracle for token validity.
    - For decisions, a missing deliverable and a wrong token both answer
      FORBIDDEN; only the logs tell them apart.
    - Comparisons are constant-time and tokens are logged masked.
"""

from __future__ import annotations

import logging

from sqlalchemy import select

from scopeflow.core.exceptions import ForbiddenError, NotFoundError, UnauthorizedError
from scopeflow.models import db
from scopeflow.models.deliverable import Deliverable
from scopeflow.models.project import Project
from scopeflow.services import deliverable_service, scope_service
from scopeflow.services.read_models import ProjectPortalView
from scopeflow.utils.crypto import mask_token, tokens_match

logger = logging.getLogger(__name__)

# Longer inputs cannot be a token we issued; skip the lookup entirely
MAX_TOKEN_LENGTH = 128


def resolve_project_by_token(token: str | None) -> ProjectPortalView:
    """Return the read-only portal view of the project owning ``token``.

    Raises:
        NotFoundError: token empty, malformed or unknown (indistinguishable).
    """
    project = None
    if token and len(token) <= MAX_TOKEN_LENGTH:
        project = db.session.execute(
            select(Project).where(Project.access_token == token)
        ).scalar_one_or_none()

    if project is None or not tokens_match(token, project.access_token):
        logger.warning(
            "Client portal lookup failed for token %s", mask_token(token),
            extra={"event_type": "client_token_rejected"},
        )
        raise NotFoundError("Access link")

    return ProjectPortalView(
        project=project,
        scopes=scope_service.list_scopes(project.id),
        deliverables=deliverable_service.list_deliverables(project.id),
    )


def authorize_deliverable(deliverable_id: str, token: str | None) -> Deliverable:
    """Return the deliverable if ``token`` is its project's access token.

    Raises:
        UnauthorizedError: no token supplied.
        ForbiddenError: deliverable unknown, or token does not match.
    """
    if not token:
        raise UnauthorizedError("Missing client token")

    deliverable = db.session.get(Deliverable, deliverable_id)
    if deliverable is None:
        logger.warning(
            "Client decision on unknown deliverable",
            extra={"deliverable_id": deliverable_id, "event_type": "client_token_rejected"},
        )
        raise ForbiddenError("Not authorized for this deliverable")

    if not tokens_match(token, deliverable.project.access_token):
        logger.warning(
            "Client token %s does not match deliverable's project", mask_token(token),
            extra={
                "deliverable_id": deliverable_id,
                "project_id": deliverable.project_id,
                "event_type": "client_token_rejected",
            },
        )
        raise ForbiddenError("Not authorized for this deliverable")

    return deliverable
