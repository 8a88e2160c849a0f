"""
Approval & invoicing engine.

Handles a client's decision on a deliverable:

    1. gate the request on the project access token (client_access_service)
    2. validate the decision (action ∈ {APPROVE, REQUEST_CHANGES})
    3. append an immutable ApprovalAuditLog entry
    4. on APPROVE only: draft one Invoice priced from the project's latest
       scope (0 when no scope exists)

Steps 3 and 4 share one transaction, opened with the project row locked, and
the latest-scope price is read inside it, after the audit append. Either both
rows are committed or neither is.

Design decisions:
    - Approvals are intentionally repeatable: every APPROVE appends another
      entry and mints another DRAFT invoice (re-approval after a correction
      bills again). There is no idempotency key.
    - Pricing ignores scope lock state; the highest version wins.
    - REQUEST_CHANGES without comments is accepted.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from scopeflow.core.exceptions import ConflictError, InternalError
from scopeflow.models import db
from scopeflow.models.deliverable import PERFORMED_BY_CLIENT, ApprovalAuditLog, Deliverable
from scopeflow.models.invoice import STATUS_DRAFT, Invoice
from scopeflow.schemas import DecisionAction, DecisionInput, parse
from scopeflow.services import client_access_service, scope_service
from scopeflow.services.read_models import DecisionResult, RequestMeta
from scopeflow.services.versioning import lock_project_row

logger = logging.getLogger(__name__)


def _next_seq(deliverable_id: str) -> int:
    current = db.session.execute(
        select(func.max(ApprovalAuditLog.seq))
        .where(ApprovalAuditLog.deliverable_id == deliverable_id)
    ).scalar()
    return (current or 0) + 1


def _draft_invoice(project_id: str, entry: ApprovalAuditLog) -> Invoice:
    """Add a DRAFT invoice priced from the latest scope (not committed)."""
    latest = scope_service.get_latest_scope(project_id)
    invoice = Invoice(
        project_id=project_id,
        approval_id=entry.id,
        scope_id=latest.id if latest else None,
        amount=float(latest.price) if latest else 0,
        status=STATUS_DRAFT,
    )
    db.session.add(invoice)
    return invoice


def submit_decision(
    deliverable_id: str,
    token: str | None,
    payload,
    meta: RequestMeta | None = None,
) -> DecisionResult:
    """Record a client decision and, on approval, draft an invoice.

    Args:
        deliverable_id: Deliverable being reviewed.
        token: Client access token as presented by the caller.
        payload: DecisionInput or raw dict ``{"action": ..., "comments": ...}``.
        meta: Caller network address and user agent for the audit trail.

    Returns:
        DecisionResult with the new audit entry and the invoice (APPROVE) or
        None (REQUEST_CHANGES).

    Raises:
        UnauthorizedError: token missing.
        ForbiddenError: token wrong or deliverable unknown.
        ValidationError: action not APPROVE / REQUEST_CHANGES.
        ConflictError: a concurrent decision took the same audit position.
        InternalError: storage failure; nothing was recorded.
    """
    deliverable: Deliverable = client_access_service.authorize_deliverable(deliverable_id, token)
    data = parse(DecisionInput, payload)
    meta = meta or RequestMeta()
    project_id = deliverable.project_id

    invoice = None
    try:
        lock_project_row(project_id)
        entry = ApprovalAuditLog(
            deliverable_id=deliverable.id,
            seq=_next_seq(deliverable.id),
            action=data.action.value,
            comments=data.comments,
            performed_by=PERFORMED_BY_CLIENT,
            ip_address=meta.ip_address[:45] if meta.ip_address else None,
            user_agent=(meta.user_agent or "Unknown")[:500],
        )
        db.session.add(entry)
        db.session.flush()

        if data.action is DecisionAction.APPROVE:
            invoice = _draft_invoice(project_id, entry)

        db.session.commit()
    except IntegrityError as exc:
        # Another decision took this seq between the read and the insert
        db.session.rollback()
        logger.warning(
            "Audit sequence collision; rolled back",
            extra={"project_id": project_id, "deliverable_id": deliverable_id},
        )
        raise ConflictError(
            "Another decision was recorded at the same time; retry the request"
        ) from exc
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception(
            "Failed to record client decision; rolled back",
            extra={"project_id": project_id, "deliverable_id": deliverable_id},
        )
        raise InternalError() from exc

    logger.info(
        "Client decision %s recorded", entry.action,
        extra={
            "project_id": project_id,
            "deliverable_id": deliverable_id,
            "event_type": "approval_recorded",
        },
    )
    if invoice is not None:
        logger.info(
            "Draft invoice created for %.2f", invoice.amount,
            extra={"project_id": project_id, "event_type": "invoice_drafted"},
        )
    return DecisionResult(entry=entry, invoice=invoice)


def list_invoices(project_id: str) -> list[Invoice]:
    """Return the project's invoices, newest first."""
    return list(
        db.session.execute(
            select(Invoice)
            .where(Invoice.project_id == project_id)
            .order_by(Invoice.created_at.desc())
        ).scalars().all()
    )
