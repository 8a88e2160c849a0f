"""
Deliverable review models — Deliverable + ApprovalAuditLog.

Deliverables are versioned per project on their own sequence, independent of
scope versions. Each client decision appends an ApprovalAuditLog row; rows are
never mutated or deleted, giving a forensic trail of who decided what, from
where.

Derived review state (never stored):
    PENDING            no audit entries yet
    CHANGES_REQUESTED  at least one REQUEST_CHANGES and no APPROVE
    APPROVED           at least one APPROVE, permanently (no "unapprove")
"""

from sqlalchemy import event as _sa_event

from scopeflow.core.exceptions import ImmutableRecordError
from scopeflow.models import _utcnow, _uuid, db

# ── Constants ─────────────────────────────────────────────────────────────────

ACTION_APPROVE = "APPROVE"
ACTION_REQUEST_CHANGES = "REQUEST_CHANGES"

VALID_ACTIONS = frozenset({ACTION_APPROVE, ACTION_REQUEST_CHANGES})

STATE_PENDING = "PENDING"
STATE_APPROVED = "APPROVED"
STATE_CHANGES_REQUESTED = "CHANGES_REQUESTED"

PERFORMED_BY_CLIENT = "CLIENT"


def derive_review_state(actions) -> str:
    """Fold a sequence of audit actions into the deliverable's review state.

    Monotonic toward approval: once any APPROVE exists, later
    REQUEST_CHANGES entries do not move the state back.
    """
    actions = list(actions)
    if ACTION_APPROVE in actions:
        return STATE_APPROVED
    if ACTION_REQUEST_CHANGES in actions:
        return STATE_CHANGES_REQUESTED
    return STATE_PENDING


class Deliverable(db.Model):
    """Versioned work-product submission awaiting client review."""

    __tablename__ = "deliverables"

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    project_id = db.Column(
        db.String(36),
        db.ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    version = db.Column(db.Integer, nullable=False)
    file_url = db.Column(db.String(2048), nullable=False)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    project = db.relationship("Project", back_populates="deliverables")
    approvals = db.relationship(
        "ApprovalAuditLog",
        back_populates="deliverable",
        order_by="ApprovalAuditLog.seq",
        passive_deletes=True,
    )

    __table_args__ = (
        db.UniqueConstraint("project_id", "version", name="uq_deliverables_project_version"),
    )

    @property
    def review_state(self) -> str:
        return derive_review_state(a.action for a in self.approvals)

    def to_dict(self, include_approvals: bool = True) -> dict:
        d = {
            "id": self.id,
            "project_id": self.project_id,
            "version": self.version,
            "file_url": self.file_url,
            "notes": self.notes,
            "review_state": self.review_state,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if include_approvals:
            d["approvals"] = [a.to_dict() for a in self.approvals]
        return d

    def __repr__(self) -> str:
        return f"<Deliverable {self.project_id} v{self.version}>"


class ApprovalAuditLog(db.Model):
    """
    Immutable client decision on a deliverable.

    Business rules:
    - Records are NEVER updated or deleted — append-only log, enforced by the
      ORM listeners below.
    - performed_by is always "CLIENT": only the public portal can submit.
    - ip_address / user_agent are captured for forensic audit.
    """

    __tablename__ = "approval_audit_logs"

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    # 1-based position within the deliverable's trail
    seq = db.Column(db.Integer, nullable=False, default=0)
    deliverable_id = db.Column(
        db.String(36),
        db.ForeignKey("deliverables.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    action = db.Column(db.String(20), nullable=False, comment="APPROVE | REQUEST_CHANGES")
    comments = db.Column(db.Text, nullable=True)
    performed_by = db.Column(db.String(20), nullable=False, default=PERFORMED_BY_CLIENT)
    ip_address = db.Column(
        db.String(45),   # IPv6 max length is 39 chars; 45 accommodates mapped v4
        nullable=True,
    )
    user_agent = db.Column(db.String(500), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    deliverable = db.relationship("Deliverable", back_populates="approvals")

    __table_args__ = (
        db.UniqueConstraint("deliverable_id", "seq", name="uq_approval_audit_deliverable_seq"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "deliverable_id": self.deliverable_id,
            "seq": self.seq,
            "action": self.action,
            "comments": self.comments,
            "performed_by": self.performed_by,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f"<ApprovalAuditLog {self.deliverable_id} {self.action}>"


@_sa_event.listens_for(ApprovalAuditLog, "before_update")
def _block_audit_update(mapper, connection, target) -> None:  # noqa: ANN001
    raise ImmutableRecordError(
        "Approval history is append-only; entries cannot be edited", record="ApprovalAuditLog",
    )


@_sa_event.listens_for(ApprovalAuditLog, "before_delete")
def _block_audit_delete(mapper, connection, target) -> None:  # noqa: ANN001
    raise ImmutableRecordError(
        "Approval history is append-only; entries cannot be deleted", record="ApprovalAuditLog",
    )
