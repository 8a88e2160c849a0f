"""
Invoice — billing record derived from a client approval.

Invoices are minted only by the approval engine, always as DRAFT, with the
amount copied from the project's latest scope at the moment of approval.
Status transitions beyond DRAFT belong to an external billing system; the
amount and owning project are frozen once written.
"""

from sqlalchemy import event as _sa_event
from sqlalchemy import inspect as _sa_inspect

from scopeflow.core.exceptions import ImmutableRecordError
from scopeflow.models import _utcnow, _uuid, db

# ── Constants ─────────────────────────────────────────────────────────────────

STATUS_DRAFT = "DRAFT"
STATUS_SENT = "SENT"
STATUS_PAID = "PAID"
STATUS_OVERDUE = "OVERDUE"

VALID_STATUSES = frozenset({STATUS_DRAFT, STATUS_SENT, STATUS_PAID, STATUS_OVERDUE})


class Invoice(db.Model):
    __tablename__ = "invoices"

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    project_id = db.Column(
        db.String(36),
        db.ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Audit link back to the decision that produced this invoice
    approval_id = db.Column(
        db.String(36),
        db.ForeignKey("approval_audit_logs.id", ondelete="SET NULL"),
        nullable=True,
        unique=True,
    )
    scope_id = db.Column(
        db.String(36),
        db.ForeignKey("scopes.id", ondelete="SET NULL"),
        nullable=True,
        comment="Scope whose price was billed; NULL when no scope existed",
    )
    amount = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    status = db.Column(
        db.String(20),
        nullable=False,
        default=STATUS_DRAFT,
        comment="DRAFT | SENT | PAID | OVERDUE",
    )
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    project = db.relationship("Project", back_populates="invoices")

    __table_args__ = (
        db.CheckConstraint("amount >= 0", name="ck_invoices_amount_non_negative"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "approval_id": self.approval_id,
            "scope_id": self.scope_id,
            "amount": float(self.amount or 0),
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f"<Invoice {self.project_id} {self.amount} {self.status}>"


@_sa_event.listens_for(Invoice, "before_update")
def _freeze_invoice_amount(mapper, connection, target) -> None:  # noqa: ANN001
    """Amount and ownership are fixed at creation."""
    attrs = _sa_inspect(target).attrs
    for name in ("amount", "project_id", "approval_id", "scope_id"):
        if attrs[name].history.has_changes():
            raise ImmutableRecordError(
                f"Invoice {name} cannot be changed after creation", record="Invoice",
            )
