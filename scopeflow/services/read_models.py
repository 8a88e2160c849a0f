"""Named read-model types returned by the workflow services.

Each query has an explicit shape instead of an ad-hoc join dict, so the
contract of e.g. ``resolve_project_by_token`` is a testable type.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from scopeflow.models.deliverable import ApprovalAuditLog, Deliverable
from scopeflow.models.invoice import Invoice
from scopeflow.models.project import Project
from scopeflow.models.scope import Scope


@dataclass(frozen=True)
class RequestMeta:
    """Caller network metadata captured on client decisions."""

    ip_address: str | None = None
    user_agent: str | None = None


@dataclass
class ProjectPortalView:
    """Read-only client portal aggregate.

    scopes: version descending. deliverables: version descending, newest
    first, each with its approvals in submission order.
    """

    project: Project
    scopes: list[Scope] = field(default_factory=list)
    deliverables: list[Deliverable] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "project": self.project.to_dict(),
            "scopes": [s.to_dict() for s in self.scopes],
            "deliverables": [d.to_dict(include_approvals=True) for d in self.deliverables],
        }


@dataclass
class ProjectDetailView:
    """Owner-side project aggregate, including billing."""

    project: Project
    scopes: list[Scope] = field(default_factory=list)
    deliverables: list[Deliverable] = field(default_factory=list)
    invoices: list[Invoice] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "project": self.project.to_dict(include_token=True),
            "scopes": [s.to_dict() for s in self.scopes],
            "deliverables": [d.to_dict(include_approvals=True) for d in self.deliverables],
            "invoices": [i.to_dict() for i in self.invoices],
        }


@dataclass
class ProjectSummaryView:
    """One row of the owner's project list."""

    project: Project
    latest_scope: Scope | None
    deliverable_count: int
    invoice_count: int

    def to_dict(self) -> dict:
        d = self.project.to_dict(include_token=True)
        d["latest_scope"] = self.latest_scope.to_dict() if self.latest_scope else None
        d["deliverable_count"] = self.deliverable_count
        d["invoice_count"] = self.invoice_count
        return d


@dataclass
class DecisionResult:
    """Outcome of a client decision: the audit entry, plus the invoice on APPROVE."""

    entry: ApprovalAuditLog
    invoice: Invoice | None = None

    def to_dict(self) -> dict:
        d = self.entry.to_dict()
        d["invoice"] = self.invoice.to_dict() if self.invoice else None
        return d
