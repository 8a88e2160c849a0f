"""
Project — the aggregate root of the agency workflow.

A Project exclusively owns its Scopes, Deliverables and Invoices. Its
``access_token`` is the bearer credential of the public client portal: it is
generated once at creation, is unique across all projects and never changes.
"""

from scopeflow.models import _utcnow, _uuid, db

# ── Constants ─────────────────────────────────────────────────────────────────

STATUS_ACTIVE = "ACTIVE"
STATUS_COMPLETED = "COMPLETED"
STATUS_ARCHIVED = "ARCHIVED"

VALID_STATUSES = frozenset({STATUS_ACTIVE, STATUS_COMPLETED, STATUS_ARCHIVED})

# current status -> statuses it may move to (one-way only)
STATUS_TRANSITIONS = {
    STATUS_ACTIVE: frozenset({STATUS_COMPLETED, STATUS_ARCHIVED}),
    STATUS_COMPLETED: frozenset({STATUS_ARCHIVED}),
    STATUS_ARCHIVED: frozenset(),
}


class Project(db.Model):
    """Client engagement tracked by an agency owner."""

    __tablename__ = "projects"

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    owner_id = db.Column(
        db.String(36),
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = db.Column(db.String(200), nullable=False)
    client_email = db.Column(db.String(200), nullable=True)
    status = db.Column(
        db.String(20),
        nullable=False,
        default=STATUS_ACTIVE,
        comment="ACTIVE | COMPLETED | ARCHIVED",
    )
    access_token = db.Column(
        db.String(64),
        nullable=False,
        unique=True,
        comment="Client portal bearer secret — never log in full",
    )

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    owner = db.relationship("User", back_populates="projects")
    scopes = db.relationship(
        "Scope", back_populates="project", lazy="dynamic",
        cascade="all, delete-orphan", order_by="Scope.version.desc()",
    )
    deliverables = db.relationship(
        "Deliverable", back_populates="project", lazy="dynamic",
        cascade="all, delete-orphan", order_by="Deliverable.version.desc()",
    )
    invoices = db.relationship(
        "Invoice", back_populates="project", lazy="dynamic",
        cascade="all, delete-orphan",
    )

    def to_dict(self, include_token: bool = False) -> dict:
        """Serialize core fields. The access token is only exposed to the owner."""
        d = {
            "id": self.id,
            "owner_id": self.owner_id,
            "name": self.name,
            "client_email": self.client_email,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_token:
            d["access_token"] = self.access_token
        return d

    def __repr__(self) -> str:
        return f"<Project {self.id}: {self.name}>"
