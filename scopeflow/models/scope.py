"""
Scope — versioned statement of work with a price.

Business rules:
- ``version`` is project-scoped, starts at 1 and grows by exactly 1 per new
  scope. Uniqueness is enforced by ``uq_scopes_project_version``.
- A scope is created unlocked and may be locked exactly once.
- Once locked, ``content`` and ``price`` are frozen and ``locked`` can never
  be cleared. New terms go into a new Scope record (next version).

The ``before_update`` listener below is the last line of enforcement: any
flush that would mutate a locked scope raises ``ScopeLockedError`` no matter
which code path issued it.
"""

from sqlalchemy import event as _sa_event
from sqlalchemy import inspect as _sa_inspect

from scopeflow.core.exceptions import ScopeLockedError
from scopeflow.models import _utcnow, _uuid, db


class Scope(db.Model):
    __tablename__ = "scopes"

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    project_id = db.Column(
        db.String(36),
        db.ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    version = db.Column(db.Integer, nullable=False)
    content = db.Column(db.Text, nullable=False)
    price = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    locked = db.Column(db.Boolean, nullable=False, default=False)
    locked_at = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    project = db.relationship("Project", back_populates="scopes")

    __table_args__ = (
        db.UniqueConstraint("project_id", "version", name="uq_scopes_project_version"),
        db.CheckConstraint("price >= 0", name="ck_scopes_price_non_negative"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "version": self.version,
            "content": self.content,
            "price": float(self.price or 0),
            "locked": bool(self.locked),
            "locked_at": self.locked_at.isoformat() if self.locked_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f"<Scope {self.project_id} v{self.version}{' locked' if self.locked else ''}>"


def _was_locked(target) -> bool:
    """Return the persisted value of ``locked`` before the pending change."""
    hist = _sa_inspect(target).attrs.locked.history
    if hist.deleted:
        return bool(hist.deleted[0])
    if hist.unchanged:
        return bool(hist.unchanged[0])
    return bool(target.locked)


@_sa_event.listens_for(Scope, "before_update")
def _block_locked_scope_update(mapper, connection, target) -> None:  # noqa: ANN001
    """Reject any UPDATE that edits terms of, or unlocks, a locked scope."""
    if not _was_locked(target):
        return

    attrs = _sa_inspect(target).attrs
    edited = any(
        attrs[name].history.has_changes()
        for name in ("content", "price", "version", "project_id")
    )
    if edited or not target.locked:
        raise ScopeLockedError(scope_id=target.id)
