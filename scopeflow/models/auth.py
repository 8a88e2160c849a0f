"""
Account model for agency users.

Authentication itself is a thin collaborator: the workflow services only
ever see the user's id as the authenticated principal that owns projects.

Plans:
    FREE  capped project count once the signup trial has ended
    PRO   unlimited projects
"""

from datetime import timezone

from scopeflow.models import _utcnow, _uuid, db

PLAN_FREE = "FREE"
PLAN_PRO = "PRO"


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    email = db.Column(db.String(200), nullable=False, unique=True)
    password_hash = db.Column(db.String(256), nullable=False)
    full_name = db.Column(db.String(200))
    plan = db.Column(db.String(20), nullable=False, default=PLAN_FREE, comment="FREE | PRO")
    trial_ends_at = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    projects = db.relationship("Project", back_populates="owner", lazy="dynamic")

    @property
    def is_pro(self) -> bool:
        return self.plan == PLAN_PRO

    def trial_active(self, now=None) -> bool:
        if self.trial_ends_at is None:
            return False
        ends = self.trial_ends_at
        # SQLite hands back naive datetimes
        if ends.tzinfo is None:
            ends = ends.replace(tzinfo=timezone.utc)
        return ends > (now or _utcnow())

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "full_name": self.full_name,
            "plan": self.plan,
            "trial_ends_at": self.trial_ends_at.isoformat() if self.trial_ends_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f"<User {self.email}>"
