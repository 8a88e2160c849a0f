"""
SQLAlchemy extension and shared model helpers.

Every model module imports ``db`` from here; the extension is bound to an
application inside ``create_app()`` via ``db.init_app(app)``.
"""

import uuid
from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def _uuid():
    return str(uuid.uuid4())


def _utcnow():
    return datetime.now(timezone.utc)
