"""
WSGI and Flask-Migrate / Alembic entry point.

Usage:
    gunicorn wsgi:app
    flask --app wsgi db init       # first time only (creates migrations/)
    flask --app wsgi db migrate -m "description"
    flask --app wsgi db upgrade
"""

from scopeflow import create_app

app = create_app()
