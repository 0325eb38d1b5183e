"""BIVO budgeting backend.

Flask JSON API for recording income, expense and savings transactions and
reading a monthly dashboard. Start it with::

    flask --app bivo.app:create_app init-db
    flask --app bivo.app:create_app run
"""

from .app import create_app  # noqa: F401

__all__ = ["create_app"]
