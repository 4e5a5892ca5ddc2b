# File: app/db/base.py
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


def import_models():
    """Import every model module so Base.metadata knows all tables."""
    from app.models import user, agency, category, complaint, response, password_reset  # noqa: F401
