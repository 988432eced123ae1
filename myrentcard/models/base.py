"""
Base database setup for MyRentCard.
"""
from flask_sqlalchemy import SQLAlchemy
import uuid

db = SQLAlchemy()


def generate_uuid():
    """Generate a UUID string for thread identifiers."""
    return str(uuid.uuid4())


def isoformat(value):
    """Serialize an optional datetime for JSON responses."""
    return value.isoformat() if value else None
