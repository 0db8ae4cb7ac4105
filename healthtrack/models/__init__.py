# healthtrack/models/__init__.py
from healthtrack.db.session import Base, engine

# Import model modules so SQLAlchemy registers all mappers.
from . import health_metric  # noqa: F401
from . import uploaded_report  # noqa: F401


def init_db() -> None:
    """Create tables if they don't exist."""
    Base.metadata.create_all(bind=engine)
