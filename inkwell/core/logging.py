"""Logging setup shared by the API process, Celery workers and scripts."""
import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # SQLAlchemy echoes through its own logger when DEBUG is on
    logging.getLogger("sqlalchemy.engine").propagate = True
