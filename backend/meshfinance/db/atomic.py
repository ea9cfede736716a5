import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


@contextmanager
def atomic(s: Session, label: str):
    """Commit everything done inside the block at once, or nothing."""
    try:
        yield s
        s.commit()
    except SQLAlchemyError:
        s.rollback()
        logger.exception("%s failed, rolled back", label)
        raise
