import logging
from sqlalchemy.exc import SQLAlchemyError
from models import db, SecurityEvent
from utils.helpers import utcnow

logger = logging.getLogger(__name__)


def record_event(event_type, details, severity='info', session=None):
    """Write an audit event. Failures are logged; they never fail the caller."""
    session = session or db.session
    logger.info(f"[AUDIT] {event_type}: {details}")
    try:
        session.add(SecurityEvent(event_type=event_type, details=details,
                                  severity=severity, created_at=utcnow()))
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"[AUDIT] Failed to record {event_type}: {e}")
        return False
    return True
