from utils.helpers import utcnow
from .database import db


class SecurityEvent(db.Model):
    """Append-only audit log of invitation activity."""
    __tablename__ = 'security_event'

    id = db.Column(db.Integer, primary_key=True)
    event_type = db.Column(db.String(64), nullable=False, index=True)
    details = db.Column(db.JSON, nullable=False, default=dict)
    severity = db.Column(db.String(16), nullable=False, default='info')
    created_at = db.Column(db.DateTime, default=utcnow)
