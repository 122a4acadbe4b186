from sqlalchemy import text
from utils.helpers import utcnow
from .database import db

INVITATION_STATUSES = ('pending', 'registered', 'expired')


class Invitation(db.Model):
    """Database model for member invitations.

    Rows are never deleted; registered and expired invitations stay as an audit
    trail. Expiry is decided when a row is read, there is no sweeper.
    """
    __table_args__ = (
        db.CheckConstraint(
            "status IN ('pending', 'registered', 'expired')",
            name='ck_invitation_status'
        ),
        # One open invitation per address, enforced by the database
        db.Index(
            'uq_invitation_pending_email', 'email',
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'")
        ),
    )

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, index=True)
    full_name = db.Column(db.String(255))
    token = db.Column(db.String(100), nullable=False, unique=True)
    status = db.Column(db.String(20), nullable=False, default='pending')
    invited_by = db.Column(db.String(64))

    # Timestamps
    created_at = db.Column(db.DateTime, default=utcnow)
    invited_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    expires_at = db.Column(db.DateTime, nullable=False)
    registered_at = db.Column(db.DateTime)

    # Delivery tracking, separate from row creation
    sent = db.Column(db.Boolean, nullable=False, default=False)
    sent_at = db.Column(db.DateTime)

    linked_guest_member_id = db.Column(db.Integer, db.ForeignKey('member.id'))

    def is_expired(self, now=None):
        return (now or utcnow()) > self.expires_at

    def to_dict(self, now=None):
        return {
            'id': self.id,
            'email': self.email,
            'status': self.status,
            'invited_by': self.invited_by,
            'invited_at': self.invited_at.isoformat() if self.invited_at else None,
            'expires_at': self.expires_at.isoformat() if self.expires_at else None,
            'registered_at': self.registered_at.isoformat() if self.registered_at else None,
            'sent': self.sent,
            'sent_at': self.sent_at.isoformat() if self.sent_at else None,
            'linked_guest_member_id': self.linked_guest_member_id,
            'is_expired': self.is_expired(now),
        }

    def __repr__(self):
        return f"<Invitation {self.id} {self.email} {self.status}>"
