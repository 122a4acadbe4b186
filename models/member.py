from utils.helpers import utcnow
from .database import db

MEMBERSHIP_STATUSES = ('guest', 'pending-verification', 'active')


class Member(db.Model):
    """Club member directory entry.

    Guest rows exist for attendance tracking before a person has an account and
    always carry a placeholder address, never a real one.
    """
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, unique=True)
    full_name = db.Column(db.String(255), nullable=False)
    membership_status = db.Column(db.String(30), nullable=False, default='active')
    is_temp_runner = db.Column(db.Boolean, default=False)
    password_hash = db.Column(db.String(255))
    invited_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=utcnow)

    invitations = db.relationship('Invitation', backref='linked_guest', lazy=True)

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'full_name': self.full_name,
            'membership_status': self.membership_status,
            'is_temp_runner': bool(self.is_temp_runner),
        }


class PendingMember(db.Model):
    """Sign-up that has not finished its own email verification."""
    __tablename__ = 'pending_member'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, unique=True)
    full_name = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, default=utcnow)
