"""
Persistence for invitation rows.

Every read goes to the database; rows are not cached between calls because the
admin pages, the quick-invite sidebar and batch jobs may all be writing at once.
"""
import logging
from datetime import timedelta
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from models import db, Invitation
from utils.errors import InvitationConflict, InvitationStoreError
from utils.helpers import utcnow

logger = logging.getLogger(__name__)


class InvitationStore:
    """Create, read and update invitations through Flask-SQLAlchemy"""

    def __init__(self, session=None):
        self.session = session or db.session

    def _commit(self):
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise InvitationStoreError(f'Failed to save invitation: {e}') from e

    def create(self, email, token, ttl_days, invited_by=None, full_name=None, now=None):
        """Insert a pending invitation.

        Raises InvitationConflict when another pending row for the address already
        exists (the partial unique index rejects it).
        """
        now = now or utcnow()
        invitation = Invitation(
            email=email,
            token=token,
            full_name=full_name,
            status='pending',
            invited_by=str(invited_by) if invited_by is not None else None,
            created_at=now,
            invited_at=now,
            expires_at=now + timedelta(days=ttl_days),
        )
        self.session.add(invitation)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            logger.warning(f"[INVITATION] Conflict creating invitation for {email}: {e.orig}")
            raise InvitationConflict(f'An open invitation for {email} already exists') from e
        except SQLAlchemyError as e:
            self.session.rollback()
            raise InvitationStoreError(f'Failed to create invitation: {e}') from e
        return invitation

    def _read(self, query, many=False):
        """Run a read query fresh from the database, wrapping driver errors"""
        try:
            query = query.populate_existing()
            return query.all() if many else query.first()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise InvitationStoreError(f'Failed to read invitations: {e}') from e

    def get(self, invitation_id):
        return self._read(Invitation.query.filter_by(id=invitation_id))

    def get_by_token(self, token):
        if not token:
            return None
        return self._read(Invitation.query.filter_by(token=token))

    def find_pending(self, email):
        """The pending row for an address, whatever its nominal expiry"""
        return self._read(Invitation.query.filter_by(email=email, status='pending'))

    def list_pending(self):
        return self._read(Invitation.query.filter_by(status='pending')
                          .order_by(Invitation.invited_at.desc(), Invitation.id.desc()),
                          many=True)

    def _update(self, values, **criteria):
        """Conditional UPDATE; returns the number of rows that matched"""
        try:
            updated = (Invitation.query.filter_by(**criteria)
                       .update(values, synchronize_session=False))
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise InvitationStoreError(f'Failed to update invitation: {e}') from e
        return updated

    def mark_sent(self, invitation, now=None):
        invitation.sent = True
        invitation.sent_at = now or utcnow()
        self._commit()

    def mark_expired(self, invitation):
        """pending -> expired. Returns False if the row had already left pending."""
        updated = self._update({'status': 'expired'}, id=invitation.id, status='pending')
        self.session.refresh(invitation)
        return updated == 1

    def mark_registered(self, token, now=None):
        """pending -> registered, stamping registered_at once.

        Conditional on the row still being pending, so a repeat call changes nothing.
        """
        values = {'status': 'registered', 'registered_at': now or utcnow()}
        return self._update(values, token=token, status='pending') == 1

    def link_guest(self, invitation_id, guest_member_id):
        values = {'linked_guest_member_id': guest_member_id}
        return self._update(values, id=invitation_id) == 1
