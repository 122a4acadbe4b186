"""
Classify an email address against what the club already knows about it.

Three independent lookups feed one disposition:

    member directory          -> FULL_MEMBER (guest and placeholder rows never count)
    pending invitations       -> OPEN_INVITATION
    unverified sign-ups       -> AWAITING_VERIFICATION

Precedence is FULL_MEMBER > OPEN_INVITATION > AWAITING_VERIFICATION > UNKNOWN.
Guests are excluded so a runner first added as a guest can later be invited
with a real address.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from models import db, Member, PendingMember, Invitation
from utils.errors import InvitationStoreError
from utils.helpers import is_placeholder_email, utcnow

logger = logging.getLogger(__name__)

FULL_MEMBER = 'full_member'
OPEN_INVITATION = 'open_invitation'
AWAITING_VERIFICATION = 'awaiting_verification'
UNKNOWN = 'unknown'


@dataclass(frozen=True)
class Disposition:
    kind: str
    invitation: Optional[Invitation] = None
    member: Optional[Member] = None


class MemberDirectory:
    """Read-only queries over the member and unverified sign-up tables"""

    def _first(self, query):
        try:
            return query.populate_existing().first()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise InvitationStoreError(f'Failed to read member directory: {e}') from e

    def find_member(self, email):
        return self._first(Member.query.filter_by(email=email))

    def find_unverified(self, email):
        return self._first(PendingMember.query.filter_by(email=email))


class ExistingAccountResolver:
    def __init__(self, store, settings, directory=None, clock=utcnow):
        self.store = store
        self.settings = settings
        self.directory = directory or MemberDirectory()
        self.clock = clock

    def is_guest(self, member):
        return (member.membership_status == 'guest'
                or bool(member.is_temp_runner)
                or is_placeholder_email(member.email, self.settings.guest_email_domain))

    def open_invitation(self, email):
        """Pending, unexpired invitation for the address.

        A pending row found past its expiry is moved to expired here, which also
        frees the address for a fresh invitation.
        """
        invitation = self.store.find_pending(email)
        if invitation is None:
            return None
        if invitation.is_expired(self.clock()):
            logger.info(f"[INVITATION] Invitation {invitation.id} for {email} expired, closing it")
            self.store.mark_expired(invitation)
            return None
        return invitation

    def resolve(self, email):
        """Return the Disposition for an already normalized address"""
        member = self.directory.find_member(email)
        unverified = self.directory.find_unverified(email)

        # Decided before open_invitation(), which may write an expiry
        if member is not None and not self.is_guest(member):
            return Disposition(FULL_MEMBER, member=member)

        invitation = self.open_invitation(email)
        if invitation is not None:
            return Disposition(OPEN_INVITATION, invitation=invitation)
        if unverified is not None:
            return Disposition(AWAITING_VERIFICATION)
        return Disposition(UNKNOWN)
