import logging
from sqlalchemy.exc import SQLAlchemyError
from models import db, Member
from utils.errors import InvitationError, InvitationStoreError
from utils.helpers import placeholder_email, utcnow

logger = logging.getLogger(__name__)


class GuestLinker:
    """Guest attendance records and their optional invitation.

    The guest row always gets a placeholder address; a real address, if given, is
    only ever passed to the invitation.
    """

    def __init__(self, manager, store, settings, session=None, clock=utcnow):
        self.manager = manager
        self.store = store
        self.settings = settings
        self.session = session or db.session
        self.clock = clock

    def link_if_sent(self, outcome, guest_member_id):
        """Point the invitation from a successful invite() at the guest row"""
        if not outcome.success or outcome.invitation_id is None:
            return False
        try:
            return self.store.link_guest(outcome.invitation_id, guest_member_id)
        except InvitationError as e:
            logger.error(f"[GUEST] Could not link invitation {outcome.invitation_id} "
                         f"to guest {guest_member_id}: {e}")
            return False

    def create_guest(self, full_name, email=None, send_invitation=False, invited_by=None):
        """Create a guest runner, optionally inviting their real address.

        Returns (member, outcome) where outcome is None when no invitation was sent.
        """
        member = Member(
            email=placeholder_email(self.settings.guest_email_domain),
            full_name=full_name.strip(),
            membership_status='guest',
            is_temp_runner=True,
            created_at=self.clock(),
        )
        self.session.add(member)
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise InvitationStoreError(f'Failed to create guest: {e}') from e
        logger.info(f"[GUEST] Created guest {member.id} ({member.full_name})")

        if not (send_invitation and email):
            return member, None

        outcome = self.manager.invite(email, invited_by=invited_by, full_name=member.full_name)
        if outcome.success:
            self.link_if_sent(outcome, member.id)
        return member, outcome
