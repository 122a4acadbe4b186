"""
Invitation lifecycle for a single address.

invite() resolves the address and takes one of four actions:

    full member            -> password reset email, no invitation row touched
    open invitation        -> resend with the original token (links already shared keep working)
    awaiting verification  -> verification email resent, no invitation row touched
    unknown                -> new pending row, send, then mark sent

Expiry is a read-time check in validate_token()/resend(), there is no background job.
Failures come back as Outcome(success=False, error=<kind>) instead of exceptions.
"""
import logging
from dataclasses import dataclass, asdict
from typing import Optional

from services import resolver as dispositions
from services.audit import record_event
from services.tokens import generate_invitation_token
from utils.errors import InvitationError, InvalidEmail, TokenGenerationError
from utils.helpers import validate_email_address, normalize_email, utcnow

logger = logging.getLogger(__name__)

INVALID_LINK_MESSAGE = 'Invalid or expired invitation link'
EXPIRED_MESSAGE = 'This invitation has expired. Please contact the club for a new invitation.'
ALREADY_REGISTERED_MESSAGE = 'This invitation has already been used. Please log in instead.'
VALIDATION_FAILED_MESSAGE = 'Failed to validate invitation'


@dataclass
class Outcome:
    success: bool
    message: str
    email: str = ''
    action: Optional[str] = None
    invitation_id: Optional[int] = None
    error: Optional[str] = None

    @classmethod
    def failure(cls, message, error, email='', invitation_id=None):
        return cls(False, message, email=email, error=error, invitation_id=invitation_id)

    def to_dict(self):
        return asdict(self)


@dataclass
class TokenValidation:
    valid: bool
    email: Optional[str] = None
    invitation_id: Optional[int] = None
    full_name: Optional[str] = None
    error: Optional[str] = None
    reason: Optional[str] = None  # not_found, expired, registered, error

    def to_dict(self):
        return asdict(self)


class InvitationManager:
    def __init__(self, store, resolver, dispatcher, accounts, settings,
                 clock=utcnow, token_factory=generate_invitation_token):
        self.store = store
        self.resolver = resolver
        self.dispatcher = dispatcher
        self.accounts = accounts
        self.settings = settings
        self.clock = clock
        self.token_factory = token_factory

    def invite(self, email, invited_by=None, full_name=None):
        """Invite, remind or hand off one address depending on what already exists"""
        try:
            clean = validate_email_address(email)
        except InvalidEmail as e:
            logger.info(f"[INVITATION] Rejected address {email!r}: {e}")
            return Outcome.failure(str(e), e.kind, email=normalize_email(email))

        try:
            disposition = self.resolver.resolve(clean)

            if disposition.kind == dispositions.FULL_MEMBER:
                self.accounts.send_password_reset(clean)
                return Outcome(True, f'{clean} is already registered. Password reset email sent.',
                               email=clean, action='password_reset')

            if disposition.kind == dispositions.OPEN_INVITATION:
                return self._remind(disposition.invitation, invited_by)

            if disposition.kind == dispositions.AWAITING_VERIFICATION:
                self.accounts.resend_verification(clean)
                return Outcome(True, f'{clean} is pending email verification. Verification email resent.',
                               email=clean, action='verification_resent')

            return self._create_and_send(clean, invited_by, full_name)

        except InvitationError as e:
            logger.error(f"[INVITATION] Failed to invite {clean}: {e}")
            return Outcome.failure(f'Error: {e}', e.kind, email=clean)

    def _new_token(self):
        try:
            return self.token_factory()
        except (OSError, NotImplementedError) as e:
            raise TokenGenerationError(f'Could not generate invitation token: {e}') from e

    def _create_and_send(self, email, invited_by, full_name):
        now = self.clock()
        invitation = self.store.create(
            email, self._new_token(), self.settings.ttl_days,
            invited_by=invited_by, full_name=full_name, now=now
        )

        try:
            self.dispatcher.send_invitation(invitation)
        except InvitationError as e:
            # Row stays pending with sent=False; inviting again resends this token
            logger.error(f"[INVITATION] Invitation {invitation.id} created but not sent: {e}")
            return Outcome.failure(f'Invitation created but email failed to send: {e}', e.kind,
                                   email=email, invitation_id=invitation.id)

        self.store.mark_sent(invitation, self.clock())
        record_event('invitation_sent', {
            'email': email,
            'invited_by': invited_by,
            'invitation_id': invitation.id,
        })
        return Outcome(True, f'Invitation sent to {email}', email=email,
                       action='invitation_sent', invitation_id=invitation.id)

    def _remind(self, invitation, invited_by=None):
        self.dispatcher.send_invitation(invitation, reminder=True)
        if not invitation.sent:
            self.store.mark_sent(invitation, self.clock())
        record_event('invitation_reminder_sent', {
            'email': invitation.email,
            'invited_by': invited_by,
            'invitation_id': invitation.id,
        })
        return Outcome(True, f'Reminder sent to {invitation.email}', email=invitation.email,
                       action='reminder_sent', invitation_id=invitation.id)

    def resend(self, invitation_id, invited_by=None):
        """Admin resend of an open invitation, keeping its token"""
        try:
            invitation = self.store.get(invitation_id)
            if invitation is None:
                return Outcome.failure('Invitation not found', 'not_found')
            if invitation.status != 'pending':
                return Outcome.failure(f'Invitation is {invitation.status}, it cannot be resent',
                                       'state', email=invitation.email, invitation_id=invitation.id)
            if invitation.is_expired(self.clock()):
                self.store.mark_expired(invitation)
                return Outcome.failure(EXPIRED_MESSAGE, 'expired', email=invitation.email,
                                       invitation_id=invitation.id)
            return self._remind(invitation, invited_by)
        except InvitationError as e:
            logger.error(f"[INVITATION] Failed to resend invitation {invitation_id}: {e}")
            return Outcome.failure(f'Error: {e}', e.kind, invitation_id=invitation_id)

    def validate_token(self, token):
        """Check a registration link token, closing it if it has run past expiry"""
        try:
            invitation = self.store.get_by_token(token)
            if invitation is None:
                return TokenValidation(False, error=INVALID_LINK_MESSAGE, reason='not_found')

            if invitation.status == 'registered':
                return TokenValidation(False, error=ALREADY_REGISTERED_MESSAGE, reason='registered',
                                       invitation_id=invitation.id)

            if invitation.status == 'expired':
                return TokenValidation(False, error=EXPIRED_MESSAGE, reason='expired',
                                       invitation_id=invitation.id)

            if invitation.is_expired(self.clock()):
                self.store.mark_expired(invitation)
                logger.info(f"[INVITATION] Token for invitation {invitation.id} has expired")
                return TokenValidation(False, error=EXPIRED_MESSAGE, reason='expired',
                                       invitation_id=invitation.id)

            return TokenValidation(True, email=invitation.email, invitation_id=invitation.id,
                                   full_name=invitation.full_name)
        except InvitationError as e:
            logger.error(f"[INVITATION] Error validating token: {e}")
            return TokenValidation(False, error=VALIDATION_FAILED_MESSAGE, reason='error')

    def mark_registered(self, token):
        """Close the invitation after the account exists.

        Bookkeeping only: errors are logged and never reach the new member.
        """
        try:
            if self.store.mark_registered(token, self.clock()):
                logger.info("[INVITATION] Invitation marked as registered")
            else:
                logger.info("[INVITATION] No pending invitation for token, nothing to mark")
        except InvitationError as e:
            logger.error(f"[INVITATION] Error marking invitation as registered: {e}")

    def list_pending(self):
        now = self.clock()
        return [invitation.to_dict(now) for invitation in self.store.list_pending()]
