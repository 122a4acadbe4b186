import logging
from utils.notifications import render_invitation_email

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Render and send one invitation email through a mail transport"""

    def __init__(self, transport, settings):
        self.transport = transport
        self.settings = settings

    def send_invitation(self, invitation, reminder=False):
        """Returns the transport message id; MailTransportError propagates"""
        link = self.settings.invitation_link(invitation.token)
        subject, html, text = render_invitation_email(
            self.settings, link, reminder=reminder, full_name=invitation.full_name
        )
        message_id = self.transport.send(invitation.email, subject, html, text)
        kind = 'reminder' if reminder else 'invitation'
        logger.info(f"[INVITATION] Sent {kind} {invitation.id} to {invitation.email}")
        return message_id
