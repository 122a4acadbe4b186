"""
Mail transports.

Every transport has the same shape: send(to, subject, html, text) returns a message
id or raises MailTransportError. Callers treat the error as opaque and do not retry.
"""
import logging
import uuid
import requests
from flask_mail import Mail, Message
from utils.errors import MailTransportError

logger = logging.getLogger(__name__)


class MailTransport:
    def send(self, to, subject, html, text):
        raise NotImplementedError


class FlaskMailTransport(MailTransport):
    """SMTP delivery through Flask-Mail"""

    def __init__(self, app, sender):
        self.app = app
        self.mail = app.extensions.get('mail') or Mail(app)
        self.sender = sender

    def send(self, to, subject, html, text):
        msg = Message(
            subject=subject,
            recipients=[to],  # Must be a list
            sender=self.sender,
            body=text,
            html=html,
        )
        try:
            with self.app.app_context():
                self.mail.send(msg)
        except Exception as e:
            logger.error(f"[MAIL] SMTP send to {to} failed: {e}")
            raise MailTransportError(f'Failed to send email to {to}: {e}') from e
        logger.info(f"[MAIL] Sent '{subject}' to {to}")
        return msg.msgId


class HttpMailTransport(MailTransport):
    """POST the message to an HTTP email relay (e.g. the /api/send-email function)"""

    def __init__(self, endpoint, sender, timeout=30):
        self.endpoint = endpoint
        self.sender = sender
        self.timeout = timeout

    def send(self, to, subject, html, text):
        data = {
            'from': self.sender,
            'to': to,
            'subject': subject,
            'html': html,
            'text': text,
        }
        try:
            response = requests.post(self.endpoint, json=data, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"[MAIL] Error calling email API for {to}: {e}")
            raise MailTransportError(f'Email API unreachable: {e}') from e

        if not response.ok:
            logger.error(f"[MAIL] Email API rejected {to}. Status: {response.status_code}")
            logger.error(f"[MAIL] Response: {response.text}")
            raise MailTransportError(f'Email API error: {response.status_code} - {response.text}')

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        message_id = payload.get('messageId') or payload.get('id') or ''
        logger.info(f"[MAIL] Sent '{subject}' to {to} via API ({message_id})")
        return message_id


class ConsoleTransport(MailTransport):
    """Simulation mode for development: print instead of sending"""

    def __init__(self):
        self.outbox = []

    def send(self, to, subject, html, text):
        message_id = uuid.uuid4().hex
        self.outbox.append({'to': to, 'subject': subject, 'html': html,
                            'text': text, 'message_id': message_id})
        print(f"[EMAIL SIMULATION] To: {to}")
        print(f"[EMAIL SIMULATION] Subject: {subject}")
        print(text)
        print("-" * 50)
        return message_id


def build_transport(app, sender):
    """Pick a transport from app config: HTTP relay, then SMTP, else simulation"""
    if app.config.get('EMAIL_API_URL'):
        return HttpMailTransport(app.config['EMAIL_API_URL'], sender)
    if app.config.get('MAIL_SERVER'):
        return FlaskMailTransport(app, sender)
    logger.warning("[MAIL] Email not configured - using simulation transport")
    return ConsoleTransport()
