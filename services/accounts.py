"""
Hand-offs to the account flows this package does not own: password reset for
existing members and verification resend for unfinished sign-ups.
"""
import logging
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired
from utils.notifications import render_account_email

logger = logging.getLogger(__name__)

RESET_SALT = 'password-reset'
VERIFY_SALT = 'email-verification'


class AccountFlows:
    def send_password_reset(self, email):
        raise NotImplementedError

    def resend_verification(self, email):
        raise NotImplementedError


class MailAccountFlows(AccountFlows):
    """Mail a signed, timed link for the reset or verification pages"""

    def __init__(self, transport, settings, secret_key):
        self.transport = transport
        self.settings = settings
        self.serializer = URLSafeTimedSerializer(secret_key)

    def _link(self, path, email, salt):
        token = self.serializer.dumps(email, salt=salt)
        return f"{self.settings.app_origin.rstrip('/')}/{path}?token={token}"

    def send_password_reset(self, email):
        link = self._link('reset-password', email, RESET_SALT)
        subject, html, text = render_account_email(self.settings, link, 'reset')
        self.transport.send(email, subject, html, text)
        logger.info(f"[ACCOUNT] Password reset sent to {email}")

    def resend_verification(self, email):
        link = self._link('verify-email', email, VERIFY_SALT)
        subject, html, text = render_account_email(self.settings, link, 'verify')
        self.transport.send(email, subject, html, text)
        logger.info(f"[ACCOUNT] Verification email resent to {email}")

    def verify_token(self, token, salt, max_age=86400):
        """Decode a reset/verification token; None if tampered with or too old"""
        try:
            return self.serializer.loads(token, salt=salt, max_age=max_age)
        except (BadSignature, SignatureExpired):
            return None
