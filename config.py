"""
Settings for the invitation workflow.

Built once from the Flask app config and handed to the services at construction,
so the services can be exercised without an app or environment.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class InvitationSettings:
    app_origin: str = 'http://localhost:5000'
    club_name: str = 'Run Alcester'
    ttl_days: int = 30
    send_delay: float = 1.0
    guest_email_domain: str = 'runalcester.temp'
    mail_sender: str = 'noreply@runalcester.co.uk'

    @property
    def registration_url(self):
        return f"{self.app_origin.rstrip('/')}/register"

    def invitation_link(self, token):
        return f"{self.registration_url}?token={token}"

    @classmethod
    def from_app(cls, app):
        config = app.config
        return cls(
            app_origin=config.get('APP_ORIGIN') or cls.app_origin,
            club_name=config.get('CLUB_NAME') or cls.club_name,
            ttl_days=int(config.get('INVITATION_TTL_DAYS', cls.ttl_days)),
            send_delay=float(config.get('INVITATION_SEND_DELAY', cls.send_delay)),
            guest_email_domain=config.get('GUEST_EMAIL_DOMAIN') or cls.guest_email_domain,
            mail_sender=config.get('MAIL_DEFAULT_SENDER') or cls.mail_sender,
        )
