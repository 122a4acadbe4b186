"""Shared fixtures: in-memory database, recording mail transport, fixed clock."""
from datetime import datetime, timedelta

import pytest

from app import create_app
from models import db
from services.accounts import AccountFlows
from services.mailer import MailTransport
from utils.errors import MailTransportError


class RecordingTransport(MailTransport):
    """Collects sent messages; addresses in fail_for are rejected."""

    def __init__(self):
        self.sent = []
        self.fail_for = set()

    def send(self, to, subject, html, text):
        if to in self.fail_for:
            raise MailTransportError(f'Delivery rejected for {to}')
        self.sent.append({'to': to, 'subject': subject, 'html': html, 'text': text})
        return f'msg-{len(self.sent)}'

    def sent_to(self, email):
        return [m for m in self.sent if m['to'] == email]


class RecordingAccountFlows(AccountFlows):
    def __init__(self):
        self.resets = []
        self.verifications = []

    def send_password_reset(self, email):
        self.resets.append(email)

    def resend_verification(self, email):
        self.verifications.append(email)


class FixedClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def accounts():
    return RecordingAccountFlows()


@pytest.fixture
def clock():
    return FixedClock(datetime(2026, 3, 1, 9, 0, 0))


@pytest.fixture
def app(transport, accounts, clock):
    app = create_app(
        {
            'TESTING': True,
            'SECRET_KEY': 'test-secret',
            'SQLALCHEMY_DATABASE_URI': 'sqlite://',
            'APP_ORIGIN': 'https://app.example.org',
            'INVITATION_SEND_DELAY': 0,
            'EMAIL_API_URL': '',
            'MAIL_SERVER': '',
        },
        transport=transport,
        accounts=accounts,
        clock=clock,
    )
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def services(app):
    return app.extensions['invitations']


@pytest.fixture
def manager(services):
    return services.manager


@pytest.fixture
def admin_client(app):
    client = app.test_client()
    with client.session_transaction() as session:
        session['member_id'] = 1
        session['is_admin'] = True
    return client
