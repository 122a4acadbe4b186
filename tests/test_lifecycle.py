"""Single-address invitation lifecycle."""
import pytest

from models import db, Invitation, Member, PendingMember, SecurityEvent
from services.lifecycle import EXPIRED_MESSAGE, INVALID_LINK_MESSAGE
from utils.errors import InvitationConflict, InvitationStoreError


def pending_for(email):
    return Invitation.query.filter_by(email=email, status='pending').all()


def test_invite_unknown_creates_and_sends(manager, transport, clock):
    outcome = manager.invite('New.Runner@Example.com', invited_by=7)

    assert outcome.success
    assert outcome.action == 'invitation_sent'
    invitation = db.session.get(Invitation, outcome.invitation_id)
    assert invitation.email == 'new.runner@example.com'
    assert invitation.status == 'pending'
    assert invitation.sent is True
    assert invitation.sent_at == clock.now
    assert invitation.invited_by == '7'
    assert (invitation.expires_at - invitation.invited_at).days == 30

    [message] = transport.sent_to('new.runner@example.com')
    assert f'https://app.example.org/register?token={invitation.token}' in message['text']
    assert 'new.runner@example.com' not in message['text'].split('register?')[1]


def test_second_invite_reuses_token(manager, transport):
    first = manager.invite('runner@example.com')
    token = db.session.get(Invitation, first.invitation_id).token

    second = manager.invite('RUNNER@example.com ')

    assert second.success
    assert second.action == 'reminder_sent'
    assert second.invitation_id == first.invitation_id
    assert len(pending_for('runner@example.com')) == 1
    assert db.session.get(Invitation, first.invitation_id).token == token
    assert all(token in m['text'] for m in transport.sent_to('runner@example.com'))
    assert len(transport.sent_to('runner@example.com')) == 2


def test_full_member_gets_password_reset_only(manager, accounts, transport):
    db.session.add(Member(email='member@example.com', full_name='Full Member',
                          membership_status='active'))
    db.session.commit()

    outcome = manager.invite('member@example.com')

    assert outcome.success
    assert outcome.action == 'password_reset'
    assert accounts.resets == ['member@example.com']
    assert Invitation.query.count() == 0
    assert transport.sent == []


def test_full_member_wins_over_open_invitation(manager, accounts):
    manager.invite('both@example.com')
    db.session.add(Member(email='both@example.com', full_name='Both', membership_status='active'))
    db.session.commit()

    outcome = manager.invite('both@example.com')

    assert outcome.action == 'password_reset'
    assert accounts.resets == ['both@example.com']


def test_full_member_leaves_stale_invitation_untouched(manager, accounts, clock):
    first = manager.invite('stale@example.com')
    db.session.add(Member(email='stale@example.com', full_name='Stale', membership_status='active'))
    db.session.commit()
    clock.advance(days=40)

    outcome = manager.invite('stale@example.com')

    assert outcome.action == 'password_reset'
    assert accounts.resets == ['stale@example.com']
    db.session.expire_all()
    assert db.session.get(Invitation, first.invitation_id).status == 'pending'


def test_awaiting_verification_resends_verification(manager, accounts):
    db.session.add(PendingMember(email='signup@example.com'))
    db.session.commit()

    outcome = manager.invite('signup@example.com')

    assert outcome.success
    assert outcome.action == 'verification_resent'
    assert accounts.verifications == ['signup@example.com']
    assert Invitation.query.count() == 0


def test_open_invitation_wins_over_awaiting_verification(manager, accounts):
    first = manager.invite('mixed@example.com')
    db.session.add(PendingMember(email='mixed@example.com'))
    db.session.commit()

    outcome = manager.invite('mixed@example.com')

    assert outcome.action == 'reminder_sent'
    assert outcome.invitation_id == first.invitation_id
    assert accounts.verifications == []


def test_guest_member_with_real_address_does_not_block(manager, accounts):
    db.session.add(Member(email='guest@example.com', full_name='Old Guest',
                          membership_status='guest', is_temp_runner=True))
    db.session.commit()

    outcome = manager.invite('guest@example.com')

    assert outcome.action == 'invitation_sent'
    assert accounts.resets == []


@pytest.mark.parametrize('bad', ['', 'nope', 'a@b@c'])
def test_invalid_email_has_no_side_effects(manager, transport, accounts, bad):
    outcome = manager.invite(bad)

    assert not outcome.success
    assert outcome.error == 'validation'
    assert Invitation.query.count() == 0
    assert transport.sent == []
    assert accounts.resets == [] and accounts.verifications == []


def test_transport_failure_leaves_pending_unsent_then_retry_reuses_token(manager, transport):
    transport.fail_for.add('flaky@example.com')

    failed = manager.invite('flaky@example.com')

    assert not failed.success
    assert failed.error == 'transport'
    invitation = db.session.get(Invitation, failed.invitation_id)
    assert invitation.status == 'pending'
    assert invitation.sent is False
    token = invitation.token

    transport.fail_for.clear()
    retried = manager.invite('flaky@example.com')

    assert retried.success
    assert retried.action == 'reminder_sent'
    invitation = db.session.get(Invitation, failed.invitation_id)
    assert invitation.token == token
    assert invitation.sent is True


def test_store_rejects_second_pending_row(services):
    store = services.store
    store.create('race@example.com', 'a' * 64, 30)

    with pytest.raises(InvitationConflict):
        store.create('race@example.com', 'b' * 64, 30)

    assert len(pending_for('race@example.com')) == 1


def test_conflict_is_reported_as_failure(manager, services, monkeypatch):
    # Simulate losing the race: the resolver saw nothing, then another inviter inserted
    services.store.create('race@example.com', 'c' * 64, 30)
    monkeypatch.setattr(manager.resolver.store, 'find_pending', lambda email: None)

    outcome = manager.invite('race@example.com')

    assert not outcome.success
    assert outcome.error == 'conflict'
    assert len(pending_for('race@example.com')) == 1


def test_validate_token_valid(manager):
    outcome = manager.invite('valid@example.com')
    token = db.session.get(Invitation, outcome.invitation_id).token

    result = manager.validate_token(token)

    assert result.valid
    assert result.email == 'valid@example.com'
    assert result.invitation_id == outcome.invitation_id


def test_validate_token_unknown(manager):
    result = manager.validate_token('0' * 64)

    assert not result.valid
    assert result.reason == 'not_found'
    assert result.error == INVALID_LINK_MESSAGE


def test_validate_token_expires_lazily(manager, clock):
    outcome = manager.invite('late@example.com')
    token = db.session.get(Invitation, outcome.invitation_id).token
    clock.advance(days=31)

    # Nothing changes until the token is looked at
    assert db.session.get(Invitation, outcome.invitation_id).status == 'pending'

    result = manager.validate_token(token)

    assert not result.valid
    assert result.reason == 'expired'
    assert result.error == EXPIRED_MESSAGE
    assert result.error != INVALID_LINK_MESSAGE
    db.session.expire_all()
    assert db.session.get(Invitation, outcome.invitation_id).status == 'expired'


def test_expired_invitation_is_replaced_on_next_invite(manager, clock):
    first = manager.invite('again@example.com')
    clock.advance(days=40)

    second = manager.invite('again@example.com')

    assert second.action == 'invitation_sent'
    assert second.invitation_id != first.invitation_id
    db.session.expire_all()
    assert db.session.get(Invitation, first.invitation_id).status == 'expired'
    assert len(pending_for('again@example.com')) == 1


def test_mark_registered_is_idempotent(manager, clock):
    outcome = manager.invite('joiner@example.com')
    token = db.session.get(Invitation, outcome.invitation_id).token
    registered_at = clock.now

    manager.mark_registered(token)
    clock.advance(hours=2)
    manager.mark_registered(token)

    invitation = db.session.get(Invitation, outcome.invitation_id)
    assert invitation.status == 'registered'
    assert invitation.registered_at == registered_at
    assert manager.validate_token(token).reason == 'registered'


def test_mark_registered_swallows_store_errors(manager, monkeypatch):
    def broken(token, now=None):
        raise InvitationStoreError('database unavailable')

    monkeypatch.setattr(manager.store, 'mark_registered', broken)

    manager.mark_registered('any-token')


def test_status_never_returns_to_pending(manager, clock):
    outcome = manager.invite('done@example.com')
    token = db.session.get(Invitation, outcome.invitation_id).token
    manager.mark_registered(token)

    clock.advance(days=40)
    result = manager.validate_token(token)

    assert not result.valid
    db.session.expire_all()
    assert db.session.get(Invitation, outcome.invitation_id).status == 'registered'


def test_resend_reuses_token(manager, transport):
    outcome = manager.invite('resend@example.com')
    token = db.session.get(Invitation, outcome.invitation_id).token

    resent = manager.resend(outcome.invitation_id)

    assert resent.success
    assert resent.action == 'reminder_sent'
    assert token in transport.sent_to('resend@example.com')[-1]['text']


def test_resend_expired_or_missing(manager, clock):
    outcome = manager.invite('old@example.com')
    clock.advance(days=31)

    expired = manager.resend(outcome.invitation_id)
    missing = manager.resend(9999)

    assert not expired.success and expired.error == 'expired'
    assert db.session.get(Invitation, outcome.invitation_id).status == 'expired'
    assert not missing.success and missing.error == 'not_found'


def test_list_pending_reports_lazy_expiry_without_writing(manager, clock):
    manager.invite('one@example.com')
    clock.advance(days=31)
    manager.invite('two@example.com')

    pending = manager.list_pending()

    assert [p['email'] for p in pending] == ['two@example.com', 'one@example.com']
    assert [p['is_expired'] for p in pending] == [False, True]
    assert Invitation.query.filter_by(status='expired').count() == 0


def test_invite_records_audit_event(manager):
    outcome = manager.invite('audited@example.com', invited_by=3)

    event = SecurityEvent.query.filter_by(event_type='invitation_sent').one()
    assert event.details['invitation_id'] == outcome.invitation_id
    assert event.details['email'] == 'audited@example.com'


def drop_invitation_table():
    db.session.commit()
    Invitation.__table__.drop(db.engine)


def test_invite_reports_store_read_failure(manager, transport):
    drop_invitation_table()

    outcome = manager.invite('unreachable@example.com')

    assert not outcome.success
    assert outcome.error == 'store'
    assert transport.sent == []


def test_validate_token_reports_store_read_failure(manager):
    drop_invitation_table()

    result = manager.validate_token('a' * 64)

    assert not result.valid
    assert result.reason == 'error'


def test_resend_reports_store_read_failure(manager):
    drop_invitation_table()

    outcome = manager.resend(1)

    assert outcome.error == 'store'


def test_validate_token_returns_invited_name(manager):
    outcome = manager.invite('named@example.com', full_name='Nia Named')
    token = db.session.get(Invitation, outcome.invitation_id).token

    assert manager.validate_token(token).full_name == 'Nia Named'
