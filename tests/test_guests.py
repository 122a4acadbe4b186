import re

from models import db, Invitation, Member
from services.resolver import OPEN_INVITATION
from services.lifecycle import Outcome


def test_guest_never_stores_real_address(services):
    member, outcome = services.guests.create_guest('Rita Runner', email='r@x.com',
                                                   send_invitation=True)

    assert re.match(r'^temp-\d+-[0-9a-f]{6}@runalcester\.temp$', member.email)
    assert member.email != 'r@x.com'
    assert member.membership_status == 'guest'
    assert Member.query.filter_by(email='r@x.com').count() == 0

    assert outcome.success
    invitation = db.session.get(Invitation, outcome.invitation_id)
    assert invitation.email == 'r@x.com'
    assert invitation.linked_guest_member_id == member.id
    assert invitation.full_name == 'Rita Runner'


def test_guest_without_invitation(services, transport):
    member, outcome = services.guests.create_guest('Walk In')

    assert outcome is None
    assert member.is_temp_runner
    assert Invitation.query.count() == 0
    assert transport.sent == []


def test_guest_does_not_block_later_invite(services):
    services.guests.create_guest('Guest First', email='later@example.com', send_invitation=True)

    disposition = services.manager.resolver.resolve('later@example.com')

    assert disposition.kind == OPEN_INVITATION


def test_link_if_sent_ignores_failures(services):
    member, _ = services.guests.create_guest('No Link')

    assert services.guests.link_if_sent(Outcome.failure('nope', 'transport'), member.id) is False
    assert services.guests.link_if_sent(
        Outcome(True, 'reset', action='password_reset'), member.id) is False
