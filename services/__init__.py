import time
from dataclasses import dataclass

from config import InvitationSettings
from utils.helpers import utcnow
from .accounts import AccountFlows, MailAccountFlows
from .bulk import BulkDispatcher, BatchResult
from .dispatcher import NotificationDispatcher
from .guests import GuestLinker
from .invitation_store import InvitationStore
from .lifecycle import InvitationManager, Outcome, TokenValidation
from .mailer import build_transport
from .resolver import ExistingAccountResolver, Disposition
from .tokens import generate_invitation_token


@dataclass
class InvitationServices:
    settings: InvitationSettings
    store: InvitationStore
    manager: InvitationManager
    bulk: BulkDispatcher
    guests: GuestLinker


def init_invitation_services(app, transport=None, accounts=None, clock=utcnow,
                             sleep=time.sleep):
    """Wire the invitation services for an app and keep them on app.extensions"""
    settings = InvitationSettings.from_app(app)
    transport = transport or build_transport(app, settings.mail_sender)
    accounts = accounts or MailAccountFlows(transport, settings, app.config['SECRET_KEY'])

    store = InvitationStore()
    resolver = ExistingAccountResolver(store, settings, clock=clock)
    dispatcher = NotificationDispatcher(transport, settings)
    manager = InvitationManager(store, resolver, dispatcher, accounts, settings, clock=clock)

    services = InvitationServices(
        settings=settings,
        store=store,
        manager=manager,
        bulk=BulkDispatcher(manager, settings, sleep=sleep),
        guests=GuestLinker(manager, store, settings, clock=clock),
    )
    app.extensions['invitations'] = services
    return services


__all__ = ['init_invitation_services', 'InvitationServices', 'InvitationSettings',
           'AccountFlows', 'MailAccountFlows', 'BulkDispatcher', 'BatchResult',
           'NotificationDispatcher', 'GuestLinker', 'InvitationStore',
           'InvitationManager', 'Outcome', 'TokenValidation',
           'ExistingAccountResolver', 'Disposition', 'generate_invitation_token']
