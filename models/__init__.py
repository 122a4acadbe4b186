from .database import db
from .invitation import Invitation
from .member import Member, PendingMember
from .security_event import SecurityEvent

__all__ = ['db', 'Invitation', 'Member', 'PendingMember', 'SecurityEvent']
