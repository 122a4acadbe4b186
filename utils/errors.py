class InvitationError(Exception):
    """Base class for invitation failures that are reported, not crashed on."""
    kind = 'error'


class InvalidEmail(InvitationError):
    kind = 'validation'


class InvitationConflict(InvitationError):
    """Another open invitation for the address won the race to the store."""
    kind = 'conflict'


class InvitationStoreError(InvitationError):
    kind = 'store'


class MailTransportError(InvitationError):
    kind = 'transport'


class TokenGenerationError(InvitationError):
    kind = 'token'
