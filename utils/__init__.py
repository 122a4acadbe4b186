from .helpers import (normalize_email, validate_email_address, parse_email_list,
                      parse_roster, dedupe_emails, placeholder_email, is_placeholder_email, utcnow)
from .errors import (InvitationError, InvalidEmail, InvitationConflict,
                     InvitationStoreError, MailTransportError, TokenGenerationError)

__all__ = ['normalize_email', 'validate_email_address', 'parse_email_list', 'parse_roster',
           'dedupe_emails', 'placeholder_email', 'is_placeholder_email', 'utcnow',
           'InvitationError', 'InvalidEmail', 'InvitationConflict',
           'InvitationStoreError', 'MailTransportError', 'TokenGenerationError']
