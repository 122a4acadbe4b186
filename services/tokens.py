import secrets

# 32 bytes of randomness, hex encoded (64 chars, URL safe as-is)
TOKEN_BYTES = 32


def generate_invitation_token():
    """Generate an unguessable invitation token.

    Not derived from the email or row id. Entropy failures propagate.
    """
    return secrets.token_hex(TOKEN_BYTES)
