import csv
import io
import re
import secrets
from datetime import datetime, timezone
from email_validator import validate_email, EmailNotValidError
from utils.errors import InvalidEmail

# Bulk paste and uploaded files separate addresses with any of these
EMAIL_LIST_SEPARATORS = re.compile(r'[\n\r,;]+')


def utcnow():
    """Naive UTC timestamp, matching how the database columns are stored"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def normalize_email(email):
    """Lower-case and trim an address"""
    return (email or '').strip().lower()


def validate_email_address(email):
    """Return the normalized address or raise InvalidEmail"""
    clean = normalize_email(email)
    if not clean:
        raise InvalidEmail('Email address is required')
    try:
        validate_email(clean, check_deliverability=False)
    except EmailNotValidError as e:
        raise InvalidEmail(f'Invalid email address: {e}') from e
    return clean


def parse_email_list(text):
    """Split pasted text into normalized, non-blank addresses (order kept)"""
    emails = [normalize_email(part) for part in EMAIL_LIST_SEPARATORS.split(text or '')]
    return [e for e in emails if e]


def parse_roster(text):
    """Parse pasted text or an uploaded file into (email, full_name) pairs.

    A CSV with a header row naming an 'email' column (and optionally
    'full_name' or 'name') keeps each row's name; anything else is read as a
    plain address list with no names.
    """
    text = text or ''
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
        return []

    header = [cell.strip().lower() for cell in next(csv.reader([lines[0]]))]
    if 'email' not in header:
        return [(email, None) for email in parse_email_list(text)]

    roster = []
    for row in csv.DictReader(io.StringIO('\n'.join(lines))):
        row = {key.strip().lower(): (value or '').strip()
               for key, value in row.items() if key is not None}
        email = normalize_email(row.get('email'))
        if not email:
            continue
        full_name = row.get('full_name') or row.get('name') or None
        roster.append((email, full_name))
    return roster


def dedupe_emails(emails):
    """Drop case-insensitive duplicates, keeping the first occurrence"""
    seen = set()
    unique = []
    for email in emails:
        key = normalize_email(email)
        if key in seen:
            continue
        seen.add(key)
        unique.append(email)
    return unique


def placeholder_email(domain, now=None):
    """Synthetic address for guest records, e.g. temp-1718000000000-a1b2c3@runalcester.temp"""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    stamp = int(now.timestamp() * 1000)
    # suffix keeps two guests created in the same millisecond apart
    return f"temp-{stamp}-{secrets.token_hex(3)}@{domain}"


def is_placeholder_email(email, domain):
    email = normalize_email(email)
    return email.startswith('temp-') or email.endswith('@' + domain.lower())
