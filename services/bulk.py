"""
Batch invitations.

Addresses go through InvitationManager.invite() one at a time with a fixed pause
between sends to stay under the mail provider's rate limit. Do not parallelise this
without working out a new rate budget for the transport.

A failure on one address is recorded and the batch carries on. There is no
checkpoint: re-running an interrupted batch is safe because invite() turns already
invited addresses into reminders.
"""
import logging
import time
from dataclasses import dataclass, field
from typing import List

from services.audit import record_event
from services.lifecycle import Outcome
from utils.helpers import dedupe_emails, normalize_email, parse_roster

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    total: int = 0
    successful: int = 0
    failed: int = 0
    results: List[Outcome] = field(default_factory=list)

    def to_dict(self):
        return {
            'total': self.total,
            'successful': self.successful,
            'failed': self.failed,
            'results': [outcome.to_dict() for outcome in self.results],
        }


class BulkDispatcher:
    def __init__(self, manager, settings, sleep=time.sleep):
        self.manager = manager
        self.delay = settings.send_delay
        self.sleep = sleep

    @staticmethod
    def _roster(entries):
        """Normalize entries (addresses or (email, full_name) pairs), first one wins"""
        names = {}
        emails = []
        for entry in entries:
            email, full_name = entry if isinstance(entry, (tuple, list)) else (entry, None)
            email = normalize_email(email)
            if email not in names:
                names[email] = full_name
            emails.append(email)
        return [(email, names[email]) for email in dedupe_emails(emails)]

    def send_batch(self, emails, invited_by=None, on_progress=None, delay=None):
        """Invite every address once, in order.

        emails holds plain addresses or (email, full_name) pairs. on_progress(current,
        total, email, outcome) runs after each address, before the next one starts;
        an error raised by it is logged and the batch continues.
        """
        delay = self.delay if delay is None else delay
        batch = self._roster(emails)
        result = BatchResult(total=len(batch))
        logger.info(f"[BULK] Sending {result.total} invitations ({delay}s between sends)")

        for index, (email, full_name) in enumerate(batch, start=1):
            try:
                outcome = self.manager.invite(email, invited_by=invited_by, full_name=full_name)
            except Exception as e:
                logger.exception(f"[BULK] Unexpected error inviting {email}")
                outcome = Outcome.failure(f'Error: {e}', 'unexpected', email=email)

            if outcome.success:
                result.successful += 1
            else:
                result.failed += 1
            result.results.append(outcome)

            if on_progress:
                try:
                    on_progress(index, result.total, email, outcome)
                except Exception:
                    logger.exception(f"[BULK] Progress callback failed at {index}/{result.total}")

            if index < result.total:
                self.sleep(delay)

        record_event('bulk_invitations_sent', {
            'total': result.total,
            'successful': result.successful,
            'failed': result.failed,
            'invited_by': invited_by,
        })
        logger.info(f"[BULK] Done: {result.successful}/{result.total} sent, {result.failed} failed")
        return result

    def send_text(self, text, invited_by=None, on_progress=None):
        """Batch from pasted text or an uploaded file's contents (address list or CSV)"""
        return self.send_batch(parse_roster(text), invited_by=invited_by,
                               on_progress=on_progress)
