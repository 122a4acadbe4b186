"""
flask invitations ... commands for running batches outside the admin pages
"""
import json
from datetime import datetime
import click
from flask import current_app
from flask.cli import AppGroup
from utils.helpers import parse_roster

invitations_cli = AppGroup('invitations', help='Send and inspect member invitations.')


@invitations_cli.command('send')
@click.argument('email_file', type=click.File('r', encoding='utf-8'))
@click.option('--invited-by', default=None, help='Member id recorded as the inviter.')
@click.option('--delay', type=float, default=None, help='Seconds between sends (default from config).')
@click.option('--output', type=click.Path(dir_okay=False), default=None,
              help='Where to write the JSON results.')
def send_command(email_file, invited_by, delay, output):
    """Invite every address in EMAIL_FILE.

    The file is either a plain list (newline, comma or semicolon separated) or a
    CSV with a header row such as full_name,email.
    """
    services = current_app.extensions['invitations']
    roster = parse_roster(email_file.read())
    if not roster:
        click.echo('No email addresses found.')
        return

    click.echo(f'Sending {len(roster)} invitations...')

    def report(current, total, email, outcome):
        mark = '✓' if outcome.success else '✗'
        click.echo(f'[{current}/{total}] {mark} {email}: {outcome.message}')

    result = services.bulk.send_batch(roster, invited_by=invited_by,
                                      on_progress=report, delay=delay)

    if output is None:
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        output = f'invitation-results-{timestamp}.json'
    with open(output, 'w', encoding='utf-8') as f:
        json.dump(result.to_dict(), f, indent=2)

    click.echo(f'Sent successfully: {result.successful}/{result.total}')
    click.echo(f'Failed: {result.failed}/{result.total}')
    click.echo(f'Results saved to: {output}')

    if result.failed:
        raise SystemExit(1)


@invitations_cli.command('pending')
def pending_command():
    """List open invitations."""
    pending = current_app.extensions['invitations'].manager.list_pending()
    if not pending:
        click.echo('No pending invitations.')
        return
    for invitation in pending:
        flags = []
        if not invitation['sent']:
            flags.append('not sent')
        if invitation['is_expired']:
            flags.append('expired')
        suffix = f" ({', '.join(flags)})" if flags else ''
        click.echo(f"{invitation['id']}\t{invitation['email']}\texpires {invitation['expires_at']}{suffix}")
