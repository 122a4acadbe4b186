"""
Email bodies for invitations and account emails
"""
from markupsafe import escape


def render_invitation_email(settings, link, reminder=False, full_name=None):
    """
    Build the invitation (or reminder) email.

    Args:
        settings: InvitationSettings with club name and expiry window
        link: registration link carrying the invitation token
        reminder: True when re-sending an invitation that is still open
        full_name: optional greeting name

    Returns:
        tuple: (subject, html, text)
    """
    club = settings.club_name
    greeting = f"Hi {full_name}," if full_name else "Hi,"

    if reminder:
        subject = f"Reminder: complete your {club} registration"
        intro = "Just a reminder that your invitation to join us is still waiting for you."
    else:
        subject = f"Welcome to {club} - Complete Your Registration"
        intro = "You're invited to join our running community!"

    # Plain text body
    text = f"""{greeting}

{intro}

As a member, you'll be able to:
- Book your place on runs
- Track your running sessions
- Manage your membership details
- Receive run updates and notifications

Complete your registration here:
{link}

Can't register right away? No worries! You can still turn up to any run as usual,
and our run leaders can mark your attendance on the day.

See you on the trails!
The {club} Team

---
This invitation link expires in {settings.ttl_days} days.
If you didn't expect this email, you can safely ignore it.
"""

    # HTML body; names come from admin input
    html_greeting = escape(greeting)
    html_club = escape(club)
    html = f"""
<html>
<body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; color: #333;">
    <h2 style="color: #dc2626;">Welcome to {html_club}!</h2>

    <p>{html_greeting}</p>

    <p><strong>{intro}</strong></p>

    <ul>
        <li>Book your place on runs</li>
        <li>Track your running sessions</li>
        <li>Manage your membership details</li>
        <li>Receive run updates and notifications</li>
    </ul>

    <p>
        <a href="{link}"
           style="background-color: #dc2626; color: white; padding: 12px 24px; text-decoration: none; border-radius: 6px; display: inline-block;">
            Complete Your Registration
        </a>
    </p>

    <p style="font-size: 13px; color: #666;">
        Or copy this link into your browser:<br>
        <span style="word-break: break-all;">{link}</span>
    </p>

    <p style="color: #6b7280; font-size: 12px; margin-top: 30px;">
        This invitation link expires in {settings.ttl_days} days.
        If you didn't expect this email, you can safely ignore it.
    </p>
</body>
</html>
"""
    return subject, html, text


def render_account_email(settings, link, purpose):
    """Password reset / email verification message. purpose is 'reset' or 'verify'."""
    club = settings.club_name
    if purpose == 'reset':
        subject = f"{club} - Reset your password"
        action = "You already have an account with us. Use the link below to set a new password."
        button = "Reset Password"
    else:
        subject = f"{club} - Verify your email address"
        action = "Your registration is almost complete. Please verify your email address."
        button = "Verify Email"

    text = f"""Hi,

{action}

{link}

The {club} Team
"""

    html = f"""
<html>
<body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; color: #333;">
    <p>Hi,</p>
    <p>{action}</p>
    <p>
        <a href="{link}"
           style="background-color: #2563eb; color: white; padding: 10px 20px; text-decoration: none; border-radius: 5px; display: inline-block;">
            {button}
        </a>
    </p>
    <p style="color: #6b7280; font-size: 12px; margin-top: 30px;">The {escape(club)} Team</p>
</body>
</html>
"""
    return subject, html, text
