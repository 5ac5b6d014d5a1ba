"""
Email service using SendGrid for sending notifications.
"""

import os
import logging
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail, Email, To, Content
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

FRONTEND_BASE_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")


def get_bool_env(key: str, default: bool = False) -> bool:
    """
    Parse a boolean environment variable.

    "true", "1" and "yes" (any case) are True; any other value is False.
    """
    value = os.getenv(key)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes")


# SendGrid Configuration
SENDGRID_API_KEY = os.getenv("SENDGRID_API_KEY")
SENDGRID_FROM_EMAIL = os.getenv("SENDGRID_FROM_EMAIL", "noreply@agentsport.app")


def is_enabled() -> bool:
    """Whether outgoing email is switched on (ENABLE_EMAIL, off by default)."""
    return get_bool_env("ENABLE_EMAIL", default=False)


def build_invitation_url(token: str) -> str:
    """Link a prospective agent follows to register and accept an invitation."""
    return f"{FRONTEND_BASE_URL}/register?invitation={token}"


async def send_invitation_email(
    target_email: str,
    target_name: str,
    player_name: str,
    token: str,
) -> bool:
    """
    Invite a not-yet-registered agent to represent a player.

    Fire-and-forget: never raises. When email is disabled or SendGrid is not
    configured the invitation is only logged.

    Args:
        target_email: Prospective agent's email
        target_name: Prospective agent's name
        player_name: Name of the player who named them
        token: Invitation token

    Returns:
        bool: True if the email was sent or deliberately skipped, False on failure
    """
    invite_url = build_invitation_url(token)

    if not is_enabled():
        logger.info(
            "Email sending is disabled. Invitation for %s (player %s): %s",
            target_email, player_name, invite_url,
        )
        return True

    if not SENDGRID_API_KEY:
        logger.warning("SENDGRID_API_KEY not configured. Invitation email to %s skipped.", target_email)
        return True

    try:
        subject = f"{player_name} wants you as their agent on AgentSport"
        body_lines = [
            f"Hi {target_name},",
            "",
            f"{player_name} has named you as their agent on AgentSport.",
            "Create your agency account to confirm the representation:",
            "",
            invite_url,
            "",
            "---",
            "This is an automated message from AgentSport.",
        ]

        message = Mail(
            from_email=Email(SENDGRID_FROM_EMAIL),
            to_emails=To(target_email),
            subject=subject,
            plain_text_content=Content("text/plain", "\n".join(body_lines)),
        )

        sg = SendGridAPIClient(SENDGRID_API_KEY)
        response = sg.send(message)

        if 200 <= response.status_code < 300:
            logger.info("Invitation email sent to %s", target_email)
            return True
        logger.error("SendGrid returned status %s: %s", response.status_code, response.body)
        return False

    except Exception:
        # Email failures must not break registration
        logger.warning("Failed to send invitation email to %s", target_email, exc_info=True)
        return False
