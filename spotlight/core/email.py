# spotlight/core/email.py
"""
Email service using Resend for sending transactional emails.

Every sender returns {"success": bool, ...} and never raises: a failed
email must not roll back the business operation that triggered it.
"""
import logging

import resend
from spotlight.core.config import settings

logger = logging.getLogger(__name__)


def init_resend():
    """Initialize Resend with API key."""
    resend.api_key = settings.RESEND_API_KEY


def send_email(to_email: str, subject: str, html_content: str) -> dict:
    init_resend()

    params = {
        "from": f"Jugnu Spotlight <spotlight@{settings.RESEND_FROM_DOMAIN}>",
        "to": [to_email],
        "subject": subject,
        "html": html_content,
    }

    try:
        response = resend.Emails.send(params)
        logger.info(f"Email '{subject}' sent to {to_email}")
        return {"success": True, "id": response.get("id")}
    except Exception as e:
        logger.error(f"Failed to send email to {to_email}: {e}")
        return {"success": False, "error": str(e)}


def build_portal_url(token: str) -> str:
    return f"{settings.APP_BASE_URL.rstrip('/')}/sponsor/{token}"


def send_portal_onboarding_email(
    to_email: str,
    contact_name: str,
    business_name: str,
    portal_token: str,
    expires_in_days: int,
) -> dict:
    """
    Send the sponsor their analytics portal link after approval.

    Args:
        to_email: Sponsor contact email
        contact_name: Greeting name
        business_name: Sponsor business name
        portal_token: Token embedded in the portal URL
        expires_in_days: How long the link stays valid

    Returns:
        {"success": True, "id": ...} or {"success": False, "error": ...}
    """
    portal_url = build_portal_url(portal_token)

    html_content = f"""
    <!DOCTYPE html>
    <html>
    <head>
        <meta charset="utf-8">
        <style>
            body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
            .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
            .header {{ background: #c0580f; color: white; padding: 30px; text-align: center; border-radius: 10px 10px 0 0; }}
            .content {{ background: #f9f9f9; padding: 30px; border-radius: 0 0 10px 10px; }}
            .button {{ display: inline-block; background: #c0580f; color: white; padding: 14px 28px; text-decoration: none; border-radius: 6px; }}
            .footer {{ text-align: center; color: #888; font-size: 12px; margin-top: 20px; }}
        </style>
    </head>
    <body>
        <div class="container">
            <div class="header">
                <h1>Your Spotlight campaign is approved</h1>
            </div>
            <div class="content">
                <p>Hi {contact_name},</p>
                <p>Thanks for sponsoring with us. The campaign for <strong>{business_name}</strong>
                has been approved, and you can follow its performance in your analytics portal.</p>

                <p style="text-align: center;">
                    <a class="button" href="{portal_url}">Open analytics portal</a>
                </p>

                <p style="font-size: 13px; color: #666;">This link is valid for {expires_in_days} days.
                Reply to this email if you need a new one.</p>

                <p>Best regards,<br>The Jugnu Team</p>
            </div>
            <div class="footer">
                <p>{portal_url}</p>
            </div>
        </div>
    </body>
    </html>
    """

    result = send_email(
        to_email,
        f"Your sponsor analytics portal for {business_name}",
        html_content,
    )
    result["portal_url"] = portal_url
    return result
