# =============================================================================
# Email Delivery Integration (AWS SES)
# =============================================================================
#
# Setup:
#   1. Verify your sending email in AWS SES console
#   2. Set env vars:
#      - AWS_SES_FROM_EMAIL=noreply@yourdomain.com
#      - AWS_ACCESS_KEY_ID=...
#      - AWS_SECRET_ACCESS_KEY=...
#      - AWS_REGION=us-east-1
#      - APP_URL=https://portal.yourdomain.com (base for links in emails)
#
# Without SES credentials the rendered text is logged instead of sent.
#
# =============================================================================

from __future__ import annotations

import asyncio
import logging
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from portal.config import Settings, get_settings

logger = logging.getLogger(__name__)


# =============================================================================
# Email Templates
# =============================================================================

_BUTTON = (
    'style="background: #2563EB; color: white; padding: 12px 30px; '
    'text-decoration: none; border-radius: 6px; display: inline-block;"'
)

TEMPLATES = {
    "invitation": {
        "subject": "You've been invited to join your team's admin portal",
        "html": """
        <html>
        <body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
            <h1 style="color: #333;">You're invited</h1>
            <p>You have been invited to join your company's workspace. Sign in with {email} and accept the invitation:</p>
            <p style="text-align: center; margin: 30px 0;">
                <a href="{accept_url}" """ + _BUTTON + """>Accept Invitation</a>
            </p>
            <p style="color: #666; font-size: 14px;">Or copy this link: {accept_url}</p>
            <p style="color: #666; font-size: 14px;">This invitation expires in {expiry_days} days.</p>
        </body>
        </html>
        """,
        "text": """
You're invited

You have been invited to join your company's workspace.
Sign in with {email} and accept the invitation:
{accept_url}

This invitation expires in {expiry_days} days.
        """,
    },

    "password_reset": {
        "subject": "Reset your admin portal password",
        "html": """
        <html>
        <body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
            <h1 style="color: #333;">Reset Your Password</h1>
            <p>We received a request to reset your password. Click the button below to choose a new one:</p>
            <p style="text-align: center; margin: 30px 0;">
                <a href="{reset_url}" """ + _BUTTON + """>Reset Password</a>
            </p>
            <p style="color: #666; font-size: 14px;">If you didn't request this, you can safely ignore this email.</p>
        </body>
        </html>
        """,
        "text": """
Reset Your Password

We received a request to reset your password. Visit this link to choose a new one:
{reset_url}

If you didn't request this, you can safely ignore this email.
        """,
    },
}


# =============================================================================
# Email Service
# =============================================================================

class EmailService:
    """Send emails via AWS SES."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self._client = None

    @property
    def client(self):
        """Lazy-load SES client."""
        if self._client is None:
            self._client = boto3.client(
                'ses',
                region_name=self.settings.aws_region,
                aws_access_key_id=self.settings.aws_access_key_id,
                aws_secret_access_key=self.settings.aws_secret_access_key,
            )
        return self._client

    @property
    def is_configured(self) -> bool:
        """Check if email sending is properly configured."""
        return self.settings.use_aws and bool(self.settings.aws_ses_from_email)

    async def send(
        self,
        to: str,
        template: str,
        data: dict[str, Any] | None = None,
    ) -> bool:
        """
        Send an email using a template.

        Returns:
            True if sent, False if skipped or failed
        """
        if template not in TEMPLATES:
            logger.error(f"Unknown email template: {template}")
            return False

        tpl = TEMPLATES[template]
        data = data or {}

        try:
            html_body = tpl["html"].format(**data)
            text_body = tpl["text"].format(**data)
        except KeyError as e:
            logger.error(f"Missing template variable for '{template}': {e}")
            return False

        if not self.is_configured:
            logger.warning(f"Email not configured - would send '{template}' to {to}")
            logger.info(f"Email content: {text_body}")
            return False

        try:
            # boto3 is blocking; keep the event loop free
            response = await asyncio.to_thread(
                self.client.send_email,
                Source=self.settings.aws_ses_from_email,
                Destination={"ToAddresses": [to]},
                Message={
                    "Subject": {"Data": tpl["subject"], "Charset": "UTF-8"},
                    "Body": {
                        "Html": {"Data": html_body, "Charset": "UTF-8"},
                        "Text": {"Data": text_body, "Charset": "UTF-8"},
                    },
                },
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to send email to {to}: {e}")
            return False

        logger.info(f"Email sent to {to}: {template} (MessageId: {response['MessageId']})")
        return True

    async def send_invitation(
        self,
        email: str,
        company_id: str,
        invited_by: str,
        token: str | None = None,
    ) -> bool:
        """Send an invitation with its accept link."""
        accept_url = f"{self.settings.app_url}/invitations/{token}/accept" if token else self.settings.app_url
        logger.info(f"Sending invitation for company {company_id} (invited by {invited_by})")
        return await self.send(
            to=email,
            template="invitation",
            data={
                "email": email,
                "accept_url": accept_url,
                "expiry_days": self.settings.invitation_expiry_days,
            },
        )

    async def send_password_reset(self, email: str, reset_token: str) -> bool:
        """Send password reset email."""
        reset_url = f"{self.settings.app_url}/reset-password?token={reset_token}"
        return await self.send(
            to=email,
            template="password_reset",
            data={"reset_url": reset_url},
        )
