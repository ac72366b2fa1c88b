"""Notification service for reimbursement status e-mails.

Messages go out through Amazon SES (v2 API). Sending is best-effort:
failures are logged and never propagated, so a status change that has
already been committed is never undone by a mail problem.
"""

import asyncio
import logging
from html import escape

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from fundledger.config import Settings, get_settings
from fundledger.models.reimbursement_request import ReimbursementRequestStatus

logger = logging.getLogger(__name__)


class NotificationService:
    """Send reimbursement status change e-mails to requesters."""

    def __init__(self, settings: Settings | None = None, client=None):
        """Initialize service.

        Args:
            settings: Application settings (default: ``get_settings()``)
            client: Pre-built SES v2 client; created lazily when omitted
        """
        self.settings = settings or get_settings()
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client("sesv2", region_name=self.settings.aws_region)
        return self._client

    @property
    def from_address(self) -> str:
        return f"no-reply@{self.settings.email_from_domain}"

    def build_status_change_message(
        self, status: ReimbursementRequestStatus
    ) -> tuple[str, str, str]:
        """Render subject, HTML body and text body for a status change.

        Returns:
            (subject, html_body, text_body)
        """
        label = status.value.capitalize()
        subject = f"Reimbursement Request {label}"
        link = self.settings.base_url
        text_body = (
            f"The status of your reimbursement request is now {label}.\n\n"
            f"View your reimbursement requests at {link}"
        )
        html_body = (
            f"<p>The status of your reimbursement request is now <strong>{escape(label)}</strong>.</p>"
            f'<p><a href="{escape(link, quote=True)}">View your reimbursement requests</a></p>'
        )
        return subject, html_body, text_body

    def _send_email(self, to_address: str, subject: str, html_body: str, text_body: str) -> None:
        self.client.send_email(
            FromEmailAddress=self.from_address,
            Destination={"ToAddresses": [to_address]},
            Content={
                "Simple": {
                    "Subject": {"Data": subject, "Charset": "UTF-8"},
                    "Body": {
                        "Html": {"Data": html_body, "Charset": "UTF-8"},
                        "Text": {"Data": text_body, "Charset": "UTF-8"},
                    },
                }
            },
        )

    async def send_status_change_notification(
        self, email: str, status: ReimbursementRequestStatus
    ) -> bool:
        """Tell a requester their reimbursement request changed status.

        Args:
            email: Requester's e-mail address
            status: New status of the request

        Returns:
            True if SES accepted the message, False if it was skipped or failed
        """
        if not self.settings.notifications_enabled:
            logger.debug(f"Notifications disabled, skipping {status.value} e-mail to {email}")
            return False

        subject, html_body, text_body = self.build_status_change_message(status)
        try:
            # boto3 is blocking; keep the event loop free
            await asyncio.to_thread(self._send_email, email, subject, html_body, text_body)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to send {status.value} notification to {email}: {e}", exc_info=True)
            return False
        except Exception as e:
            logger.error(
                f"Unexpected error sending {status.value} notification to {email}: {e}",
                exc_info=True,
            )
            return False

        logger.info(f"Sent {status.value} notification to {email}")
        return True


__all__ = ["NotificationService"]
