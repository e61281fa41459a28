"""Fire-and-forget transactional email for application events.

Mail goes out through the Resend HTTP API (httpx). Exceptions are caught
and logged; notifications never break the main flow. With test mode on,
every message is delivered to the configured test address instead of the
real recipient.
"""

import logging
from datetime import datetime, timezone
from html import escape

import httpx
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from billboard.core.config import settings
from billboard.models.application import Application
from billboard.models.campaign import Campaign
from billboard.models.user_profile import UserProfile

logger = logging.getLogger(__name__)

_ACCEPT_COLOR = "#8BFF61"
_REJECT_COLOR = "#ff6b6b"

_LAYOUT = """\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <div style="background-color: #171717; color: #D9D9D9; padding: 20px; border-radius: 5px;">
    {body}
    <hr style="border-color: #D9D9D9; border-style: solid; margin: 20px 0;" />
    <p style="font-size: 12px; color: #D9D9D9; margin: 0;">&copy; {year} Human Billboard. All rights reserved.</p>
  </div>
</div>
"""

_RECEIVED_BODY = """\
<h1 style="color: #8BFF61; margin-bottom: 20px;">New Application Received!</h1>
<p style="font-size: 16px;">Hi {business_name},</p>
<p style="font-size: 16px;">Great news! <strong>{applicant_name}</strong> has applied for your campaign
<strong style="color: #8BFF61;">{campaign_title}</strong>.</p>
{message_block}
<p><a href="{dashboard_url}" style="background-color: #8BFF61; color: #171717; padding: 12px 24px; border-radius: 5px; text-decoration: none; font-weight: bold; display: inline-block;">Review Application</a></p>
<p style="font-size: 14px;">Log in to your Human Billboard dashboard to view the full application and respond.</p>
"""

_MESSAGE_BLOCK = """\
<div style="background-color: #2a2a2a; padding: 15px; border-radius: 5px; margin-bottom: 20px;">
  <p style="font-size: 14px; margin: 0 0 10px 0;"><strong>Message from applicant:</strong></p>
  <p style="font-size: 14px; margin: 0; font-style: italic;">{message}</p>
</div>
"""

_STATUS_BODY = """\
<h1 style="color: {color}; margin-bottom: 20px;">Application {status_text}</h1>
<p style="font-size: 16px;">Hi {advertiser_name},</p>
<p style="font-size: 16px;">Your application for <strong style="color: #8BFF61;">{campaign_title}</strong>
has been <strong style="color: {color};">{status_word}</strong> by <strong>{business_name}</strong>.</p>
<p><a href="{dashboard_url}" style="background-color: {color}; color: {button_text}; padding: 12px 24px; border-radius: 5px; text-decoration: none; font-weight: bold; display: inline-block;">View Details</a></p>
<p style="font-size: 14px;">Log in to your Human Billboard dashboard to see more details and next steps.</p>
"""


class EmailDeliveryError(Exception):
    """The mail provider refused the message."""


def resolve_recipient(email: str) -> str:
    """Apply test-mode redirection to an outgoing address."""
    return settings.email_test_address if settings.email_test_mode else email


def _render(body: str) -> str:
    return _LAYOUT.format(body=body, year=datetime.now(timezone.utc).year)


def render_application_received(
    business_name: str,
    campaign_title: str,
    applicant_name: str,
    applicant_message: str | None = None,
) -> tuple[str, str]:
    """Return ``(subject, html)`` for the business-facing notice."""
    subject = f'New Application: {applicant_name} applied for "{campaign_title}"'
    message_block = (
        _MESSAGE_BLOCK.format(message=escape(applicant_message)) if applicant_message else ""
    )
    html = _render(
        _RECEIVED_BODY.format(
            business_name=escape(business_name),
            applicant_name=escape(applicant_name),
            campaign_title=escape(campaign_title),
            message_block=message_block,
            dashboard_url=f"{settings.site_url}/business/dashboard",
        )
    )
    return subject, html


def render_application_status(
    advertiser_name: str,
    campaign_title: str,
    business_name: str,
    status: str,
) -> tuple[str, str]:
    """Return ``(subject, html)`` for the advertiser-facing decision notice."""
    accepted = status == "accepted"
    status_text = "Accepted" if accepted else "Rejected"
    subject = f"Application {status_text}: {campaign_title}"
    html = _render(
        _STATUS_BODY.format(
            color=_ACCEPT_COLOR if accepted else _REJECT_COLOR,
            button_text="#171717" if accepted else "#fff",
            status_text=status_text,
            status_word=status_text.lower(),
            advertiser_name=escape(advertiser_name),
            campaign_title=escape(campaign_title),
            business_name=escape(business_name),
            dashboard_url=f"{settings.site_url}/advertiser/dashboard",
        )
    )
    return subject, html


@retry(
    retry=retry_if_exception_type(httpx.TransportError),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    reraise=True,
)
async def _post_email(payload: dict) -> dict:
    """POST one message to Resend; transport errors are retried."""
    async with httpx.AsyncClient(timeout=10) as client:
        resp = await client.post(
            settings.resend_api_url,
            json=payload,
            headers={"Authorization": f"Bearer {settings.resend_api_key}"},
        )
    if resp.status_code >= 400:
        raise EmailDeliveryError(f"Resend returned {resp.status_code}: {resp.text}")
    return resp.json()


async def send_email(to: str, subject: str, html: str) -> str | None:
    """Deliver one email. Returns the provider message id, or None if skipped.

    Raises on delivery failure; callers that must not fail wrap this.
    """
    if not settings.resend_api_key:
        logger.warning("RESEND_API_KEY not set, skipping email to %s", to)
        return None

    recipient = resolve_recipient(to)
    data = await _post_email(
        {"from": settings.email_from, "to": [recipient], "subject": subject, "html": html}
    )
    logger.info("Email sent to %s (original: %s)", recipient, to)
    return data.get("id")


async def send_test_email(to: str) -> str | None:
    html = _render(
        "<h1 style=\"color: #8BFF61;\">Test Email</h1>"
        "<p>If you're seeing this, email delivery is working.</p>"
        f"<p><strong>Sent at:</strong> {datetime.now(timezone.utc).isoformat()}</p>"
    )
    return await send_email(to, "Test Email from Human Billboard", html)


async def _load_application_parties(
    db: AsyncSession, application: Application
) -> tuple[Campaign, UserProfile, UserProfile] | None:
    campaign = (
        await db.execute(select(Campaign).where(Campaign.id == application.campaign_id))
    ).scalar_one_or_none()
    if campaign is None:
        return None
    business = (
        await db.execute(select(UserProfile).where(UserProfile.id == campaign.business_id))
    ).scalar_one_or_none()
    advertiser = (
        await db.execute(select(UserProfile).where(UserProfile.id == application.advertiser_id))
    ).scalar_one_or_none()
    if business is None or advertiser is None:
        return None
    return campaign, business, advertiser


async def notify_application_received(db: AsyncSession, application: Application) -> None:
    """Tell the business a new application arrived. Never raises."""
    try:
        parties = await _load_application_parties(db, application)
        if parties is None:
            logger.warning("Application %s: parties not found, skipping email", application.id)
            return
        campaign, business, advertiser = parties
        subject, html = render_application_received(
            business.display_name, campaign.title, advertiser.display_name, application.message,
        )
        await send_email(business.email, subject, html)
    except Exception:
        logger.exception("Failed to send application received notification for %s", application.id)


async def notify_application_status(db: AsyncSession, application: Application) -> None:
    """Tell the advertiser their application was accepted or rejected. Never raises."""
    try:
        parties = await _load_application_parties(db, application)
        if parties is None:
            logger.warning("Application %s: parties not found, skipping email", application.id)
            return
        campaign, business, advertiser = parties
        subject, html = render_application_status(
            advertiser.display_name, campaign.title, business.display_name, application.status,
        )
        await send_email(advertiser.email, subject, html)
    except Exception:
        logger.exception("Failed to send application status notification for %s", application.id)
