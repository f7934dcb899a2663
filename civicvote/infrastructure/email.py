"""Utility helpers for sending lifecycle email notifications via SendGrid."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail, To

from civicvote.config import get_settings

logger = logging.getLogger(__name__)

# SendGrid accepts at most 1000 personalizations per request.
MAX_RECIPIENTS_PER_REQUEST = 1000


def _extract_sendgrid_error_details(body: Any) -> str | None:
    """Return a human readable description for a SendGrid error payload."""

    if body in (None, ""):
        return None

    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None

    if isinstance(body, str):
        body = body.strip()
        if not body:
            return None
        try:
            parsed = json.loads(body)
        except json.JSONDecodeError:
            return body
    else:
        parsed = body

    if isinstance(parsed, dict):
        errors = parsed.get("errors")
        if isinstance(errors, list):
            messages: list[str] = []
            for item in errors:
                if not isinstance(item, dict):
                    continue
                message = item.get("message")
                field = item.get("field")
                if message and field:
                    messages.append(f"{field}: {message}")
                elif message:
                    messages.append(str(message))
            if messages:
                return "; ".join(messages)
        try:
            return json.dumps(parsed)
        except (TypeError, ValueError):
            return None

    if isinstance(parsed, list):
        return "; ".join(str(item) for item in parsed)

    return None


def _log_sendgrid_failure(source: Any) -> None:
    """Log a SendGrid exception or unsuccessful response with its details."""

    status_code = getattr(source, "status_code", None)
    details = _extract_sendgrid_error_details(getattr(source, "body", None))

    if status_code and details:
        logger.error("SendGrid API request failed with status %s: %s", status_code, details)
    elif status_code:
        logger.error("SendGrid API request failed with status %s", status_code)
    elif details:
        logger.error("SendGrid API request failed: %s", details)
    else:
        logger.error("Error sending email via SendGrid: %r", source)


def _send(message: Mail, api_key: str) -> bool:
    try:
        client = SendGridAPIClient(api_key)
        response = client.send(message)
    except Exception as exc:  # pragma: no cover - network failures depend on environment
        _log_sendgrid_failure(exc)
        return False

    status_code = getattr(response, "status_code", None)
    if not isinstance(status_code, int) or not 200 <= status_code < 300:
        _log_sendgrid_failure(response)
        return False
    return True


def send_email(subject: str, html_content: str, recipient: str) -> bool:
    """Send a single email using the configured SendGrid credentials."""

    return send_bulk_email(subject, html_content, [(recipient, None)]) == 1


def send_bulk_email(
    subject: str,
    html_content: str,
    recipients: Sequence[tuple[str, str | None]],
) -> int:
    """Send the same message to every ``(email, name)`` pair.

    Each recipient gets an individual copy. Returns how many recipients were
    accepted by SendGrid; ``0`` when email is not configured.
    """

    settings = get_settings()
    if not (settings.sendgrid_api_key and settings.sendgrid_sender):
        logger.info("SendGrid configuration incomplete; skipping email delivery")
        return 0

    addresses: list[To] = []
    seen: set[str] = set()
    for email, name in recipients:
        address = (email or "").strip()
        if not address or address.lower() in seen:
            continue
        seen.add(address.lower())
        addresses.append(To(address, name))

    accepted = 0
    for start in range(0, len(addresses), MAX_RECIPIENTS_PER_REQUEST):
        batch = addresses[start : start + MAX_RECIPIENTS_PER_REQUEST]
        message = Mail(
            from_email=settings.sendgrid_sender,
            to_emails=batch,
            subject=subject,
            html_content=html_content,
            is_multiple=True,
        )
        if _send(message, settings.sendgrid_api_key):
            accepted += len(batch)
    return accepted


__all__ = ["send_bulk_email", "send_email"]
