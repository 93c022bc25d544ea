"""
Outbound alert delivery.

Posts JSON to the configured ALERT_WEBHOOK_URL (Slack-compatible `text`
field). Failures are logged and reported as False; an unreachable webhook
never breaks the alert scan.
"""

import logging

import requests

from finboard.core.config import settings

logger = logging.getLogger(__name__)


def post_alert(text: str, payload: dict | None = None) -> bool:
    """Send one alert message. Returns True on a 2xx response."""
    if not settings.alerts_enabled or not settings.alert_webhook_url:
        return False
    if not text:
        return False
    body = {"text": text, **(payload or {})}
    try:
        resp = requests.post(settings.alert_webhook_url, json=body, timeout=10)
    except requests.RequestException as exc:
        logger.warning("Alert webhook post failed: %s", exc)
        return False
    if 200 <= resp.status_code < 300:
        return True
    logger.warning("Alert webhook returned %d: %s", resp.status_code, resp.text[:200])
    return False
