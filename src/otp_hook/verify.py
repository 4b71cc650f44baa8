from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Final

from standardwebhooks.webhooks import Webhook, WebhookVerificationError

from .config import Settings
from .errors import SignatureVerificationError
from .logger import get_logger

logger = get_logger(__name__)

# Supabase shows hook secrets as "v1,whsec_<base64>"
HOOK_SECRET_PREFIX: Final[str] = "v1,whsec_"


def _strip_prefix(secret: str) -> str:
    if secret.startswith(HOOK_SECRET_PREFIX):
        return secret[len(HOOK_SECRET_PREFIX) :]
    return secret


def verify_event(raw_body: str, headers: Mapping[str, str], settings: Settings) -> Any:
    """
    Check the Standard Webhooks signature of a hook request and decode its body.

    Uses the webhook-id / webhook-timestamp / webhook-signature headers.

    Without a configured hook secret the body is decoded unchecked (local
    development only). When the check fails the body is still decoded and
    returned, unless settings.allow_unverified_on_failure is off, in which
    case SignatureVerificationError is raised.

    A body that is not JSON raises json.JSONDecodeError on every path.
    """
    if not settings.hook_secret:
        logger.warning("SEND_SMS_HOOK_SECRET not set, skipping signature verification")
        return json.loads(raw_body)

    secret = _strip_prefix(settings.hook_secret)
    try:
        if not secret:
            raise WebhookVerificationError("Hook secret is empty")
        webhook = Webhook(secret)
        event = webhook.verify(raw_body, {key.lower(): value for key, value in headers.items()})
    except (WebhookVerificationError, ValueError) as e:
        # ValueError covers an undecodable secret and a verified body that is not JSON
        logger.error("Webhook verification failed", extra={"error": str(e)})
        if not settings.allow_unverified_on_failure:
            raise SignatureVerificationError("Invalid webhook signature") from e
        logger.warning("Processing unverified hook event")
        return json.loads(raw_body)

    logger.info("Webhook verified successfully")
    return event
