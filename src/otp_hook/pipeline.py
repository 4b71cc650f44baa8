from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx

from .authentica_client import send_otp
from .config import Settings
from .errors import HookError
from .logger import get_logger
from .routing import choose_channel
from .sms import extract_target
from .verify import verify_event

logger = get_logger(__name__)


@dataclass
class HookResponse:
    status_code: int
    body: dict[str, Any] = field(default_factory=dict)


def error_response(status_code: int, code: str, message: str) -> HookResponse:
    return HookResponse(status_code=status_code, body={"code": code, "message": message})


def handle_send_sms_hook(
    raw_body: str,
    headers: Mapping[str, str],
    settings: Settings,
    http_client: httpx.Client | None = None,
) -> HookResponse:
    """
    Core business logic of the Send SMS hook:
    - verify the signature and decode the event
    - pull out phone and OTP
    - pick SMS or WhatsApp for the number
    - call Authentica and map the outcome to a response

    Known failures become error responses here. Anything unexpected
    propagates to the caller.
    """
    logger.debug("Raw hook payload received", extra={"payload": raw_body})

    try:
        data = verify_event(raw_body, headers, settings)
        target = extract_target(data)
    except HookError as e:
        logger.error("Rejecting hook request", extra={"code": e.code, "reason": e.message})
        return error_response(e.status_code, e.code, e.message)

    channel = choose_channel(target.phone, settings)
    logger.info(
        "Hook event accepted",
        extra={"phone": target.phone, "channel": channel.value},
    )

    result = send_otp(target.phone, target.otp, channel, settings, http_client=http_client)
    if not result.success:
        logger.error("Failed to send OTP", extra={"error": result.error})
        return error_response(500, "sms_send_failure", result.error or "Failed to send SMS")

    logger.info("OTP sent successfully", extra={"phone": target.phone})
    return HookResponse(status_code=200, body={"success": True})
