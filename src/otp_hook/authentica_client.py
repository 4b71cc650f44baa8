from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Final

import httpx

from .config import Settings
from .logger import get_logger
from .routing import DeliveryChannel, build_delivery_request

logger = get_logger(__name__)

SEND_OTP_URL: Final[str] = "https://api.authentica.sa/api/v2/send-otp"


@dataclass
class DeliveryResult:
    success: bool
    error: str | None = None
    data: Any = None


def _decode(text: str) -> Any:
    try:
        return json.loads(text)
    except ValueError:
        # Keep the raw body when Authentica answers with something other than JSON
        return text


def send_otp(
    phone: str,
    otp: str,
    channel: DeliveryChannel,
    settings: Settings,
    http_client: httpx.Client | None = None,
) -> DeliveryResult:
    """
    Send `otp` to `phone` through Authentica's send-otp endpoint.

    Never raises for provider or transport problems; those come back as a
    failed DeliveryResult. The error text is safe to hand back to the caller:
    transport details only go to the logs.

    A single attempt is made, with httpx's default timeout.
    """
    if not settings.authentica_api_key:
        logger.error("AUTHENTICA_API_KEY is not configured")
        return DeliveryResult(success=False, error="SMS service not configured")

    request = build_delivery_request(phone, otp, channel, settings)
    logger.info(
        "Sending OTP",
        extra={
            "phone": request.phone,
            "method": request.channel.value,
            "template_id": request.template_id,
        },
    )

    headers = {
        "Accept": "application/json",
        "Content-Type": "application/json",
        # Authentica does not use the Authorization header
        "X-Authorization": settings.authentica_api_key,
    }

    try:
        if http_client is not None:
            response = http_client.post(SEND_OTP_URL, json=request.to_payload(), headers=headers)
        else:
            with httpx.Client() as client:
                response = client.post(SEND_OTP_URL, json=request.to_payload(), headers=headers)
        text = response.text
    except Exception:
        # Network, TLS and timeout errors, but also header encoding of a bad API key
        logger.exception("Error sending OTP to Authentica", extra={"phone": request.phone})
        return DeliveryResult(success=False, error="Failed to send SMS")

    logger.info(
        "Authentica API response",
        extra={"status_code": response.status_code, "response_body": text},
    )
    data = _decode(text)

    if not response.is_success:
        logger.error(
            "Authentica API error",
            extra={"status_code": response.status_code, "response_body": text},
        )
        return DeliveryResult(
            success=False,
            error=f"Authentica API error: {response.status_code}",
            data=data,
        )

    return DeliveryResult(success=True, data=data)
