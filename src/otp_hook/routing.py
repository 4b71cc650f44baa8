from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .config import Settings

_PHONE_SEPARATORS = re.compile(r"[\s-]")


class DeliveryChannel(str, Enum):
    # Values are Authentica's `method` field
    SMS = "sms"
    WHATSAPP = "whatsapp"


@dataclass(frozen=True)
class DeliveryRequest:
    channel: DeliveryChannel
    phone: str
    template_id: int
    otp: str
    fallback_email: str

    def to_payload(self) -> dict[str, Any]:
        return {
            "method": self.channel.value,
            "phone": self.phone,
            "template_id": self.template_id,
            "fallback_email": self.fallback_email,
            "otp": self.otp,
        }


def sms_country_codes(settings: Settings) -> frozenset[str]:
    """
    Parse SMS_COUNTRY_CODES into a set of "+"-prefixed prefixes.

      " 966, +971 ,," -> {"+966", "+971"}
    """
    codes = set()
    for raw in settings.sms_country_codes.split(","):
        code = raw.strip()
        if not code.startswith("+"):
            code = "+" + code
        if len(code) > 1:
            codes.add(code)
    return frozenset(codes)


def normalize_phone(phone: str) -> str:
    normalized = _PHONE_SEPARATORS.sub("", phone)
    if not normalized.startswith("+"):
        normalized = "+" + normalized
    return normalized


def choose_channel(phone: str, settings: Settings) -> DeliveryChannel:
    """
    Decide how an OTP reaches `phone`.

    - No WhatsApp template configured: always SMS.
    - No SMS country codes configured: always SMS.
    - Otherwise numbers under one of the SMS country codes get SMS and every
      other number gets WhatsApp, which is far cheaper for international
      destinations.
    """
    if settings.whatsapp_template_id is None:
        return DeliveryChannel.SMS

    codes = sms_country_codes(settings)
    if not codes:
        return DeliveryChannel.SMS

    normalized = normalize_phone(phone)
    if any(normalized.startswith(code) for code in codes):
        return DeliveryChannel.SMS
    return DeliveryChannel.WHATSAPP


def template_id_for(channel: DeliveryChannel, settings: Settings) -> int:
    if channel is DeliveryChannel.WHATSAPP:
        if settings.whatsapp_template_id is None:
            raise ValueError("WhatsApp template id is not configured")
        return settings.whatsapp_template_id
    return settings.sms_template_id


def build_delivery_request(
    phone: str, otp: str, channel: DeliveryChannel, settings: Settings
) -> DeliveryRequest:
    return DeliveryRequest(
        channel=channel,
        phone=phone,
        template_id=template_id_for(channel, settings),
        otp=otp,
        fallback_email=settings.fallback_email,
    )
