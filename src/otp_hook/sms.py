from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from .errors import InvalidPayloadError


class HookUser(BaseModel):
    # Loosely typed: only the field that ends up selected is checked
    phone: Any = None
    # Set instead of `phone` on phone number changes and anonymous user upgrades
    new_phone: Any = None


class HookSms(BaseModel):
    otp: str | None = None


class SendSmsHookEvent(BaseModel):
    """
    The Send SMS hook event, as posted by Supabase Auth:

      { "user": { "phone": "966512345678", ... }, "sms": { "otp": "123456" } }

    Everything is optional here; extract_target() decides what is required.
    """

    user: HookUser | None = None
    sms: HookSms | None = None
    action_type: Any = None


@dataclass(frozen=True)
class DeliveryTarget:
    phone: str
    otp: str


def parse_event(data: Any) -> SendSmsHookEvent:
    if not isinstance(data, dict):
        return SendSmsHookEvent()
    try:
        return SendSmsHookEvent.model_validate(data)
    except ValidationError as e:
        raise InvalidPayloadError("Malformed event payload") from e


def extract_target(data: Any) -> DeliveryTarget:
    """
    Pull the destination phone and the OTP out of a decoded hook event.

    Phone precedence: `user.phone` first, then `user.new_phone`. Empty strings
    count as missing. A leading "+" is added when absent; nothing else about
    the number is touched here.
    """
    event = parse_event(data)
    user = event.user or HookUser()
    sms = event.sms or HookSms()

    phone = user.phone or user.new_phone
    if not phone:
        raise InvalidPayloadError("Missing phone number")
    if not isinstance(phone, str):
        raise InvalidPayloadError("Malformed event payload")

    if not sms.otp:
        raise InvalidPayloadError("Missing OTP")

    if not phone.startswith("+"):
        phone = "+" + phone

    return DeliveryTarget(phone=phone, otp=sms.otp)
