from __future__ import annotations

import os
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip()


def _sms_template_from_env() -> str:
    # AUTHENTICA_TEMPLATE_ID is the older name, still honoured
    return _env("AUTHENTICA_SMS_TEMPLATE_ID") or _env("AUTHENTICA_TEMPLATE_ID") or "31"


class Settings(BaseModel):
    """
    Process-wide configuration, read once from the environment.

    Instances are frozen; tests build their own instead of touching os.environ.
    """

    model_config = ConfigDict(frozen=True, validate_default=True)

    # --- Authentica ---
    authentica_api_key: str | None = Field(default_factory=lambda: _env("AUTHENTICA_API_KEY"))
    sms_template_id: int = Field(default_factory=_sms_template_from_env)
    # None disables WhatsApp delivery entirely
    whatsapp_template_id: int | None = Field(
        default_factory=lambda: _env("AUTHENTICA_WHATSAPP_TEMPLATE_ID")
    )
    fallback_email: str = Field(
        default_factory=lambda: _env("FALLBACK_EMAIL", "noreply@yourdomain.com")
    )

    # --- Routing ---
    # Comma-separated prefixes that stay on SMS, e.g. "+966,+971,973".
    # Empty means SMS for every number.
    sms_country_codes: str = Field(default_factory=lambda: _env("SMS_COUNTRY_CODES", ""))

    # --- Send SMS hook verification ---
    # Value as shown in the Supabase dashboard: "v1,whsec_<base64>"
    hook_secret: str | None = Field(default_factory=lambda: _env("SEND_SMS_HOOK_SECRET"))
    allow_unverified_on_failure: bool = Field(
        default_factory=lambda: _env("ALLOW_UNVERIFIED_ON_FAILURE", "true")
    )

    @field_validator("whatsapp_template_id", "authentica_api_key", "hook_secret", mode="before")
    @classmethod
    def _blank_is_none(cls, value: object) -> object:
        if isinstance(value, str) and value.strip() == "":
            return None
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()
