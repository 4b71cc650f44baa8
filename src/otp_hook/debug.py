from __future__ import annotations

import argparse

from otp_hook.config import get_settings
from otp_hook.routing import choose_channel, normalize_phone, sms_country_codes, template_id_for


def main(argv: list[str] | None = None) -> None:
    """
    Show which channel and template each phone number would get with the
    current environment:

      SMS_COUNTRY_CODES=+966 AUTHENTICA_WHATSAPP_TEMPLATE_ID=7 otp-hook-route 966512345678
    """
    parser = argparse.ArgumentParser(description="Preview OTP delivery routing.")
    parser.add_argument("phones", nargs="+", metavar="PHONE")
    args = parser.parse_args(argv)

    settings = get_settings()
    codes = sms_country_codes(settings)

    if settings.whatsapp_template_id is None:
        print("WhatsApp not configured: every number uses SMS.")
    elif not codes:
        print("No SMS country codes configured: every number uses SMS.")
    else:
        print(f"SMS country codes: {', '.join(sorted(codes))}")
    print()

    for phone in args.phones:
        channel = choose_channel(phone, settings)
        template_id = template_id_for(channel, settings)
        print(f"{normalize_phone(phone)}  ->  {channel.value} (template {template_id})")


if __name__ == "__main__":
    main()
