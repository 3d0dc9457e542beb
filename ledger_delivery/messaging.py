"""
Messaging deep links.

A deep link can only carry caption text; attachments cannot travel through
a URL.  Phone numbers entered by users come in every shape ("+91 98765
43210", "098765-43210", "9876543210"), so they are reduced to the last
``local_number_digits`` digits and prefixed with the tenant country code.
"""

from __future__ import annotations

import re
from urllib.parse import quote

from ledger_config.schema import DeliveryConfig

_NON_DIGITS = re.compile(r"\D")


def normalize_phone(
    raw: str | None,
    country_code: str = "91",
    local_number_digits: int = 10,
) -> str | None:
    """
    E.164-style digits without the plus sign, or None if unusable.

    >>> normalize_phone("+91 98765-43210")
    '919876543210'
    """
    if not raw:
        return None
    digits = _NON_DIGITS.sub("", raw)
    if len(digits) < local_number_digits:
        return None
    return country_code + digits[-local_number_digits:]


def build_deep_link(phone: str, text: str, template: str) -> str:
    """Fill the messaging URL template with a phone number and url-encoded text."""
    return template.format(phone=phone, text=quote(text, safe=""))


def deep_link_for(raw_phone: str | None, text: str, config: DeliveryConfig) -> str | None:
    """Deep link for a user-entered number, or None if the number is unusable."""
    phone = normalize_phone(raw_phone, config.country_code, config.local_number_digits)
    if phone is None:
        return None
    return build_deep_link(phone, text, config.deep_link_template)
