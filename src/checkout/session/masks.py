"""Input masks applied to payment fields as they are typed."""

import re

CARD_NUMBER_MAX_LENGTH = 19  # 16 digits and 3 separating spaces
EXPIRY_DATE_MAX_LENGTH = 5  # MM/YY

_WHITESPACE = re.compile(r"\s")
_NON_DIGITS = re.compile(r"\D")


def format_card_number(raw):
    """Group the card number in blocks of four, e.g. ``4242 4242 4242 4242``."""
    compact = _WHITESPACE.sub("", raw or "")
    grouped = " ".join(compact[i : i + 4] for i in range(0, len(compact), 4))
    return grouped[:CARD_NUMBER_MAX_LENGTH]


def format_expiry_date(raw):
    """Keep the digits and put a slash after the month, e.g. ``12/28``."""
    digits = _NON_DIGITS.sub("", raw or "")
    if len(digits) >= 2:
        digits = f"{digits[:2]}/{digits[2:]}"
    return digits[:EXPIRY_DATE_MAX_LENGTH]


def mask_card_number(card_number):
    """Hide everything but the last four digits for the review screen."""
    if not card_number:
        return ""
    return f"**** **** **** {card_number[-4:]}"
