"""Display formatting for follow-up reports."""

import re
from dataclasses import dataclass
from datetime import datetime

from card_watch.analysis.codec import format_expiry
from card_watch.models import RelevantCard, RelevantCardKind

_NON_DIGITS = re.compile(r"\D")

_STATUS_WORDS = {
    RelevantCardKind.EXPIRED: "EXPIRED",
    RelevantCardKind.EXPIRING: "EXPIRING",
    RelevantCardKind.ACTIVE: "Active",
}
NO_PAYMENT_METHOD = "NO PAYMENT METHOD"


def format_phone(phone: str | None) -> str:
    """Format North American numbers as ``(555) 123-4567``; others pass through."""
    if not phone:
        return ""
    digits = _NON_DIGITS.sub("", phone)
    if len(digits) == 10:
        return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"
    if len(digits) == 11 and digits[0] == "1":
        return f"+1 ({digits[1:4]}) {digits[4:7]}-{digits[7:]}"
    return phone


def format_card_number(first6: str | None, last4: str | None) -> str:
    """Masked card number, ``4111 11** **** 1111``."""
    if not first6 or not last4:
        return ""
    return f"{first6[:4]} {first6[4:6]}** **** {last4}"


def card_brand(first6: str | None) -> str:
    """Short network name guessed from the card's first digits."""
    if not first6:
        return "Unknown"
    if first6.startswith("4"):
        return "Visa"
    if first6[:2] in ("51", "52", "53", "54", "55"):
        return "MC"
    if first6[:2] in ("34", "37"):
        return "Amex"
    if first6.startswith("6011") or first6.startswith("65"):
        return "Disc"
    return "Card"


def format_days_ago(moment: datetime | None, now: datetime) -> str | None:
    """Compact age label: ``today``, ``5d``, ``3m``, ``2y``."""
    if moment is None:
        return None
    days = (now - moment).days
    if days <= 0:
        return "today"
    if days < 30:
        return f"{days}d"
    if days < 365:
        return f"{days // 30}m"
    return f"{days // 365}y"


@dataclass(frozen=True)
class CardStatusLabel:
    """Status text and masked number for the card shown on a report line."""

    status: str
    card_number: str = ""


def card_status_label(relevant: RelevantCard) -> CardStatusLabel:
    """Label such as ``EXPIRED 10/26`` for the customer's most relevant card."""
    if relevant.kind is RelevantCardKind.NO_PAYMENT_METHOD or relevant.analysis is None:
        return CardStatusLabel(NO_PAYMENT_METHOD)
    card = relevant.analysis.card
    word = _STATUS_WORDS[relevant.kind]
    expiry = format_expiry(card.expiration_date)
    return CardStatusLabel(
        status=f"{word} {expiry}" if expiry else word,
        card_number=format_card_number(card.first6, card.last4),
    )
