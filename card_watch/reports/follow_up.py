"""Row data for follow-up reports and CSV exports."""

from dataclasses import dataclass
from datetime import datetime

from card_watch.analysis import ActionRequiredPolicy, most_relevant_card
from card_watch.models import CustomerWithExpiration
from card_watch.reports.formatting import card_brand, card_status_label, format_days_ago, format_phone

EXPORT_COLUMNS = ["Name", "Business Name", "Email", "Phone", "Currency", "Cards", "Status"]


def export_status(analyzed: CustomerWithExpiration) -> str:
    """One-word customer status used in CSV exports."""
    if analyzed.has_expired:
        return "Expired Cards"
    if analyzed.has_expiring_soon:
        return "Expiring Soon"
    if analyzed.total_cards == 0:
        return "No Cards"
    return "Active"


def export_row(analyzed: CustomerWithExpiration) -> dict[str, str | int]:
    """CSV export record keyed by ``EXPORT_COLUMNS``."""
    customer = analyzed.customer
    return {
        "Name": customer.full_name,
        "Business Name": customer.business_name or "",
        "Email": customer.primary_email or "",
        "Phone": customer.primary_phone or "",
        "Currency": customer.merchant_currency.value,
        "Cards": analyzed.total_cards,
        "Status": export_status(analyzed),
    }


@dataclass
class FollowUpRow:
    """One printable line of the staff follow-up report."""

    customer_id: str
    currency: str
    display_name: str
    contact_name: str
    email: str
    phone: str
    card_status: str
    card_number: str
    card_brand: str
    total_cards: int
    is_new: bool
    customer_age: str | None
    last_synced: str | None


def follow_up_row(
    analyzed: CustomerWithExpiration,
    now: datetime,
    policy: ActionRequiredPolicy | None = None,
) -> FollowUpRow:
    """Build the report line for one customer."""
    policy = policy or ActionRequiredPolicy()
    customer = analyzed.customer
    relevant = most_relevant_card(analyzed)
    label = card_status_label(relevant)
    first6 = relevant.analysis.card.first6 if relevant.analysis else None
    return FollowUpRow(
        customer_id=customer.id,
        currency=customer.merchant_currency.value,
        display_name=customer.display_name or "No Name",
        contact_name=customer.full_name if customer.business_name else "",
        email=customer.primary_email or "",
        phone=format_phone(customer.primary_phone),
        card_status=label.status,
        card_number=label.card_number,
        card_brand=card_brand(first6) if relevant.analysis else "",
        total_cards=analyzed.total_cards,
        is_new=policy.is_new_customer(analyzed, now),
        customer_age=format_days_ago(customer.customer_since, now),
        last_synced=format_days_ago(customer.last_synced_at, now),
    )


def follow_up_rows(
    customers: list[CustomerWithExpiration],
    now: datetime,
    policy: ActionRequiredPolicy | None = None,
) -> list[FollowUpRow]:
    """Report lines in the order given."""
    policy = policy or ActionRequiredPolicy()
    return [follow_up_row(c, now, policy) for c in customers]
