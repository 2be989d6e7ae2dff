"""Population statistics for the dashboard."""

from card_watch.analysis.aggregator import (
    expired_customers,
    expiring_later_customers,
    expiring_soon_customers,
)
from card_watch.models.analysis import CustomerWithExpiration, StatusCounts, SummaryStatistics


def generate_summary(customers: list[CustomerWithExpiration]) -> SummaryStatistics:
    """Count customers and cards per expiration bucket.

    Bucket ``customers`` counts customers with at least one card in that
    status; bucket ``cards`` counts *all* classification records of those
    customers, so a customer with one expired and one valid card adds 2.
    """
    return SummaryStatistics(
        total_customers=len(customers),
        total_cards=sum(c.total_cards for c in customers),
        expired=_bucket(expired_customers(customers)),
        expiring_soon=_bucket(expiring_soon_customers(customers)),
        expiring_later=_bucket(expiring_later_customers(customers)),
    )


def _bucket(flagged: list[CustomerWithExpiration]) -> StatusCounts:
    return StatusCounts(
        customers=len(flagged),
        cards=sum(len(c.expiration_analysis) for c in flagged),
    )
