"""Card expiration classification against an explicit reference instant."""

from datetime import date, datetime, time, timedelta, timezone

from card_watch.analysis.codec import parse_expiration_code
from card_watch.models.analysis import ExpirationClassification
from card_watch.models.customer import Card
from card_watch.models.enums import ExpirationStatus, WarningLevel

EXPIRING_SOON_DAYS = 30
EXPIRING_LATER_DAYS = 90

_DAY = timedelta(days=1)

_WARNING_LEVELS = {
    ExpirationStatus.EXPIRED: WarningLevel.CRITICAL,
    ExpirationStatus.EXPIRING_SOON: WarningLevel.CRITICAL,
    ExpirationStatus.EXPIRING_LATER: WarningLevel.WARNING,
    ExpirationStatus.VALID: WarningLevel.NONE,
    ExpirationStatus.NO_EXPIRATION: WarningLevel.NONE,
}

NO_EXPIRATION = ExpirationClassification(
    status=ExpirationStatus.NO_EXPIRATION,
    days_until_expiration=None,
    expiration_date=None,
    warning_level=WarningLevel.NONE,
)


def as_utc(moment: datetime) -> datetime:
    """Attach UTC to a naive instant; aware instants are returned unchanged."""
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=timezone.utc)


def days_until(expiration_date: date, now: datetime) -> int:
    """Whole days from ``now`` to the start of ``expiration_date``, rounded up.

    Rounding up keeps a card that expires later today at 0 rather than -1.
    The expiration day is taken at midnight in ``now``'s timezone.
    """
    expires_at = datetime.combine(expiration_date, time.min, tzinfo=now.tzinfo)
    remaining = expires_at - now
    # ceil via floor division on the exact timedelta, no float rounding
    return -((-remaining) // _DAY)


def status_for_days(days: int) -> ExpirationStatus:
    """Map a signed day count to a status tier."""
    if days < 0:
        return ExpirationStatus.EXPIRED
    if days <= EXPIRING_SOON_DAYS:
        return ExpirationStatus.EXPIRING_SOON
    if days <= EXPIRING_LATER_DAYS:
        return ExpirationStatus.EXPIRING_LATER
    return ExpirationStatus.VALID


def classify_date(expiration_date: date | None, now: datetime) -> ExpirationClassification:
    """Classify an already-resolved expiration date."""
    if expiration_date is None:
        return NO_EXPIRATION

    days = days_until(expiration_date, now)
    status = status_for_days(days)
    return ExpirationClassification(
        status=status,
        days_until_expiration=days,
        expiration_date=expiration_date,
        warning_level=_WARNING_LEVELS[status],
    )


def classify_code(code: str | None, now: datetime) -> ExpirationClassification:
    """Classify a raw MMYY code; malformed codes yield ``NO_EXPIRATION``."""
    return classify_date(parse_expiration_code(code), now)


def classify_card(card: Card, now: datetime) -> ExpirationClassification:
    """Classify one card."""
    return classify_code(card.expiration_date, now)
