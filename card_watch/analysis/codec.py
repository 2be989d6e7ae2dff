"""MMYY expiration code parsing.

Cards are valid through the last calendar day of their expiration month,
so ``"0228"`` resolves to 2028-02-29 and ``"0227"`` to 2027-02-28.
Anything that is not a well-formed code resolves to ``None`` ("no
expiration") instead of raising, so bad vendor data never stops a run.
"""

import calendar
from datetime import date

YEAR_BASE = 2000
CODE_LENGTH = 4


def parse_expiration_code(code: str | None) -> date | None:
    """Resolve an MMYY code to the card's last valid day.

    Parameters
    ----------
    code : str | None
        Four ASCII digits, month then two-digit year.

    Returns
    -------
    date | None
        Last day of the expiration month, or ``None`` for missing or
        malformed codes.
    """
    if not isinstance(code, str) or len(code) != CODE_LENGTH:
        return None
    month_part, year_part = code[:2], code[2:]
    if not (_is_ascii_digits(month_part) and _is_ascii_digits(year_part)):
        return None

    month = int(month_part)
    if not 1 <= month <= 12:
        return None
    year = YEAR_BASE + int(year_part)

    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, last_day)


def format_expiry(code: str | None) -> str:
    """Render an MMYY code as ``MM/YY`` (empty for malformed codes)."""
    if parse_expiration_code(code) is None:
        return ""
    return f"{code[:2]}/{code[2:]}"


def _is_ascii_digits(value: str) -> bool:
    # str.isdigit() also accepts superscripts and other unicode digits
    return value.isascii() and value.isdigit()
