"""Authoritative price rules for enrollments.

``evaluate_price`` is the server's copy of the promo rule. The preview shown
to clients lives in ``price.py`` and is deliberately a separate implementation;
only this module decides what a subscription costs.
"""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping, Optional

from course_catalog import CENTS, to_money
from course_settings import PROMO_CODES


class InvalidOrMissingPromo(Exception):
    """Raised when a paid course is priced without a usable promo code."""

    def __init__(self, missing: bool):
        self.missing = missing
        super().__init__("promo code required" if missing else "invalid promo code")


def match_promo(
    promo_code: Optional[str],
    case_sensitive: bool = False,
    table: Mapping[str, Decimal] = PROMO_CODES,
) -> Optional[Decimal]:
    """Return the multiplier for ``promo_code`` or None when it is not in the table."""
    if not isinstance(promo_code, str):
        return None
    if case_sensitive:
        return table.get(promo_code)
    key = promo_code.strip().upper()
    for code, rate in table.items():
        if code.upper() == key:
            return rate
    return None


def evaluate_price(
    base_price,
    promo_code: Optional[str],
    case_sensitive: bool = False,
    table: Mapping[str, Decimal] = PROMO_CODES,
) -> Decimal:
    """Price owed for a course listed at ``base_price``.

    Free courses cost 0 whatever code is supplied. Paid courses need a code
    from ``table``; otherwise InvalidOrMissingPromo is raised and the caller
    decides how to report it.
    """
    base = to_money(base_price)
    if base < 0:
        raise ValueError(f"negative course price: {base}")
    if base == 0:
        return Decimal("0.00")

    if promo_code is None or (isinstance(promo_code, str) and not promo_code.strip()):
        raise InvalidOrMissingPromo(missing=True)

    rate = match_promo(promo_code, case_sensitive=case_sensitive, table=table)
    if rate is None:
        raise InvalidOrMissingPromo(missing=False)
    return (base * rate).quantize(CENTS, rounding=ROUND_HALF_UP)
