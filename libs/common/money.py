"""Money helpers for the store.

All amounts are ``Decimal`` in the store currency with two fractional digits.
Floats never enter a price calculation.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

# ─── constants ───────────────────────────────────────────────────────────────

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


# ─── helpers ─────────────────────────────────────────────────────────────────


def to_money(value: Union[Decimal, int, str, float]) -> Decimal:
    """Coerce a value to a Decimal amount rounded half-up to cents.

    Floats are converted through ``str`` so 109.95 stays 109.95.
    """
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def percent_of(amount: Decimal, percentage: Decimal) -> Decimal:
    """Return ``percentage`` percent of ``amount``, unrounded."""
    return amount * Decimal(percentage) / HUNDRED
