# backend/trailblazers/services/pricing_service.py
"""
Booking price computation.

Amounts stay exact (Decimal) through the calculation; rounding to cents
with ROUND_HALF_UP happens only in ``PriceQuote.rounded()``.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional, Union

from ..core.config import settings

CENTS = Decimal("0.01")

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_display(amount: Number) -> Decimal:
    """Round to cents for display."""
    return to_decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)


def default_tax_rate() -> Decimal:
    return to_decimal(settings.tax_rate)


@dataclass(frozen=True)
class PriceQuote:
    unit_price: Decimal
    number_of_participants: int
    price: Decimal
    tax: Decimal
    total_amount: Decimal

    def rounded(self) -> "PriceQuote":
        """
        Cents-rounded copy for display.

        The total is the sum of the rounded price and tax so the three shown
        figures always add up.
        """
        price = to_display(self.price)
        tax = to_display(self.tax)
        return PriceQuote(
            unit_price=to_display(self.unit_price),
            number_of_participants=self.number_of_participants,
            price=price,
            tax=tax,
            total_amount=price + tax,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "unit_price": self.unit_price,
            "number_of_participants": self.number_of_participants,
            "price": self.price,
            "tax": self.tax,
            "total_amount": self.total_amount,
        }


def quote(
    unit_price: Number, number_of_participants: int, tax_rate: Optional[Number] = None
) -> PriceQuote:
    """
    price = unit price x participants, tax = price x rate, total = price + tax.
    """
    unit = to_decimal(unit_price)
    rate = default_tax_rate() if tax_rate is None else to_decimal(tax_rate)
    price = unit * number_of_participants
    tax = price * rate
    return PriceQuote(
        unit_price=unit,
        number_of_participants=number_of_participants,
        price=price,
        tax=tax,
        total_amount=price + tax,
    )
