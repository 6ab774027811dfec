"""Money value object with currency-aware rounding."""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_EVEN


# Minor-unit precision per currency; unknown currencies use 2
CURRENCY_DECIMALS = {
    'USD': 2, 'EUR': 2, 'GBP': 2, 'MXN': 2,
    'CAD': 2, 'AUD': 2, 'CHF': 2, 'CNY': 2,
    'BRL': 2, 'INR': 2, 'KES': 2, 'NGN': 2,
    'JPY': 0, 'KRW': 0,
}


@dataclass(frozen=True)
class Money:
    """
    Immutable money value object.

    Always normalizes amount to Decimal. Scaling keeps the currency; no
    conversion is ever performed.

    Usage:
        hourly = Money(Decimal("30.00"), "USD")
        total = (hourly * Decimal("1.5")).quantized()  # Money(Decimal("45.00"), "USD")
    """
    amount: Decimal
    currency: str

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', Decimal(str(self.amount)))

    @property
    def decimals(self) -> int:
        return CURRENCY_DECIMALS.get(self.currency, 2)

    def quantized(self) -> 'Money':
        """
        Return quantized to the currency's smallest unit.

        Uses banker's rounding (ROUND_HALF_EVEN).
        """
        quantized_amount = self.amount.quantize(
            Decimal(10) ** -self.decimals,
            rounding=ROUND_HALF_EVEN
        )
        return Money(quantized_amount, self.currency)

    def __mul__(self, factor) -> 'Money':
        """Multiply by an int or Decimal factor."""
        if isinstance(factor, float):
            raise TypeError("Multiply Money by int or Decimal, not float")
        return Money(self.amount * Decimal(factor), self.currency)

    def __str__(self):
        return f"{self.quantized().amount} {self.currency}"
