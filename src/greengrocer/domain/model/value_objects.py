"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation

from greengrocer.domain.exceptions import ErrorReason, ValidationError

CENT = Decimal("0.01")
GRAMS_PER_KG = 1000


@dataclass(frozen=True)
class Money:
    """Monetary amount with currency.

    Uses Decimal to avoid floating-point rounding errors.  Arithmetic keeps
    full precision; ``rounded()`` is applied only when amounts are frozen
    onto an order or displayed.
    """

    amount: Decimal
    currency: str = "USD"

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}",
                ErrorReason.INVALID_AMOUNT,
            )
        if not self.amount.is_finite():
            raise ValidationError(
                f"Money amount must be finite, got {self.amount}",
                ErrorReason.INVALID_AMOUNT,
            )
        if self.amount < Decimal("0"):
            raise ValidationError(
                f"Money amount cannot be negative, got {self.amount}",
                ErrorReason.INVALID_AMOUNT,
            )

    # --- Arithmetic helpers ---------------------------------------------------

    def __add__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        result = self.amount - other.amount
        if result < Decimal("0"):
            raise ValidationError(
                "Money subtraction would result in a negative amount",
                ErrorReason.INVALID_AMOUNT,
            )
        return Money(result, self.currency)

    def __mul__(self, factor: int | Decimal) -> Money:
        if isinstance(factor, bool) or not isinstance(factor, (int, Decimal)):
            raise TypeError(
                f"Can only multiply Money by int or Decimal, got {type(factor).__name__}"
            )
        return Money(self.amount * factor, self.currency)

    def __lt__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount >= other.amount

    def rounded(self) -> Money:
        """Round half-even to whole cents."""
        return Money(self.amount.quantize(CENT, rounding=ROUND_HALF_EVEN), self.currency)

    # --- Display --------------------------------------------------------------

    def __str__(self) -> str:
        return f"${self.amount:.2f}"

    # --- Internal helpers -----------------------------------------------------

    def _assert_same_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise ValidationError(
                f"Cannot combine {self.currency} with {other.currency}",
                ErrorReason.INVALID_AMOUNT,
            )

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def of(amount: str | float | int | Decimal) -> Money:
        """Convenient factory that coerces to Decimal safely."""
        try:
            return Money(Decimal(str(amount)))
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(
                f"Invalid money amount: {amount!r}", ErrorReason.INVALID_AMOUNT
            ) from exc

    @staticmethod
    def zero() -> Money:
        return Money(Decimal("0"))


@dataclass(frozen=True)
class Quantity:
    """A positive weight in kilograms, at gram precision.

    Enforces the invariant that you cannot order zero or negative amounts.
    """

    kg: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.kg, Decimal):
            raise ValidationError(
                f"Quantity must be a Decimal, got {type(self.kg).__name__}",
                ErrorReason.INVALID_QUANTITY,
            )
        if not self.kg.is_finite() or self.kg <= 0:
            raise ValidationError("Quantity must be positive", ErrorReason.INVALID_QUANTITY)
        if self.kg != self.kg.quantize(Decimal("0.001")):
            raise ValidationError(
                f"Quantity {self.kg} kg is finer than one gram",
                ErrorReason.INVALID_QUANTITY,
            )

    @property
    def grams(self) -> int:
        return int(self.kg * GRAMS_PER_KG)

    def __add__(self, other: Quantity) -> Quantity:
        return Quantity(self.kg + other.kg)

    def __str__(self) -> str:
        return f"{self.kg:.3f} kg"

    @staticmethod
    def of(kg: str | float | int | Decimal) -> Quantity:
        try:
            return Quantity(Decimal(str(kg)))
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(
                f"Invalid quantity: {kg!r}", ErrorReason.INVALID_QUANTITY
            ) from exc

    @staticmethod
    def from_grams(grams: int) -> Quantity:
        return Quantity(Decimal(grams) / GRAMS_PER_KG)
