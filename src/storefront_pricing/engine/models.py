"""
Data models for the checkout pricing calculator.

Uses frozen dataclasses so line items, configuration and totals behave
as values. All money is held as Decimal.
"""
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

from ..config.parsers import FALSE_VALUES, TRUE_VALUES
from .errors import InvalidConfiguration, InvalidLineItem

CENT = Decimal('0.01')
ZERO = Decimal('0')


def to_decimal(value) -> Decimal:
    """
    Convert a price-like value to Decimal.

    Floats go through their shortest repr so 19.99 becomes Decimal('19.99')
    and not the binary approximation.
    """
    if isinstance(value, bool):
        raise TypeError(f"Expected a number, got {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        if isinstance(value, float):
            value = repr(value)
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError(f"Not a decimal amount: {value!r}")
    if not result.is_finite():
        raise ValueError(f"Not a finite amount: {value!r}")
    return result


def round_money(amount: Decimal) -> Decimal:
    """Round to 2 decimal places, half-up."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def to_minor_units(amount: Decimal) -> int:
    """Convert a two-place amount to integer cents (64.38 -> 6438)."""
    return int(round_money(to_decimal(amount)) * 100)


def _parse_flag(value) -> bool:
    """Read the inclusive-tax flag from a bool or a settings string."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text in TRUE_VALUES:
            return True
        if text in FALSE_VALUES:
            return False
    raise InvalidConfiguration(f"prices_include_tax must be a boolean, got {value!r}")


@dataclass(frozen=True)
class TraceStep:
    """A single step in the totals calculation trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass(frozen=True)
class LineItem:
    """A cart entry: a quantity of one priced product variant."""
    unit_price: Decimal
    quantity: int
    sku: Optional[str] = None
    shipping_cost: Optional[Decimal] = None  # size-based charge, once per line

    def __post_init__(self):
        label = self.sku or 'line item'
        try:
            unit_price = to_decimal(self.unit_price)
        except (TypeError, ValueError) as e:
            raise InvalidLineItem(f"{label}: invalid unit price ({e})")
        if unit_price < 0:
            raise InvalidLineItem(f"{label}: unit price {unit_price} is negative")

        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise InvalidLineItem(f"{label}: quantity must be an integer, got {self.quantity!r}")
        if self.quantity < 1:
            raise InvalidLineItem(f"{label}: quantity {self.quantity} is below 1")

        shipping_cost = self.shipping_cost
        if shipping_cost is not None:
            try:
                shipping_cost = to_decimal(shipping_cost)
            except (TypeError, ValueError) as e:
                raise InvalidLineItem(f"{label}: invalid shipping cost ({e})")
            if shipping_cost < 0:
                raise InvalidLineItem(f"{label}: shipping cost {shipping_cost} is negative")

        object.__setattr__(self, 'unit_price', unit_price)
        object.__setattr__(self, 'shipping_cost', shipping_cost)

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    @classmethod
    def coerce(cls, item) -> 'LineItem':
        """Accept a LineItem or a (unit_price, quantity) pair."""
        if isinstance(item, cls):
            return item
        try:
            unit_price, quantity = item
        except (TypeError, ValueError):
            raise InvalidLineItem(f"Expected LineItem or (unit_price, quantity), got {item!r}")
        return cls(unit_price=unit_price, quantity=quantity)


@dataclass(frozen=True)
class PricingConfiguration:
    """Tax and shipping rules supplied by the store settings."""
    tax_rate: Decimal = ZERO
    prices_include_tax: bool = False
    flat_shipping_cost: Decimal = Decimal('10.00')
    free_shipping_threshold: Decimal = Decimal('100.00')

    def __post_init__(self):
        for name in ('tax_rate', 'flat_shipping_cost', 'free_shipping_threshold'):
            try:
                value = to_decimal(getattr(self, name))
            except (TypeError, ValueError) as e:
                raise InvalidConfiguration(f"{name}: {e}")
            if value < 0:
                raise InvalidConfiguration(f"{name} must not be negative, got {value}")
            object.__setattr__(self, name, value)
        object.__setattr__(self, 'prices_include_tax', _parse_flag(self.prices_include_tax))

    @classmethod
    def from_store_settings(cls, values: dict) -> 'PricingConfiguration':
        """
        Build configuration from store settings values.

        tax_rate is stored as a percentage (8.75 means 8.75%). Missing keys
        fall back to the defaults: no tax, exclusive prices, $10 shipping
        below $100.
        """
        defaults = cls()

        def pick(key, default):
            value = values.get(key)
            if value is None or (isinstance(value, str) and value.strip() == ''):
                return default
            return value

        try:
            tax_percent = to_decimal(pick('tax_rate', ZERO))
        except (TypeError, ValueError) as e:
            raise InvalidConfiguration(f"tax_rate: {e}")

        return cls(
            tax_rate=tax_percent / 100,
            prices_include_tax=pick('prices_include_tax', False),
            flat_shipping_cost=pick('flat_shipping_cost', defaults.flat_shipping_cost),
            free_shipping_threshold=pick('free_shipping_threshold', defaults.free_shipping_threshold),
        )


@dataclass(frozen=True)
class Totals:
    """Complete result of a totals calculation."""
    subtotal: Decimal
    total_quantity: int
    shipping_cost: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal
    subtotal_excluding_tax: Decimal
    trace: tuple[TraceStep, ...] = field(default=(), repr=False)

    @property
    def total_minor_units(self) -> int:
        return to_minor_units(self.total)

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"• {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"• {t.step}: {t.description}")
        return "\n".join(lines)

    def to_legacy_dict(self) -> dict:
        """Flat dict in the shape the checkout pages consume."""
        return {
            "subtotal": float(self.subtotal),
            "subtotal_excluding_tax": float(self.subtotal_excluding_tax),
            "tax_amount": float(self.tax_amount),
            "tax_rate": float(self.tax_rate),
            "shipping_cost": float(self.shipping_cost),
            "total": float(self.total),
            "total_quantity": self.total_quantity,
        }
