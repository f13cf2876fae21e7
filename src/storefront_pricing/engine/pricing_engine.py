"""
Pricing Engine - checkout totals computation.

Computes subtotal, shipping, tax and grand total for a cart:
- Flat shipping below the free-shipping threshold, free at or above it
- A single flat tax rate, added on top or backed out of inclusive prices
- Half-up rounding to 2 places, with tax computed from the rounded subtotal

calculate_totals() is pure. PricingEngine binds a configuration loaded
from the store settings table for callers that don't carry one.
"""
import logging
from decimal import Decimal
from typing import Iterable, Optional

from ..config.settings import Settings, get_settings, load_store_settings
from .errors import PricingError
from .models import (
    ZERO,
    LineItem,
    PricingConfiguration,
    Totals,
    TraceStep,
    round_money,
    to_decimal,
)

logger = logging.getLogger(__name__)


def calculate_shipping(subtotal: Decimal, config: PricingConfiguration) -> Decimal:
    """Flat shipping strictly below the threshold, free at or above it."""
    if subtotal >= config.free_shipping_threshold:
        return ZERO
    return config.flat_shipping_cost


def size_based_shipping(line_items: Iterable) -> Decimal:
    """
    Sum of per-line size shipping charges.

    Each line contributes its charge once, regardless of quantity.
    Lines without a charge contribute nothing.
    """
    total = ZERO
    for item in line_items:
        item = LineItem.coerce(item)
        if item.shipping_cost is not None:
            total += item.shipping_cost
    return round_money(total)


def calculate_tax(subtotal: Decimal, config: PricingConfiguration) -> tuple[Decimal, Decimal]:
    """
    Compute the tax portion of a rounded subtotal.

    Returns (tax_amount, subtotal_excluding_tax).
    """
    rate = config.tax_rate
    if config.prices_include_tax:
        net = subtotal / (1 + rate)
        return round_money(subtotal - net), round_money(net)
    return round_money(subtotal * rate), subtotal


def calculate_totals(
    line_items: Iterable,
    config: PricingConfiguration,
    shipping_cost: Optional[Decimal] = None,
) -> Totals:
    """
    Calculate checkout totals for a set of line items.

    Args:
        line_items: LineItem values or (unit_price, quantity) pairs; may be empty
        config: Tax and shipping rules
        shipping_cost: Explicit shipping charge (e.g. size-based) that replaces
            the threshold rule

    Returns:
        Totals with every monetary field rounded to 2 places

    Raises:
        InvalidLineItem: an item has a negative price or a quantity below 1
    """
    items = [LineItem.coerce(item) for item in line_items]
    trace = []

    raw_subtotal = sum((item.line_total for item in items), ZERO)
    total_quantity = sum(item.quantity for item in items)
    subtotal = round_money(raw_subtotal)
    trace.append(TraceStep("Subtotal", f"{len(items)} lines, {total_quantity} units", f"${subtotal}"))

    if shipping_cost is not None:
        try:
            shipping = round_money(to_decimal(shipping_cost))
        except (TypeError, ValueError) as e:
            raise PricingError(f"Invalid shipping charge ({e})")
        if shipping < 0:
            raise PricingError(f"Shipping charge {shipping} is negative")
        trace.append(TraceStep("Shipping", "Explicit shipping charge", f"${shipping}"))
    else:
        shipping = round_money(calculate_shipping(subtotal, config))
        if shipping == 0:
            desc = f"Subtotal at or above ${config.free_shipping_threshold} threshold"
        else:
            desc = f"Subtotal below ${config.free_shipping_threshold} threshold"
        trace.append(TraceStep("Shipping", desc, f"${shipping}"))

    tax_amount, subtotal_excluding_tax = calculate_tax(subtotal, config)
    if config.prices_include_tax:
        trace.append(TraceStep("Tax", f"Backed out of inclusive prices at {config.tax_rate}", f"${tax_amount}"))
        total = round_money(subtotal + shipping)
    else:
        trace.append(TraceStep("Tax", f"Added at {config.tax_rate}", f"${tax_amount}"))
        total = round_money(subtotal + tax_amount + shipping)
    trace.append(TraceStep("Total", "Grand total", f"${total}"))

    return Totals(
        subtotal=subtotal,
        total_quantity=total_quantity,
        shipping_cost=shipping,
        tax_rate=config.tax_rate,
        tax_amount=tax_amount,
        total=total,
        subtotal_excluding_tax=subtotal_excluding_tax,
        trace=tuple(trace),
    )


class PricingEngine:
    """
    Checkout totals bound to one store configuration.

    The configuration is either passed in or read once from the store
    settings table named by Settings.
    """

    def __init__(self, config: Optional[PricingConfiguration] = None, settings: Optional[Settings] = None):
        if config is None:
            self.settings = settings or get_settings()
            path = self.settings.store_settings
            if not path.exists():
                raise FileNotFoundError(
                    f"Store settings not found at {path}. "
                    "Export the settings table or pass a PricingConfiguration."
                )
            config = PricingConfiguration.from_store_settings(load_store_settings(path))
            logger.debug("Loaded pricing configuration from %s", path)
        else:
            self.settings = settings
        self.config = config

    def reload_data(self):
        """Re-read the store settings table."""
        if self.settings is None:
            return
        self.__init__(settings=self.settings)

    def calculate(self, line_items: Iterable, shipping_cost: Optional[Decimal] = None) -> Totals:
        """Calculate totals with full trace."""
        totals = calculate_totals(line_items, self.config, shipping_cost=shipping_cost)
        logger.debug("Calculated totals: %s", totals.get_trace_text())
        return totals

    def calculate_quote(self, line_items: Iterable, shipping_cost: Optional[Decimal] = None) -> dict:
        """
        Calculate totals (flat dict format for the checkout pages).

        Returns:
            Dict with subtotal, tax_amount, shipping_cost, total, ... keys
        """
        return self.calculate(line_items, shipping_cost=shipping_cost).to_legacy_dict()
