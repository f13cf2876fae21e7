#!/usr/bin/env python
"""
Print checkout totals and the calculation trace for a cart export.

Usage:
    python scripts/debug_totals.py CART_CSV [SETTINGS_FILE]
"""
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from storefront_pricing.config.settings import get_settings, load_store_settings
from storefront_pricing.data.cart_loader import load_cart
from storefront_pricing.engine import PricingConfiguration, calculate_totals, size_based_shipping


def debug(cart_path: Path, settings_path: Path):
    values = load_store_settings(settings_path)
    config = PricingConfiguration.from_store_settings(values)

    print(f"Settings: {settings_path}")
    print(f"  Tax rate: {config.tax_rate} ({'inclusive' if config.prices_include_tax else 'exclusive'})")
    print(f"  Shipping: ${config.flat_shipping_cost} below ${config.free_shipping_threshold}")

    items = load_cart(cart_path)
    print(f"\nCart: {cart_path} ({len(items)} lines)")
    for item in items:
        print(f"  {item.sku or '-'}: {item.quantity} x ${item.unit_price} = ${item.line_total}")

    print("\n--- Threshold shipping ---")
    totals = calculate_totals(items, config)
    print(totals.get_trace_text())

    if any(item.shipping_cost is not None for item in items):
        print("\n--- Size-based shipping ---")
        sized = calculate_totals(items, config, shipping_cost=size_based_shipping(items))
        print(sized.get_trace_text())

    print(f"\nCharge amount (minor units): {totals.total_minor_units}")


def main():
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    cart_path = Path(sys.argv[1])
    settings_path = Path(sys.argv[2]) if len(sys.argv) > 2 else get_settings().store_settings

    try:
        debug(cart_path, settings_path)
    except (FileNotFoundError, ValueError) as e:
        print(f"ERROR: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
