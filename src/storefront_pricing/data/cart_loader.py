"""
Cart Loader - Turns a tabular cart export into line items.

Reads a cart export (one row per cart line) with pandas and validates
every row before anything is priced. Problems are collected with their
CSV line numbers and reported together.
"""
import logging
from pathlib import Path

import pandas as pd

from ..engine.errors import InvalidLineItem
from ..engine.models import LineItem

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ('unit_price', 'quantity')


def _parse_quantity(value) -> int:
    """Parse a quantity cell, accepting '2' and '2.0' but not '2.5'."""
    number = float(value)
    if not number.is_integer():
        raise ValueError(f"quantity {value} is not a whole number")
    return int(number)


def _optional(row: dict, column: str):
    value = row.get(column)
    if value is None or pd.isna(value) or str(value).strip() == '':
        return None
    return str(value).strip()


def line_items_from_frame(df: pd.DataFrame) -> list[LineItem]:
    """
    Convert a cart DataFrame into LineItem values.

    Args:
        df: Columns unit_price and quantity, optionally sku and shipping_cost

    Returns:
        Line items in row order

    Raises:
        InvalidLineItem: required columns are missing or any row is invalid
    """
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise InvalidLineItem(f"Cart is missing columns: {', '.join(missing)}")

    items = []
    errors = []
    for line_num, row in enumerate(df.to_dict(orient='records'), start=2):  # +2 for 1-indexed header row
        sku = _optional(row, 'sku')
        unit_price = _optional(row, 'unit_price')
        raw_qty = _optional(row, 'quantity')

        if unit_price is None or raw_qty is None:
            errors.append(f"Row {line_num}: unit_price and quantity are required")
            continue

        try:
            quantity = _parse_quantity(raw_qty)
        except ValueError:
            errors.append(f"Row {line_num}: invalid quantity '{raw_qty}'")
            continue

        try:
            items.append(LineItem(
                unit_price=unit_price,
                quantity=quantity,
                sku=sku,
                shipping_cost=_optional(row, 'shipping_cost'),
            ))
        except InvalidLineItem as e:
            errors.append(f"Row {line_num}: {e}")

    if errors:
        raise InvalidLineItem("Invalid cart rows:\n" + "\n".join(errors))

    return items


def load_cart(path: Path) -> list[LineItem]:
    """Read a cart CSV export into line items."""
    if not path.exists():
        raise FileNotFoundError(f"Cart export not found at {path}")

    # Prices stay strings so Decimal sees exactly what was exported
    df = pd.read_csv(path, dtype=str)
    df.columns = [str(c).strip().lower() for c in df.columns]

    items = line_items_from_frame(df)
    logger.debug("Loaded %d cart lines from %s", len(items), path)
    return items
