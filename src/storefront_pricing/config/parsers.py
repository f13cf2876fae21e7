"""
Value parsers shared by the settings loader and the pricing models.

Kept free of third-party imports so the calculator can use them.
"""

TRUE_VALUES = ('true', '1', 'yes', 'on')
FALSE_VALUES = ('false', '0', 'no', 'off', '')


def parse_bool(value: str) -> bool:
    """Parse a boolean from a settings string."""
    return str(value).strip().lower() in TRUE_VALUES
