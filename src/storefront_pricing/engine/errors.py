"""Validation errors raised by the pricing calculator."""


class PricingError(ValueError):
    """Base class for pricing input errors."""


class InvalidLineItem(PricingError):
    """A line item has a negative price, a quantity below 1, or an unreadable value."""


class InvalidConfiguration(PricingError):
    """The pricing configuration has a negative rate, cost or threshold."""
