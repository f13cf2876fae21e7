"""Engine subpackage - checkout totals calculation."""
from .errors import PricingError, InvalidLineItem, InvalidConfiguration
from .models import LineItem, PricingConfiguration, Totals
from .pricing_engine import PricingEngine, calculate_totals, size_based_shipping

__all__ = [
    'PricingEngine', 'calculate_totals', 'size_based_shipping',
    'LineItem', 'PricingConfiguration', 'Totals',
    'PricingError', 'InvalidLineItem', 'InvalidConfiguration',
]
