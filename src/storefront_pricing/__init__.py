"""
Storefront Pricing Package

Checkout totals for the storefront: subtotal, shipping, tax and grand
total computed with decimal arithmetic from cart lines and store settings.
"""

__version__ = "1.0.0"
