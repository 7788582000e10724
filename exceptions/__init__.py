"""
Custom exceptions for the storefront pricing service.

This module provides a hierarchy of custom exceptions for consistent error handling
throughout the application. Every exception carries a stable ``code`` that the
HTTP layer returns to callers.

Exception Hierarchy:
--------------------
StorefrontException (base)
├── PricingInputException
│   ├── EmptyCartException              EMPTY_CART
│   ├── BadLinesException               BAD_LINES
│   ├── InvalidShippingFeeException     BAD_SHIPPING_FEE
│   ├── MixedCurrencyException          MIXED_CURRENCY_NOT_SUPPORTED
│   ├── ProductNotFoundException        PRODUCT_NOT_FOUND
│   └── UnpublishedItemException        UNPUBLISHED_ITEM
├── DiscountCodeException
│   ├── CodeRequiredException           CODE_REQUIRED
│   └── InvalidOrExpiredCodeException   INVALID_OR_EXPIRED
└── OrderException
    └── TotalMismatchException          TOTAL_MISMATCH

Usage:
------
Services raise specific exceptions:
    raise ProductNotFoundException(product_ids=["p-1"])

The API router converts them to JSON:
    except StorefrontException as e:
        status_code, body = handle_service_error(e)
"""

from .base import StorefrontException
from .cart import (
    PricingInputException,
    EmptyCartException,
    BadLinesException,
    InvalidShippingFeeException,
    MixedCurrencyException,
)
from .product import ProductNotFoundException, UnpublishedItemException
from .promo import DiscountCodeException, CodeRequiredException, InvalidOrExpiredCodeException
from .order import OrderException, TotalMismatchException

__all__ = [
    # Base
    'StorefrontException',

    # Cart input
    'PricingInputException',
    'EmptyCartException',
    'BadLinesException',
    'InvalidShippingFeeException',
    'MixedCurrencyException',

    # Product
    'ProductNotFoundException',
    'UnpublishedItemException',

    # Discount codes
    'DiscountCodeException',
    'CodeRequiredException',
    'InvalidOrExpiredCodeException',

    # Order
    'OrderException',
    'TotalMismatchException',
]
