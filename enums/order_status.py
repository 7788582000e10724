from enum import Enum


class OrderStatus(Enum):
    PENDING_PAYMENT = "PENDING_PAYMENT"                   # Created, waiting for payment capture
    PAID = "PAID"                                         # Paid successfully
    CANCELLED = "CANCELLED"                               # Cancelled before payment


class AttributionStatus(Enum):
    PENDING = "PENDING"                                   # Commission not yet payable (order unpaid / return window open)
    APPROVED = "APPROVED"                                 # Commission approved for payout
    REJECTED = "REJECTED"                                 # Order cancelled or refunded
