"""Business logic modules (checkout, assignment, payouts, delivery, etc.)."""

from . import (
    catalog,
    background,
    mail_service,
    notification_service,
    matching_service,
    checkout_service,
    payment_service,
    assignment_service,
    payout_service,
    revision_service,
    delivery_service,
    cancellation_service,
    drive_service,
    producer_service,
)

__all__ = [
    "catalog",
    "background",
    "mail_service",
    "notification_service",
    "matching_service",
    "checkout_service",
    "payment_service",
    "assignment_service",
    "payout_service",
    "revision_service",
    "delivery_service",
    "cancellation_service",
    "drive_service",
    "producer_service",
]
