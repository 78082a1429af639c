"""Serialization / validation schemas (Marshmallow)."""

from .user_schema import LoginSchema, RegisterSchema, RoleGrantSchema, UserSchema
from .order_schema import (
    AddOnsSchema,
    CancellationDecisionSchema,
    CancellationRequestSchema,
    ChangeProducerSchema,
    ChecklistSchema,
    CheckoutCreateSchema,
    DeliverySchema,
    PaymentVerifySchema,
    RevisionSchema,
    SongRequestSchema,
    StatusUpdateSchema,
)
from .revision_schema import (
    MessageCreateSchema,
    RevisionDeliverSchema,
    RevisionFeedbackSchema,
    RevisionMessageSchema,
    RevisionRequestSchema,
)
from .producer_schema import (
    ApplicationDecisionSchema,
    DriveCallbackSchema,
    DriveFinalizeSchema,
    ProducerApplicationCreateSchema,
    ProducerApplicationSchema,
    ProducerSchema,
    ProducerUpdateSchema,
    UploadSessionSchema,
)

__all__ = [
    "LoginSchema",
    "RegisterSchema",
    "RoleGrantSchema",
    "UserSchema",
    "AddOnsSchema",
    "CancellationDecisionSchema",
    "CancellationRequestSchema",
    "ChangeProducerSchema",
    "ChecklistSchema",
    "CheckoutCreateSchema",
    "DeliverySchema",
    "PaymentVerifySchema",
    "RevisionSchema",
    "SongRequestSchema",
    "StatusUpdateSchema",
    "MessageCreateSchema",
    "RevisionDeliverSchema",
    "RevisionFeedbackSchema",
    "RevisionMessageSchema",
    "RevisionRequestSchema",
    "ApplicationDecisionSchema",
    "DriveCallbackSchema",
    "DriveFinalizeSchema",
    "ProducerApplicationCreateSchema",
    "ProducerApplicationSchema",
    "ProducerSchema",
    "ProducerUpdateSchema",
    "UploadSessionSchema",
]
