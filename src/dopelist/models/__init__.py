# src/dopelist/models/__init__.py
"""SQLAlchemy models for the Dopelist application."""

from .catalog import Category, City, Section
from .engagement import Comment, ListingReaction, ListingVote
from .identity import BillingCustomer, Identity, IdentityKind
from .listing import REACTION_KEYS, ContactChannel, ContactView, Listing
from .payment import CheckoutIntent, IntentStatus, PaymentAction, PaymentRedemption

__all__ = [
    "Category", "City", "Section",
    "Comment", "ListingReaction", "ListingVote",
    "BillingCustomer", "Identity", "IdentityKind",
    "REACTION_KEYS", "ContactChannel", "ContactView", "Listing",
    "CheckoutIntent", "IntentStatus", "PaymentAction", "PaymentRedemption",
]
