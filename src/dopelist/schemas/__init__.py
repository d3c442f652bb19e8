# src/dopelist/schemas/__init__.py
"""Pydantic schemas for the Dopelist API."""

from .catalog import CategoryOut, CityOut, SectionOut
from .checkout import (
    CheckoutStartRequest,
    CheckoutStartResponse,
    OrderList,
    OrderOut,
    RenewRequest,
    SubscriptionOut,
    VerifyCreateRequest,
)
from .common import CamelModel, ErrorResponse, SuccessResponse
from .engagement import (
    CommentCreate,
    CommentList,
    CommentResponse,
    ReactionRequest,
    ReactionResponse,
    VoteDelete,
    VoteRequest,
    VoteResponse,
)
from .identity import IdentityOut, MergeRequest, MergeResponse, SessionRequest, SessionResponse
from .listing import (
    ContactEntry,
    ContactReveal,
    ListingCreate,
    ListingEnvelope,
    ListingPage,
    ListingResponse,
    ListingUpdate,
    OwnedListings,
)

__all__ = [
    "CategoryOut", "CityOut", "SectionOut",
    "CheckoutStartRequest", "CheckoutStartResponse", "OrderList", "OrderOut",
    "RenewRequest", "SubscriptionOut", "VerifyCreateRequest",
    "CamelModel", "ErrorResponse", "SuccessResponse",
    "CommentCreate", "CommentList", "CommentResponse", "ReactionRequest",
    "ReactionResponse", "VoteDelete", "VoteRequest", "VoteResponse",
    "IdentityOut", "MergeRequest", "MergeResponse", "SessionRequest", "SessionResponse",
    "ContactEntry", "ContactReveal", "ListingCreate", "ListingEnvelope", "ListingPage",
    "ListingResponse", "ListingUpdate", "OwnedListings",
]
