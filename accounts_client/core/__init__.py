"""
Core layer - Raw types and HTTP client.

This layer provides:
- Typed dataclasses for records and request bodies
- Low-level HTTP client with auth, status checks and decoding
"""

from accounts_client.core.client import (
    APIClient,
    AccountsError,
    ClientConfig,
    ConfigurationError,
    DecodeError,
    HTTPTransport,
    PreparedRequest,
    Response,
    ServerError,
    Transport,
    TransportError,
    ValidationError,
)
from accounts_client.core.types import (
    AccountMembership,
    AccountMembershipUpdate,
    AddMemberToBusinessAccountInput,
    Business,
    CreateBusinessAccountInput,
    SanctionedCountry,
    UpdateBusinessAccountInput,
    UpdateMemberRoleInput,
)

__all__ = [
    "APIClient",
    "AccountMembership",
    "AccountMembershipUpdate",
    "AccountsError",
    "AddMemberToBusinessAccountInput",
    "Business",
    "ClientConfig",
    "ConfigurationError",
    "CreateBusinessAccountInput",
    "DecodeError",
    "HTTPTransport",
    "PreparedRequest",
    "Response",
    "SanctionedCountry",
    "ServerError",
    "Transport",
    "TransportError",
    "UpdateBusinessAccountInput",
    "UpdateMemberRoleInput",
    "ValidationError",
]
