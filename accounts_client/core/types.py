"""
Core types for the accounts API.

These dataclasses provide type safety for API responses and request bodies.
Each input type declares its required fields in validate().
"""

import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from accounts_client.core.client import ValidationError

# The all-zero UUID, treated as "no identifier"
NIL_ID = uuid.UUID(int=0)

_FRACTION = re.compile(r"\.(\d+)")


# =============================================================================
# Field helpers
# =============================================================================


def parse_uuid(value: Any) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(str(value))


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 / RFC 3339 timestamp, e.g. 2024-05-01T10:00:00.123456789Z."""
    if value is None:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    # fromisoformat takes at most microseconds
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    return datetime.fromisoformat(text)


def format_timestamp(value: datetime | None) -> str | None:
    if value is None:
        return None
    text = value.isoformat()
    if text.endswith("+00:00"):
        text = text[:-6] + "Z"
    return text


def require_id(value: uuid.UUID | str | None, name: str) -> None:
    """Reject missing, empty or nil identifiers."""
    if value is None or value == NIL_ID or str(value) in ("", str(NIL_ID)):
        raise ValidationError(f"{name} cannot be empty", field=name)


def require_text(value: str | None, name: str) -> None:
    if not value:
        raise ValidationError(f"{name} cannot be empty", field=name)


def require_country_code(value: str | None) -> None:
    """Country codes are 2 or 3 characters long."""
    if not isinstance(value, str) or not 2 <= len(value) <= 3:
        raise ValidationError(f"invalid country code: {value!r}", field="country_code")


# =============================================================================
# Business Types
# =============================================================================


@dataclass(frozen=True)
class Business:
    """A business account as stored by the server."""

    id: uuid.UUID
    user_account_id: uuid.UUID
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Business":
        """Create from API response dict."""
        return cls(
            id=parse_uuid(data["id"]),
            user_account_id=parse_uuid(data["user_account_id"]),
            created_at=parse_timestamp(data.get("created_at")),
            updated_at=parse_timestamp(data.get("updated_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "user_account_id": str(self.user_account_id),
            "created_at": format_timestamp(self.created_at),
            "updated_at": format_timestamp(self.updated_at),
        }


@dataclass
class CreateBusinessAccountInput:
    """Request body for creating a business account."""

    user_id: uuid.UUID
    business_name: str

    def validate(self) -> None:
        require_id(self.user_id, "user_id")
        require_text(self.business_name, "business_name")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        return {
            "user_id": str(self.user_id),
            "business_name": self.business_name,
        }


@dataclass
class UpdateBusinessAccountInput:
    """Request body for renaming a business account."""

    user_id: uuid.UUID
    business_id: uuid.UUID
    new_business_name: str
    business_name: str = ""

    def validate(self) -> None:
        require_id(self.user_id, "user_id")
        require_text(self.new_business_name, "new_business_name")
        require_id(self.business_id, "business_id")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        return {
            "user_id": str(self.user_id),
            "business_name": self.business_name,
            "new_business_name": self.new_business_name,
            "business_id": str(self.business_id),
        }


# =============================================================================
# Membership Types
# =============================================================================


@dataclass(frozen=True)
class AccountMembership:
    """A user's membership and role within a business account."""

    business_id: uuid.UUID
    user_id: uuid.UUID
    role_id: uuid.UUID

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AccountMembership":
        """Create from API response dict."""
        # Older payloads use account_id / role instead of business_id / role_id
        return cls(
            business_id=parse_uuid(data.get("business_id") or data["account_id"]),
            user_id=parse_uuid(data["user_id"]),
            role_id=parse_uuid(data.get("role_id") or data["role"]),
        )


@dataclass
class AddMemberToBusinessAccountInput:
    """Request body for adding a member to a business account."""

    user_id: uuid.UUID
    business_id: uuid.UUID
    role_id: uuid.UUID

    def validate(self) -> None:
        require_id(self.user_id, "user_id")
        require_id(self.business_id, "business_id")
        require_id(self.role_id, "role_id")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        return {
            "user_id": str(self.user_id),
            "business_id": str(self.business_id),
            "role_id": str(self.role_id),
        }


@dataclass
class UpdateMemberRoleInput:
    """Change the role of an existing member."""

    business_id: uuid.UUID
    member_user_id: uuid.UUID
    new_role_id: uuid.UUID

    def validate(self) -> None:
        require_id(self.business_id, "business_id")
        require_id(self.member_user_id, "member_user_id")
        require_id(self.new_role_id, "new_role_id")

    def to_event(self) -> "AccountMembershipUpdate":
        return AccountMembershipUpdate(
            account_id=self.business_id,
            user_id=self.member_user_id,
            role=str(self.new_role_id),
        )


@dataclass
class AccountMembershipUpdate:
    """Wire body the server expects for a role change."""

    account_id: uuid.UUID
    user_id: uuid.UUID
    role: str
    account_type: str = "business"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        return {
            "account_type": self.account_type,
            "account_id": str(self.account_id),
            "user_id": str(self.user_id),
            "role": self.role,
        }


# =============================================================================
# Sanction Types
# =============================================================================


@dataclass(frozen=True)
class SanctionedCountry:
    """A country flagged as disallowed for compliance purposes."""

    country_code: str
    country_name: str
    id: uuid.UUID = NIL_ID
    added_at: datetime | None = None

    @classmethod
    def new(cls, country_code: str, country_name: str) -> "SanctionedCountry":
        """A record to submit; the server assigns the ID."""
        return cls(
            country_code=country_code,
            country_name=country_name,
            added_at=datetime.now(timezone.utc),
        )

    def validate(self) -> None:
        require_country_code(self.country_code)
        require_text(self.country_name, "country_name")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SanctionedCountry":
        """Create from API response dict."""
        return cls(
            id=parse_uuid(data.get("id") or NIL_ID),
            country_code=data["country_code"],
            country_name=data.get("country_name", ""),
            added_at=parse_timestamp(data.get("added_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        return {
            "id": str(self.id),
            "country_code": self.country_code,
            "country_name": self.country_name,
            "added_at": format_timestamp(self.added_at),
        }
