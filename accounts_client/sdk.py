"""
Accounts SDK - High-level client with typed operations.

This layer provides a clean, typed interface for business accounts,
memberships and sanctioned countries. Built on top of the core APIClient.

Endpoint paths and API key header names differ between endpoint groups;
each operation spells out its own so they match what the server expects.
"""

import builtins
import os
import uuid
from collections.abc import Callable
from http import HTTPStatus
from typing import Any, TypeVar

from accounts_client.core.client import BELOW_400, DEFAULT_TIMEOUT, APIClient, ClientConfig, Transport
from accounts_client.core.types import (
    AccountMembership,
    AddMemberToBusinessAccountInput,
    Business,
    CreateBusinessAccountInput,
    SanctionedCountry,
    UpdateBusinessAccountInput,
    UpdateMemberRoleInput,
    require_country_code,
    require_id,
)

T = TypeVar("T")


class AccountsClient:
    """
    High-level accounts API client.

    Example:
        client = AccountsClient("https://accounts.example.com", token, api_key)

        business = client.businesses.create(
            CreateBusinessAccountInput(user_id=user_id, business_name="Acme")
        )
        client.members.add(
            AddMemberToBusinessAccountInput(user_id=other_id, business_id=business.id, role_id=role_id)
        )
        if client.sanctions.is_sanctioned("KP"):
            ...

    """

    def __init__(
        self,
        base_url: str,
        token: str,
        api_key: str,
        transport: Transport | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Initialize the accounts client.

        Args:
            base_url: API base URL
            token: Bearer token sent with every request
            api_key: API key sent to the endpoints that take one
            transport: Optional transport override (defaults to HTTPTransport)
            timeout: Request timeout in seconds

        """
        config = ClientConfig(base_url=base_url, token=token, api_key=api_key, timeout=timeout)
        self._client = APIClient(config, transport)

        # Sub-clients for different domains
        self.businesses = BusinessOperations(self._client)
        self.members = MemberOperations(self._client)
        self.sanctions = SanctionOperations(self._client)

    @classmethod
    def from_config(cls, config: ClientConfig, transport: Transport | None = None) -> "AccountsClient":
        return cls(config.base_url, config.token, config.api_key, transport=transport, timeout=config.timeout)

    @classmethod
    def from_env(
        cls,
        env_file: str | os.PathLike | None = None,
        transport: Transport | None = None,
    ) -> "AccountsClient":
        """Create a client from ACCOUNTS_* environment variables (see ClientConfig.from_env)."""
        return cls.from_config(ClientConfig.from_env(env_file), transport=transport)

    @property
    def config(self) -> ClientConfig:
        return self._client.config


# =============================================================================
# Business Operations
# =============================================================================


class BusinessOperations:
    """Operations for managing business accounts."""

    def __init__(self, client: APIClient):
        self._client = client

    def create(self, payload: CreateBusinessAccountInput) -> Business:
        """
        Create a new business account for a user.

        Args:
            payload: Owning user and business name

        Returns:
            The Business created by the server

        """
        payload.validate()
        response = self._client.post(
            "/api/v1/business",
            data=payload.to_dict(),
            api_key_header="X-Api-Key",
            expected=HTTPStatus.CREATED,
            action="create business account",
        )
        return self._client.decode(response, Business.from_dict)

    def get(self, business_id: uuid.UUID) -> Business:
        """
        Get a business account by ID.

        Args:
            business_id: The business ID

        Returns:
            Business details

        """
        require_id(business_id, "business_id")
        response = self._client.get(
            "/business/{business_id}",
            path_params={"business_id": business_id},
            api_key_header="X-API-Key",
            action="get business account",
        )
        return self._client.decode(response, Business.from_dict)

    def list_for_user(self, user_id: uuid.UUID) -> builtins.list[Business]:
        """
        List the business accounts owned by a user.

        Args:
            user_id: The owning user ID

        Returns:
            List of Businesses

        """
        require_id(user_id, "user_id")
        response = self._client.get(
            "/users/{user_id}/business_accounts",
            path_params={"user_id": user_id},
            action="list business accounts for user",
        )
        return self._client.decode(response, _list_of(Business.from_dict))

    def list(self) -> builtins.list[Business]:
        """
        List all business accounts.

        Returns:
            List of Businesses

        """
        response = self._client.get(
            "/business-accounts",
            api_key_header="x-api-key",
            action="list business accounts",
        )
        return self._client.decode(response, _list_of(Business.from_dict))

    def update(self, payload: UpdateBusinessAccountInput) -> None:
        """
        Rename a business account.

        Args:
            payload: Owning user, business ID and the new name

        """
        payload.validate()
        # This endpoint lives directly under the base URL
        self._client.put(
            "/{business_id}",
            path_params={"business_id": payload.business_id},
            data=payload.to_dict(),
            api_key_header="X-API-Key",
            action="update business account",
        )

    def delete(self, business_id: uuid.UUID) -> None:
        """
        Delete a business account.

        Args:
            business_id: The business ID

        """
        require_id(business_id, "business_id")
        self._client.delete(
            "/business/{business_id}",
            path_params={"business_id": business_id},
            api_key_header="X-Api-Key",
            action="delete business account",
        )


# =============================================================================
# Member Operations
# =============================================================================


class MemberOperations:
    """Operations for business account membership and roles."""

    def __init__(self, client: APIClient):
        self._client = client

    def add(self, payload: AddMemberToBusinessAccountInput) -> None:
        """
        Add a user to a business account with a role.

        Args:
            payload: User, business and role IDs

        """
        payload.validate()
        self._client.post(
            "/businesses/{business_id}/members",
            path_params={"business_id": payload.business_id},
            data=payload.to_dict(),
            action="add member to business account",
        )

    def remove(self, business_id: uuid.UUID, member_id: uuid.UUID) -> None:
        """
        Remove a member from a business account.

        Args:
            business_id: The business ID
            member_id: The member's user ID

        """
        require_id(business_id, "business_id")
        require_id(member_id, "member_id")
        self._client.delete(
            "/api/businesses/{business_id}/members/{member_id}",
            path_params={"business_id": business_id, "member_id": member_id},
            action="remove member from business account",
        )

    def list(self, business_id: uuid.UUID) -> builtins.list[AccountMembership]:
        """
        List the members of a business account.

        Any status below 400 is treated as success here, unlike the
        other list endpoints which require 200.

        Args:
            business_id: The business ID

        Returns:
            List of AccountMemberships

        """
        require_id(business_id, "business_id")
        response = self._client.get(
            "/api/v1/businesses/{business_id}/members",
            path_params={"business_id": business_id},
            expected=BELOW_400,
            action="list members of business account",
        )
        return self._client.decode(response, _list_of(AccountMembership.from_dict))

    def update_role(self, payload: UpdateMemberRoleInput) -> None:
        """
        Change a member's role within a business account.

        Args:
            payload: Business ID, member user ID and new role ID

        """
        payload.validate()
        self._client.put(
            "/api/v1/businesses/{business_id}/members/{member_user_id}",
            path_params={"business_id": payload.business_id, "member_user_id": payload.member_user_id},
            data=payload.to_event().to_dict(),
            action="update member role",
        )


# =============================================================================
# Sanction Operations
# =============================================================================


class SanctionOperations:
    """Operations for the sanctioned-country list."""

    def __init__(self, client: APIClient):
        self._client = client

    def is_sanctioned(self, country_code: str) -> bool:
        """
        Check whether a country is on the sanctioned list.

        Args:
            country_code: 2 or 3 character country code

        Returns:
            True if the server reports the country as sanctioned

        """
        require_country_code(country_code)
        response = self._client.get(
            "/api/sanctions/countries/{country_code}",
            path_params={"country_code": country_code},
            api_key_header="X-API-Key",
            action="check sanctioned country",
        )
        return self._client.decode(response, _sanction_flag)

    def add(self, country_code: str, country_name: str) -> None:
        """
        Add a country to the sanctioned list.

        Args:
            country_code: 2 or 3 character country code
            country_name: Display name

        """
        country = SanctionedCountry.new(country_code, country_name)
        country.validate()
        self._client.post(
            "/api/sanctioned-countries",
            data=country.to_dict(),
            api_key_header="X-API-Key",
            action="add sanctioned country",
        )

    def remove(self, country_code: str) -> None:
        """
        Remove a country from the sanctioned list.

        Args:
            country_code: 2 or 3 character country code

        """
        require_country_code(country_code)
        self._client.delete(
            "/api/sanctioned-countries/{country_code}",
            path_params={"country_code": country_code},
            api_key_header="X-API-Key",
            action="remove sanctioned country",
        )


# =============================================================================
# Parsers
# =============================================================================


def _list_of(parser: Callable[[Any], T]) -> Callable[[Any], list[T]]:
    def parse(data: Any) -> list[T]:
        # null decodes to an empty list
        if data is None:
            return []
        if not isinstance(data, list):
            raise TypeError(f"expected a JSON array, got {type(data).__name__}")
        return [parser(item) for item in data]

    return parse


def _sanction_flag(data: dict[str, Any]) -> bool:
    flag = data.get("isSanctioned", False)
    if not isinstance(flag, bool):
        raise TypeError(f"isSanctioned must be a boolean, got {flag!r}")
    return flag
