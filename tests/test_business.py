"""Tests for business account operations."""

import uuid
from datetime import datetime, timezone

import pytest

from accounts_client.core.client import DecodeError, ServerError, ValidationError
from accounts_client.core.types import (
    NIL_ID,
    Business,
    CreateBusinessAccountInput,
    UpdateBusinessAccountInput,
)

USER_ID = uuid.UUID("6f1c1d2e-4b1a-4c57-9a53-3c1f0f5a7e10")
BUSINESS_ID = uuid.UUID("0b7e2c48-2f0e-4a43-8f6d-7a9f3f3c2d11")


def make_business(**overrides) -> Business:
    fields = {
        "id": BUSINESS_ID,
        "user_account_id": USER_ID,
        "created_at": datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc),
        "updated_at": datetime(2024, 3, 2, 17, 5, 12, 250000, tzinfo=timezone.utc),
    }
    fields.update(overrides)
    return Business(**fields)


# =============================================================================
# Create
# =============================================================================


def test_create_returns_decoded_business(client, transport):
    expected = make_business()
    transport.reply(201, expected.to_dict())

    business = client.businesses.create(CreateBusinessAccountInput(user_id=USER_ID, business_name="Acme"))

    assert business == expected


def test_create_request_shape(client, transport):
    transport.reply(201, make_business().to_dict())

    client.businesses.create(CreateBusinessAccountInput(user_id=USER_ID, business_name="Acme"))

    request = transport.last
    assert request.method == "POST"
    assert request.url == "https://accounts.test/api/v1/business"
    assert request.headers["Content-Type"] == "application/json"
    assert request.headers["Authorization"] == "Bearer test-token"
    assert request.headers["X-Api-Key"] == "test-api-key"
    assert transport.last_json() == {"user_id": str(USER_ID), "business_name": "Acme"}


def test_create_requires_201(client, transport):
    transport.reply(200, make_business().to_dict())

    with pytest.raises(ServerError) as exc_info:
        client.businesses.create(CreateBusinessAccountInput(user_id=USER_ID, business_name="Acme"))

    assert exc_info.value.status == 200


@pytest.mark.parametrize(
    "payload",
    [
        CreateBusinessAccountInput(user_id=NIL_ID, business_name="Acme"),
        CreateBusinessAccountInput(user_id=None, business_name="Acme"),
        CreateBusinessAccountInput(user_id=USER_ID, business_name=""),
    ],
)
def test_create_validation_sends_nothing(client, transport, payload):
    with pytest.raises(ValidationError):
        client.businesses.create(payload)

    assert transport.requests == []


def test_create_invalid_json_is_decode_error(client, transport):
    transport.reply(201, b"<html>created</html>")

    with pytest.raises(DecodeError):
        client.businesses.create(CreateBusinessAccountInput(user_id=USER_ID, business_name="Acme"))


def test_create_missing_fields_is_decode_error(client, transport):
    transport.reply(201, {"id": str(BUSINESS_ID)})

    with pytest.raises(DecodeError):
        client.businesses.create(CreateBusinessAccountInput(user_id=USER_ID, business_name="Acme"))


# =============================================================================
# Get / list
# =============================================================================


def test_get_by_id(client, transport):
    transport.reply(200, make_business().to_dict())

    business = client.businesses.get(BUSINESS_ID)

    assert business.id == BUSINESS_ID
    assert transport.last.method == "GET"
    assert transport.last.url == f"https://accounts.test/business/{BUSINESS_ID}"
    assert transport.last.headers["X-API-Key"] == "test-api-key"
    assert transport.last.body is None


def test_get_nil_id_is_rejected(client, transport):
    with pytest.raises(ValidationError) as exc_info:
        client.businesses.get(NIL_ID)

    assert exc_info.value.field == "business_id"
    assert transport.requests == []


def test_list_for_user(client, transport):
    other = make_business(id=uuid.uuid4())
    transport.reply(200, [make_business().to_dict(), other.to_dict()])

    businesses = client.businesses.list_for_user(USER_ID)

    assert businesses == [make_business(), other]
    assert transport.last.url == f"https://accounts.test/users/{USER_ID}/business_accounts"
    # This endpoint takes no API key
    assert "X-API-Key" not in transport.last.headers
    assert "X-Api-Key" not in transport.last.headers


def test_list_for_user_null_body_is_empty(client, transport):
    transport.reply(200, None)

    assert client.businesses.list_for_user(USER_ID) == []


def test_list_all(client, transport):
    transport.reply(200, [make_business().to_dict()])

    businesses = client.businesses.list()

    assert businesses == [make_business()]
    assert transport.last.url == "https://accounts.test/business-accounts"
    assert transport.last.headers["x-api-key"] == "test-api-key"


def test_list_all_rejects_201(client, transport):
    transport.reply(201, [make_business().to_dict()])

    with pytest.raises(ServerError):
        client.businesses.list()


def test_list_object_instead_of_array_is_decode_error(client, transport):
    transport.reply(200, make_business().to_dict())

    with pytest.raises(DecodeError):
        client.businesses.list()


# =============================================================================
# Update / delete
# =============================================================================


def test_update_sends_put_to_business_id(client, transport):
    payload = UpdateBusinessAccountInput(
        user_id=USER_ID,
        business_id=BUSINESS_ID,
        business_name="Acme",
        new_business_name="Acme Holdings",
    )

    assert client.businesses.update(payload) is None

    request = transport.last
    assert request.method == "PUT"
    assert request.url == f"https://accounts.test/{BUSINESS_ID}"
    assert request.headers["X-API-Key"] == "test-api-key"
    assert transport.last_json() == {
        "user_id": str(USER_ID),
        "business_name": "Acme",
        "new_business_name": "Acme Holdings",
        "business_id": str(BUSINESS_ID),
    }


def test_update_empty_new_name_is_rejected(client, transport):
    payload = UpdateBusinessAccountInput(user_id=USER_ID, business_id=BUSINESS_ID, new_business_name="")

    with pytest.raises(ValidationError) as exc_info:
        client.businesses.update(payload)

    assert exc_info.value.field == "new_business_name"
    assert transport.requests == []


@pytest.mark.parametrize("field", ["user_id", "business_id"])
def test_update_nil_ids_are_rejected(client, transport, field):
    values = {"user_id": USER_ID, "business_id": BUSINESS_ID, "new_business_name": "New"}
    values[field] = NIL_ID

    with pytest.raises(ValidationError) as exc_info:
        client.businesses.update(UpdateBusinessAccountInput(**values))

    assert exc_info.value.field == field
    assert transport.requests == []


def test_update_server_error_keeps_body(client, transport):
    transport.reply(409, b"name already taken")
    payload = UpdateBusinessAccountInput(user_id=USER_ID, business_id=BUSINESS_ID, new_business_name="Taken")

    with pytest.raises(ServerError) as exc_info:
        client.businesses.update(payload)

    assert exc_info.value.status == 409
    assert exc_info.value.body == "name already taken"


def test_delete(client, transport):
    client.businesses.delete(BUSINESS_ID)

    assert transport.last.method == "DELETE"
    assert transport.last.url == f"https://accounts.test/business/{BUSINESS_ID}"
    assert transport.last.headers["X-Api-Key"] == "test-api-key"


def test_delete_unexpected_status(client, transport):
    transport.reply(500, b"database unavailable")

    with pytest.raises(ServerError) as exc_info:
        client.businesses.delete(BUSINESS_ID)

    assert "500" in str(exc_info.value)
    assert "database unavailable" in str(exc_info.value)


def test_failure_does_not_poison_client(client, transport):
    transport.reply(500, b"boom")
    transport.reply(200, make_business().to_dict())

    with pytest.raises(ServerError):
        client.businesses.get(BUSINESS_ID)

    assert client.businesses.get(BUSINESS_ID) == make_business()
