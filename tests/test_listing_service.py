"""
Tests for the user/key listing service.
"""
from datetime import timedelta

from sqlalchemy import update

from key_manager.core.database import Base
from key_manager.core.errors import ErrorKind
from key_manager.models.api_key import APIKey, KeyStatus
from key_manager.services.key_issuer import KeyIssuer
from key_manager.services.listing_service import UserListingService


def test_empty_store_lists_nothing(context):
    result = UserListingService(context).list_users_with_keys()

    assert result.ok
    assert result.value == []


def test_lists_one_row_per_user_joined_to_key(context, clock):
    issuer = KeyIssuer(context)
    first = issuer.issue("Ada", "Lovelace", "ada@example.com").value
    second = issuer.issue("Grace", "Hopper", "grace@example.com").value

    result = UserListingService(context).list_users_with_keys()

    assert result.ok
    rows = result.value
    assert [row.email for row in rows] == ["ada@example.com", "grace@example.com"]
    assert rows[0].user_id == first.user_id
    assert rows[0].key_token == first.token
    assert rows[1].key_token == second.token
    assert rows[0].start == clock()
    assert rows[0].expiry - rows[0].start == timedelta(days=30)
    assert rows[0].status == KeyStatus.ACTIVE


def test_listing_reflects_status_changes(context):
    issued = KeyIssuer(context).issue("Ada", "Lovelace", "ada@example.com").value
    with context.session_factory() as session:
        session.execute(update(APIKey).where(APIKey.key_value == issued.token).values(status=KeyStatus.REVOKED))
        session.commit()

    rows = UserListingService(context).list_users_with_keys().value

    assert rows[0].status == KeyStatus.REVOKED


def test_listing_storage_failure(context):
    Base.metadata.drop_all(context.engine)

    result = UserListingService(context).list_users_with_keys()

    assert not result.ok
    assert result.error.kind == ErrorKind.STORAGE_ERROR
