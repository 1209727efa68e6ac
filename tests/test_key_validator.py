"""
Tests for API key validation verdicts.
"""
import pytest
from sqlalchemy import select, text, update
from sqlalchemy.exc import IntegrityError

from key_manager.core.database import Base
from key_manager.core.errors import ErrorKind
from key_manager.models.api_key import APIKey, KeyStatus
from key_manager.services.key_issuer import KeyIssuer
from key_manager.services.key_validator import KeyValidator, KeyVerdict


@pytest.fixture
def issued_token(context):
    result = KeyIssuer(context).issue("Ada", "Lovelace", "ada@example.com")
    assert result.ok
    return result.value.token


def set_status(context, token, status):
    with context.session_factory() as session:
        session.execute(update(APIKey).where(APIKey.key_value == token).values(status=status))
        session.commit()


def stored_status(context, token):
    with context.session_factory() as session:
        return session.execute(select(APIKey.status).where(APIKey.key_value == token)).scalar_one()


def test_active_key_is_valid(context, issued_token):
    result = KeyValidator(context).validate(issued_token)

    assert result.ok
    verdict = result.value
    assert verdict.valid is True
    assert verdict.verdict == KeyVerdict.VALID
    assert verdict.status == KeyStatus.ACTIVE
    assert verdict.expires_at is not None


def test_repeated_validation_is_idempotent(context, issued_token):
    """Validating the same key many times gives the same answer and changes nothing."""
    validator = KeyValidator(context)
    verdicts = [validator.validate(issued_token).value for _ in range(5)]

    assert all(v == verdicts[0] for v in verdicts)
    assert verdicts[0].valid is True
    assert stored_status(context, issued_token) == KeyStatus.ACTIVE


@pytest.mark.parametrize("token", ["APIKEY_S3CR3T_" + "0" * 32, "not-a-key", "APIKEY_S3CR3T_"])
def test_unknown_token_is_not_found(context, issued_token, token):
    result = KeyValidator(context).validate(token)

    assert result.ok
    assert result.value.valid is False
    assert result.value.verdict == KeyVerdict.KEY_NOT_FOUND
    assert result.value.message == "API key not found"


def test_revoked_key_is_rejected_with_status_in_message(context, issued_token):
    set_status(context, issued_token, KeyStatus.REVOKED)

    result = KeyValidator(context).validate(issued_token)

    assert result.value.valid is False
    assert result.value.verdict == KeyVerdict.KEY_STATUS_INVALID
    assert "revoked" in result.value.message
    assert result.value.status == KeyStatus.REVOKED


def test_revoked_key_is_rejected_even_after_expiry(context, clock, issued_token):
    """Status is checked before expiry."""
    set_status(context, issued_token, KeyStatus.REVOKED)
    clock.advance(days=45)

    result = KeyValidator(context).validate(issued_token)

    assert result.value.verdict == KeyVerdict.KEY_STATUS_INVALID
    assert "revoked" in result.value.message


def test_key_marked_expired_is_status_invalid(context, issued_token):
    set_status(context, issued_token, KeyStatus.EXPIRED)

    result = KeyValidator(context).validate(issued_token)

    assert result.value.verdict == KeyVerdict.KEY_STATUS_INVALID
    assert "expired" in result.value.message


def test_active_key_past_expiry_is_expired(context, clock, issued_token):
    """Expiry is decided lazily and never written back."""
    clock.advance(days=30, seconds=1)

    result = KeyValidator(context).validate(issued_token)

    assert result.value.valid is False
    assert result.value.verdict == KeyVerdict.KEY_EXPIRED
    assert result.value.message == "API key expired"
    assert stored_status(context, issued_token) == KeyStatus.ACTIVE


def test_key_is_valid_at_exact_expiry(context, clock, issued_token):
    clock.advance(days=30)

    result = KeyValidator(context).validate(issued_token)

    assert result.value.valid is True


@pytest.mark.parametrize("token", [None, "", "   "])
def test_blank_token_is_validation_error(context, token):
    result = KeyValidator(context).validate(token)

    assert not result.ok
    assert result.error.kind == ErrorKind.VALIDATION_ERROR


def test_lookup_failure_is_storage_error(context, issued_token):
    Base.metadata.drop_all(context.engine)

    result = KeyValidator(context).validate(issued_token)

    assert not result.ok
    assert result.error.kind == ErrorKind.STORAGE_ERROR


@pytest.mark.parametrize("raw_status", ["revoked", "ACTIVE", "Suspended"])
def test_unknown_status_is_rejected_on_write(context, issued_token, raw_status):
    """Only the three canonical status strings can be stored, so validation never reads anything else."""
    with context.session_factory() as session:
        with pytest.raises(IntegrityError):
            session.execute(
                text("UPDATE api_keys SET status = :status WHERE key_value = :token"),
                {"status": raw_status, "token": issued_token},
            )
            session.commit()

    result = KeyValidator(context).validate(issued_token)

    assert result.ok
    assert result.value.valid is True
    assert stored_status(context, issued_token) == KeyStatus.ACTIVE
