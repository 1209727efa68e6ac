"""
Tests for the transactional unit of work.
"""
from datetime import timedelta

import pytest
from sqlalchemy import func, select

from key_manager.models.api_key import APIKey, KeyStatus


def make_key(context, token="APIKEY_S3CR3T_" + "a" * 32):
    now = context.now()
    return APIKey(key_value=token, start_date=now, expires_at=now + timedelta(days=30), status=KeyStatus.ACTIVE)


def key_count(context) -> int:
    with context.session_factory() as session:
        return session.execute(select(func.count()).select_from(APIKey)).scalar_one()


def test_commit_persists(context):
    with context.unit_of_work() as uow:
        uow.session.add(make_key(context))
        uow.commit()

    assert key_count(context) == 1


def test_exception_rolls_back_and_propagates(context):
    with pytest.raises(RuntimeError):
        with context.unit_of_work() as uow:
            uow.session.add(make_key(context))
            uow.session.flush()
            raise RuntimeError("boom")

    assert key_count(context) == 0


def test_leaving_without_commit_discards_work(context):
    with context.unit_of_work() as uow:
        uow.session.add(make_key(context))
        uow.session.flush()

    assert key_count(context) == 0


def test_session_is_released_on_exit(context):
    uow = context.unit_of_work()
    with uow:
        assert uow.session is not None

    assert uow.session is None
    assert context.engine.pool.checkedout() == 0


def test_commit_outside_block_is_an_error(context):
    with pytest.raises(RuntimeError):
        context.unit_of_work().commit()
