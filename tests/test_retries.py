import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from storefront.common.retries import is_recoverable_exception, is_recoverable_or_conflict, retry_transaction


def integrity_error():
    return IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))


def test_classification():
    assert is_recoverable_exception(OperationalError("SELECT 1", {}, Exception("database is locked")))
    assert is_recoverable_exception(TimeoutError())
    assert not is_recoverable_exception(integrity_error())
    assert is_recoverable_or_conflict(integrity_error())
    assert not is_recoverable_or_conflict(ValueError())


async def test_conflict_is_retried_until_success():
    calls = []

    @retry_transaction(attempts=3, base_delay=0, if_retryable=is_recoverable_or_conflict)
    async def unit_of_work():
        calls.append(1)
        if len(calls) < 3:
            raise integrity_error()
        return "done"

    assert await unit_of_work() == "done"
    assert len(calls) == 3


async def test_gives_up_after_attempts():
    calls = []

    @retry_transaction(attempts=2, base_delay=0)
    async def unit_of_work():
        calls.append(1)
        raise OperationalError("UPDATE", {}, Exception("database is locked"))

    with pytest.raises(OperationalError):
        await unit_of_work()
    assert len(calls) == 2


async def test_domain_errors_are_not_retried():
    calls = []

    @retry_transaction(attempts=5, base_delay=0, if_retryable=is_recoverable_or_conflict)
    async def unit_of_work():
        calls.append(1)
        raise ValueError("bad input")

    with pytest.raises(ValueError):
        await unit_of_work()
    assert len(calls) == 1
