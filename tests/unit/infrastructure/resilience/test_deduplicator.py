import asyncio

from reqflow.domain.models.request import RequestDescriptor, RequestIdentity
from reqflow.infrastructure.resilience.deduplicator import CancellationToken, RequestDeduplicator

STUDENTS = RequestIdentity.of(RequestDescriptor("GET", "/api/students"))


def test_register_supersedes_previous_token():
    dedupe = RequestDeduplicator()
    first = dedupe.register(STUDENTS)
    second = dedupe.register(STUDENTS)

    assert first.cancelled
    assert not second.cancelled
    assert dedupe.active_token(STUDENTS) is second
    assert len(dedupe) == 1


def test_release_with_stale_token_keeps_newer_call():
    dedupe = RequestDeduplicator()
    first = dedupe.register(STUDENTS)
    second = dedupe.register(STUDENTS)

    dedupe.release(STUDENTS, first)
    assert dedupe.active_token(STUDENTS) is second

    dedupe.release(STUDENTS, second)
    assert STUDENTS not in dedupe


def test_identity_ignores_body_but_not_params():
    with_body = RequestDescriptor("post", "/api/students", params={"a": [1, 2]}, body={"x": 1})
    other_body = RequestDescriptor("POST", "/api/students", params={"a": [1, 2]}, body={"x": 2})
    other_params = RequestDescriptor("POST", "/api/students", params={"a": [2, 1]})

    assert RequestIdentity.of(with_body) == RequestIdentity.of(other_body)
    assert RequestIdentity.of(with_body) != RequestIdentity.of(other_params)
    assert RequestIdentity.of(with_body).method == "POST"


def test_token_cancels_attached_call():
    async def scenario():
        token = CancellationToken(STUDENTS)
        call = asyncio.ensure_future(asyncio.sleep(10))
        token.attach(call)
        assert token.cancel()
        assert not token.cancel()
        await asyncio.sleep(0)
        return call

    call = asyncio.run(scenario())
    assert call.cancelled()


def test_attaching_to_cancelled_token_cancels_immediately():
    async def scenario():
        token = CancellationToken(STUDENTS)
        token.cancel()
        call = asyncio.ensure_future(asyncio.sleep(10))
        token.attach(call)
        await asyncio.sleep(0)
        return call

    assert asyncio.run(scenario()).cancelled()


def test_clear_forgets_without_cancelling():
    dedupe = RequestDeduplicator()
    token = dedupe.register(STUDENTS)
    dedupe.clear()
    assert len(dedupe) == 0
    assert not token.cancelled
