from unittest.mock import AsyncMock

import pytest
from limits.aio.storage import MemoryStorage

from gallery.config import Settings
from gallery.services.errors import AiErrorKind, AiQueryError
from gallery.services.rate_limit import AiRateLimiter, async_storage_uri, build_rate_limiter


@pytest.mark.asyncio
async def test_no_storage_never_limits():
    limiter = AiRateLimiter(storage=None, limit="1/hour")
    assert limiter.enabled is False
    for _ in range(5):
        await limiter.check()


@pytest.mark.asyncio
async def test_allows_up_to_quota_then_raises_exceeded():
    limiter = AiRateLimiter(storage=MemoryStorage(), limit="2/hour")

    await limiter.check()
    await limiter.check()
    with pytest.raises(AiQueryError) as exc_info:
        await limiter.check()

    assert exc_info.value.kind is AiErrorKind.RATE_LIMIT_EXCEEDED
    assert str(exc_info.value) == "AI text generation rate limit exceeded"


@pytest.mark.asyncio
async def test_quota_is_global_for_the_identifier():
    storage = MemoryStorage()
    first = AiRateLimiter(storage=storage, limit="1/hour")
    second = AiRateLimiter(storage=storage, limit="1/hour")

    await first.check()
    with pytest.raises(AiQueryError):
        await second.check()


@pytest.mark.asyncio
async def test_backend_failure_raises_backend_error():
    limiter = AiRateLimiter(storage=MemoryStorage())
    limiter.strategy.hit = AsyncMock(side_effect=ConnectionError("redis down"))

    with pytest.raises(AiQueryError) as exc_info:
        await limiter.check()

    assert exc_info.value.kind is AiErrorKind.RATE_LIMIT_BACKEND
    assert isinstance(exc_info.value.__cause__, ConnectionError)


def test_default_quota_is_100_per_hour():
    limiter = AiRateLimiter(storage=None)
    assert limiter.identifier == "openai-image-query"
    assert limiter.item.amount == 100
    assert limiter.item.get_expiry() == 3600


@pytest.mark.parametrize(
    "kv_url, expected",
    [
        ("redis://localhost:6379", "async+redis://localhost:6379"),
        ("rediss://user:pw@host:6380", "async+rediss://user:pw@host:6380"),
        ("async+redis://localhost", "async+redis://localhost"),
    ],
)
def test_async_storage_uri(kv_url, expected):
    assert async_storage_uri(kv_url) == expected


def test_build_without_kv_store_is_disabled():
    limiter = build_rate_limiter(Settings(env={}))
    assert limiter.enabled is False


def test_build_with_kv_store_is_enabled():
    limiter = build_rate_limiter(Settings(env={"KV_URL": "memory://"}))
    assert limiter.enabled is True
    assert limiter.item.amount == 100
