from unittest.mock import AsyncMock

import pytest
from limits.aio.storage import MemoryStorage

from gallery.models.schemas import ImageAnalysis
from gallery.services.errors import AiErrorKind, AiQueryError
from gallery.services.image_analysis import ImageAnalysisService
from gallery.services.rate_limit import AiRateLimiter
from gallery.services.text_generator import DisabledTextGenerator


@pytest.mark.asyncio
async def test_every_text_field_is_cleaned(fake_generator, png_base64):
    fake_generator.analysis = ImageAnalysis(
        title='  "Harbor Dusk"  ',
        caption="Boats resting at dusk.",
        tags=[" boat ", '"harbor"'],
        semantic_description="Fishing boats moored in a harbor at sunset.\n",
    )
    service = ImageAnalysisService(fake_generator, AiRateLimiter(storage=None))

    analysis = await service.analyze_image(png_base64)

    assert analysis.title == "Harbor Dusk"
    assert analysis.caption == "Boats resting at dusk"
    assert analysis.tags == ["boat", "harbor"]
    assert analysis.semantic_description == "Fishing boats moored in a harbor at sunset"


@pytest.mark.asyncio
async def test_disabled_generation_returns_empty_result(png_base64):
    service = ImageAnalysisService(DisabledTextGenerator(), AiRateLimiter(storage=None))

    analysis = await service.analyze_image(png_base64)

    assert analysis.title == ""
    assert analysis.caption == ""
    assert analysis.tags == []
    assert analysis.semantic_description == ""
    assert service.enabled is False


@pytest.mark.asyncio
async def test_disabled_generation_still_counts_against_quota(png_base64):
    service = ImageAnalysisService(
        DisabledTextGenerator(), AiRateLimiter(storage=MemoryStorage(), limit="1/hour")
    )

    await service.analyze_image(png_base64)
    with pytest.raises(AiQueryError) as exc_info:
        await service.analyze_image(png_base64)

    assert exc_info.value.kind is AiErrorKind.RATE_LIMIT_EXCEEDED


@pytest.mark.asyncio
async def test_exhausted_quota_skips_provider(fake_generator, png_base64):
    service = ImageAnalysisService(
        fake_generator, AiRateLimiter(storage=MemoryStorage(), limit="1/hour")
    )

    await service.analyze_image(png_base64)
    with pytest.raises(AiQueryError) as exc_info:
        await service.analyze_image(png_base64)

    assert exc_info.value.kind is AiErrorKind.RATE_LIMIT_EXCEEDED
    assert len(fake_generator.image_calls) == 1


@pytest.mark.asyncio
async def test_limiter_backend_failure_skips_provider(fake_generator, png_base64):
    limiter = AiRateLimiter(storage=MemoryStorage())
    limiter.strategy.hit = AsyncMock(side_effect=TimeoutError("kv timeout"))
    service = ImageAnalysisService(fake_generator, limiter)

    with pytest.raises(AiQueryError) as exc_info:
        await service.analyze_image(png_base64)

    assert exc_info.value.kind is AiErrorKind.RATE_LIMIT_BACKEND
    assert fake_generator.image_calls == []


@pytest.mark.asyncio
async def test_connection_test_is_rate_limited(fake_generator):
    service = ImageAnalysisService(
        fake_generator, AiRateLimiter(storage=MemoryStorage(), limit="1/hour")
    )

    assert await service.test_connection() == "pong"
    assert fake_generator.text_calls == ["Test connection"]
    with pytest.raises(AiQueryError):
        await service.test_connection()


@pytest.mark.asyncio
async def test_connection_test_when_disabled_returns_none():
    service = ImageAnalysisService(DisabledTextGenerator(), AiRateLimiter(storage=None))
    assert await service.test_connection() is None


@pytest.mark.asyncio
async def test_aclose_closes_generator(fake_generator):
    service = ImageAnalysisService(fake_generator, AiRateLimiter(storage=None))
    await service.aclose()
    assert fake_generator.closed is True


@pytest.mark.asyncio
async def test_tags_empty_after_cleanup_are_dropped(fake_generator, png_base64):
    fake_generator.analysis = ImageAnalysis(
        title="Harbor",
        caption="Boats at dusk",
        tags=["boat", '""', "  "],
        semantic_description="Boats.",
    )
    service = ImageAnalysisService(fake_generator, AiRateLimiter(storage=None))

    analysis = await service.analyze_image(png_base64)

    assert analysis.tags == ["boat"]
