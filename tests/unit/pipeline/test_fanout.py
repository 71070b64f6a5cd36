import asyncio
from typing import Any

import pytest

from dotcode_scanner.core.exceptions import ErrorKind, ExtractionError
from dotcode_scanner.core.types import (
    AnalysisResult,
    Failure,
    ImageInput,
    Result,
    Success,
)
from dotcode_scanner.credentials import CredentialResolver, InMemoryCredentialStore
from dotcode_scanner.pipeline.base import BaseAsyncHandler
from dotcode_scanner.pipeline.client_factory import ClientFactory
from dotcode_scanner.pipeline.extraction import ExtractionClient
from dotcode_scanner.pipeline.fanout import FanOutOrchestrator

pytestmark = pytest.mark.unit


def _orchestrator(adapter) -> FanOutOrchestrator:
    factory = ClientFactory(
        CredentialResolver("configured", InMemoryCredentialStore()), lambda _k: adapter
    )
    return FanOutOrchestrator(ExtractionClient(factory))


class ExplodingHandler(BaseAsyncHandler[ImageInput, AnalysisResult, ExtractionError]):
    """Violates the never-raise contract to prove the stage still settles."""

    async def handle(self, command: ImageInput) -> Result[AnalysisResult, ExtractionError]:
        if command.data == b"bad":
            raise RuntimeError("handler crashed")
        return Success(AnalysisResult(items=(), summary="ok"))


class NonResultHandler:
    async def handle(self, command: Any) -> Any:  # noqa: ARG002
        return "not a result"


@pytest.mark.asyncio
async def test_empty_input_returns_empty_tuple(fake_adapter):
    assert await _orchestrator(fake_adapter).run([]) == ()
    assert fake_adapter.calls == []


@pytest.mark.asyncio
async def test_outcomes_keep_input_order_when_completion_is_reversed(
    fake_adapter, reply
):
    images = [b"img-1", b"img-2", b"img-3"]
    fake_adapter.responses = {img: reply(img.decode()) for img in images}
    fake_adapter.delays = {b"img-1": 0.03, b"img-2": 0.02, b"img-3": 0.0}

    outcomes = await _orchestrator(fake_adapter).run(images)

    assert fake_adapter.completed == [b"img-3", b"img-2", b"img-1"]
    assert [o.value.items[0].dot_code for o in outcomes] == ["img-1", "img-2", "img-3"]


@pytest.mark.asyncio
async def test_all_requests_are_in_flight_together(fake_adapter, reply):
    started = asyncio.Event()
    in_flight = 0
    peak = 0

    async def slow_generate(**kwargs):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        if peak == 3:
            started.set()
        await asyncio.wait_for(started.wait(), timeout=1)
        in_flight -= 1
        return reply(kwargs["image"].decode())

    fake_adapter.generate = slow_generate  # type: ignore[method-assign]
    outcomes = await _orchestrator(fake_adapter).run([b"a", b"b", b"c"])

    assert peak == 3
    assert all(isinstance(o, Success) for o in outcomes)


@pytest.mark.asyncio
async def test_one_failure_does_not_abort_the_others(
    fake_adapter, reply, status_error
):
    fake_adapter.responses = {
        b"ok-1": reply("A1"),
        b"boom": status_error(404),
        b"ok-2": reply("B2"),
    }

    outcomes = await _orchestrator(fake_adapter).run([b"ok-1", b"boom", b"ok-2"])

    assert len(outcomes) == 3
    assert isinstance(outcomes[0], Success)
    assert isinstance(outcomes[1], Failure)
    assert outcomes[1].error.kind is ErrorKind.MODEL_UNAVAILABLE
    assert isinstance(outcomes[2], Success)


@pytest.mark.asyncio
async def test_raw_bytes_and_image_inputs_can_be_mixed(fake_adapter, reply):
    fake_adapter.default = reply("A1")
    images = [b"raw", ImageInput(data=b"png", mime_type="image/png")]

    await _orchestrator(fake_adapter).run(images)

    mime_types = sorted(call["mime_type"] for call in fake_adapter.calls)
    assert mime_types == ["image/jpeg", "image/png"]


@pytest.mark.asyncio
async def test_invalid_image_settles_as_failure(fake_adapter, reply):
    fake_adapter.default = reply("A1")
    outcomes = await _orchestrator(fake_adapter).run([b"", b"good"])

    assert isinstance(outcomes[0], Failure)
    assert isinstance(outcomes[0].error, ValueError)
    assert isinstance(outcomes[1], Success)
    assert [c["image"] for c in fake_adapter.calls] == [b"good"]


@pytest.mark.asyncio
async def test_raising_handler_is_settled():
    outcomes = await FanOutOrchestrator(ExplodingHandler()).run([b"bad", b"good"])
    assert isinstance(outcomes[0], Failure)
    assert str(outcomes[0].error) == "handler crashed"
    assert isinstance(outcomes[1], Success)


@pytest.mark.asyncio
async def test_non_result_value_becomes_failure():
    outcomes = await FanOutOrchestrator(NonResultHandler()).run([b"x"])  # type: ignore[arg-type]
    assert isinstance(outcomes[0], Failure)
    assert isinstance(outcomes[0].error, TypeError)
