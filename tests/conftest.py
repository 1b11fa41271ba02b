import asyncio

import pytest

from recipe_vision.core.catalog import CatalogItem
from recipe_vision.core.orchestrator import GenerationOrchestrator
from recipe_vision.image.encoder import EncodedPayload


CATALOG = (
    CatalogItem("assets/images/baked_goods_1.jpg", "Baked Good 1"),
    CatalogItem("assets/images/baked_goods_2.jpg", "Baked Good 2"),
    CatalogItem("assets/images/baked_goods_3.jpg", "Baked Good 3"),
)


class FakeEncoder:
    """Records references; returns a fixed payload or raises `error`."""

    def __init__(self, error=None):
        self.error = error
        self.calls = []

    async def __call__(self, reference):
        self.calls.append(reference)
        if self.error is not None:
            raise self.error
        return EncodedPayload(data="aGVsbG8=", media_type="image/jpeg")


class FakeGenerator:
    """Records calls; returns `text`, raises `error`, or waits on `gate`."""

    def __init__(self, text="Recipe: flour, butter, sugar", error=None, gate=None):
        self.text = text
        self.error = error
        self.gate = gate
        self.calls = []

    async def __call__(self, payload, instruction, model=None):
        self.calls.append((payload, instruction, model))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def catalog():
    return CATALOG


@pytest.fixture
def encoder():
    return FakeEncoder()


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def orchestrator(encoder, generator):
    return GenerationOrchestrator(
        catalog=CATALOG,
        encoder=encoder,
        generator=generator,
        model="test-model",
        strict_selection=False,
    )


async def wait_until(predicate, attempts=50):
    """Yield to the event loop until `predicate()` holds."""
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")
