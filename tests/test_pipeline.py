import json

import httpx
import pytest

from recipe_vision.core.orchestrator import GenerationOrchestrator
from recipe_vision.core.state import SubmissionState, SubmissionStatus
from recipe_vision.llm.provider_config import DEFAULT_PROMPT, GEMINI_URL_TEMPLATE
from tests.conftest import CATALOG


IMAGE_BYTES = b"\xff\xd8\xff\xe0baked-goods"


@pytest.fixture
def gemini(monkeypatch, tmp_path):
    """Route every `httpx.AsyncClient` to a fake Gemini endpoint."""
    images = tmp_path / "assets" / "images"
    images.mkdir(parents=True)
    for item in CATALOG:
        (tmp_path / item.reference).write_bytes(IMAGE_BYTES)
    monkeypatch.setattr("recipe_vision.image.encoder.RESOURCE_BASE_DIR", str(tmp_path))
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")

    requests = []
    responses = []

    def handler(request):
        requests.append(request)
        return responses.pop(0)

    transport = httpx.MockTransport(handler)
    real_client = httpx.AsyncClient

    def client_factory(**kwargs):
        kwargs["transport"] = transport
        return real_client(**kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", client_factory)
    return requests, responses


@pytest.mark.asyncio
async def test_default_collaborators_end_to_end(gemini):
    requests, responses = gemini
    responses.append(httpx.Response(200, json={
        "candidates": [{"content": {"parts": [{"text": "Recipe: scones\nBake 12 min"}]}}]
    }))
    orchestrator = GenerationOrchestrator(catalog=CATALOG, model="gemini-test", strict_selection=False)
    orchestrator.select(CATALOG[1].reference)

    state = await orchestrator.submit()

    assert state == SubmissionState.succeeded("Recipe: scones\nBake 12 min")
    assert orchestrator.formatted_output == "Recipe: scones<br>Bake 12 min"
    assert orchestrator.in_flight is False

    assert len(requests) == 1
    request = requests[0]
    assert str(request.url) == GEMINI_URL_TEMPLATE.format(model="gemini-test")
    parts = json.loads(request.content)["contents"][0]["parts"]
    assert parts == [
        {"inlineData": {"mimeType": "image/jpeg", "data": "/9j/4GJha2VkLWdvb2Rz"}},
        {"text": DEFAULT_PROMPT},
    ]


@pytest.mark.asyncio
async def test_default_collaborators_missing_image(gemini):
    requests, _ = gemini
    orchestrator = GenerationOrchestrator(catalog=CATALOG, strict_selection=False)

    state = await orchestrator.submit("assets/images/missing.jpg")

    assert state == SubmissionState.failed("Error: Failed to fetch image: 404 Not Found")
    assert requests == []


@pytest.mark.asyncio
async def test_default_collaborators_service_error(gemini):
    _, responses = gemini
    responses.append(httpx.Response(503, json={"error": {"message": "The model is overloaded."}}))
    orchestrator = GenerationOrchestrator(catalog=CATALOG, strict_selection=False)

    state = await orchestrator.submit()

    assert state.status == SubmissionStatus.FAILED
    assert state.message == (
        "Error: Generation request failed: [503 Service Unavailable] The model is overloaded."
    )
