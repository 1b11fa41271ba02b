import json

import httpx
import pytest

from recipe_vision.core.errors import ServiceError
from recipe_vision.image.encoder import EncodedPayload
from recipe_vision.llm.client import extract_text, send_request, to_gemini_payload
from recipe_vision.llm.provider_config import GEMINI_URL_TEMPLATE, MODEL_NAME
from recipe_vision.llm.service import build_request, generate_from_image


PAYLOAD = EncodedPayload(data="aGVsbG8=", media_type="image/jpeg")


def gemini_body(*texts):
    return {
        "candidates": [
            {
                "content": {"role": "model", "parts": [{"text": t} for t in texts]},
                "finishReason": "STOP",
            }
        ]
    }


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    return "test-key"


# ============================================================
# request construction
# ============================================================

def test_build_request_has_image_then_text():
    request = build_request(PAYLOAD, "Provide a recipe", model="gemini-test")

    assert request == {
        "model": "gemini-test",
        "content": [
            {"binaryData": {"mediaType": "image/jpeg", "data": "aGVsbG8="}},
            {"text": "Provide a recipe"},
        ],
    }


def test_build_request_defaults_to_configured_model():
    request = build_request(PAYLOAD, "x")
    assert request["model"] == MODEL_NAME


def test_gemini_payload_preserves_part_order():
    payload = to_gemini_payload(build_request(PAYLOAD, "Provide a recipe"))

    assert payload == {
        "contents": [
            {
                "role": "user",
                "parts": [
                    {"inlineData": {"mimeType": "image/jpeg", "data": "aGVsbG8="}},
                    {"text": "Provide a recipe"},
                ],
            }
        ]
    }


def test_gemini_payload_rejects_unknown_parts():
    with pytest.raises(ServiceError):
        to_gemini_payload({"model": "m", "content": [{"video": {}}]})


# ============================================================
# response parsing
# ============================================================

def test_extract_text_joins_parts():
    assert extract_text(gemini_body("Recipe: ", "bake it")) == "Recipe: bake it"


def test_extract_text_blocked_prompt():
    with pytest.raises(ServiceError, match="blocked due to SAFETY"):
        extract_text({"promptFeedback": {"blockReason": "SAFETY"}})


def test_extract_text_blocked_candidate():
    with pytest.raises(ServiceError, match="RECITATION"):
        extract_text({"candidates": [{"finishReason": "RECITATION"}]})


@pytest.mark.parametrize("body", [[], {}, {"candidates": ["x"]}, {"candidates": [{"content": {}}]}])
def test_extract_text_malformed(body):
    with pytest.raises(ServiceError, match="Malformed"):
        extract_text(body)


# ============================================================
# transport
# ============================================================

@pytest.mark.asyncio
async def test_send_request_posts_to_model_endpoint(api_key):
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["key"] = request.headers["x-goog-api-key"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=gemini_body("Recipe: scones"))

    text = await generate_from_image(
        PAYLOAD, "Provide a recipe", model="gemini-test", transport=httpx.MockTransport(handler)
    )

    assert text == "Recipe: scones"
    assert seen["url"] == GEMINI_URL_TEMPLATE.format(model="gemini-test")
    assert seen["key"] == api_key
    parts = seen["body"]["contents"][0]["parts"]
    assert [list(p) for p in parts] == [["inlineData"], ["text"]]


@pytest.mark.asyncio
async def test_send_request_non_success_includes_service_message(api_key):
    def handler(request):
        return httpx.Response(400, json={"error": {"code": 400, "message": "API key not valid."}})

    with pytest.raises(ServiceError) as excinfo:
        await send_request(build_request(PAYLOAD, "x"), transport=httpx.MockTransport(handler))

    assert str(excinfo.value) == "Generation request failed: [400 Bad Request] API key not valid."


@pytest.mark.asyncio
async def test_send_request_transport_failure(api_key):
    def handler(request):
        raise httpx.ConnectError("network unreachable")

    with pytest.raises(ServiceError, match="network unreachable"):
        await send_request(build_request(PAYLOAD, "x"), transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_send_request_non_json_body(api_key):
    def handler(request):
        return httpx.Response(200, text="<html>oops</html>")

    with pytest.raises(ServiceError, match="Malformed"):
        await send_request(build_request(PAYLOAD, "x"), transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_send_request_without_key(monkeypatch, tmp_path):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.setattr("recipe_vision.llm.client.GEMINI_KEY_FILE", str(tmp_path / "gemini.key"))
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=gemini_body("x"))

    with pytest.raises(ServiceError, match="KEY NOT FOUND"):
        await send_request(build_request(PAYLOAD, "x"), transport=httpx.MockTransport(handler))
    assert calls == []
