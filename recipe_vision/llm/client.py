"""Gemini transport client for generation requests.

Architectural role:
    Executes one HTTP request against the Gemini `generateContent` endpoint and
    normalizes the response into plain text.

Model invocation flow:
    `service.generate_from_image` -> `send_request(request)` -> payload remap to
    Gemini `contents` -> POST -> parsed text.

Retry behavior:
    No retry loop is implemented. Each call is attempted once. The timeout is
    `GENERATION_TIMEOUT_SECONDS` and unbounded when unset.

Failure handling model:
    Every failure (missing key, transport error, non-success status, blocked
    prompt, malformed body) raises `ServiceError` with a human-readable
    message. Classification into the user-visible string happens in the
    orchestrator.
"""

import json
import logging

import httpx

from recipe_vision.core.errors import ServiceError
from recipe_vision.llm.provider_config import (
    GEMINI_KEY_FILE,
    GEMINI_URL_TEMPLATE,
    GENERATION_TIMEOUT_SECONDS,
    MODEL_NAME,
    load_key,
)


logger = logging.getLogger(__name__)


def to_gemini_payload(request: dict) -> dict:
    """Remap a provider-agnostic request to the Gemini `contents` schema.

    `binaryData` parts become `inlineData`; `text` parts pass through. Part
    order is preserved.

    Raises:
        ServiceError: For parts that are neither binary nor text.
    """
    parts = []
    for part in request.get("content", []):
        if "binaryData" in part:
            binary = part["binaryData"]
            parts.append({
                "inlineData": {
                    "mimeType": binary["mediaType"],
                    "data": binary["data"],
                }
            })
        elif "text" in part:
            parts.append({"text": str(part["text"])})
        else:
            raise ServiceError(f"Unsupported request part: {sorted(part)}")

    return {
        "contents": [
            {
                "role": "user",
                "parts": parts,
            }
        ]
    }


def extract_text(data) -> str:
    """Return the concatenated text of the first candidate.

    Raises:
        ServiceError: When the prompt was blocked or the body has no text.
    """
    if not isinstance(data, dict):
        raise ServiceError("Malformed response from generation service")

    candidates = data.get("candidates") or []
    if not candidates:
        block_reason = (data.get("promptFeedback") or {}).get("blockReason")
        if block_reason:
            raise ServiceError(f"Text not available. Response was blocked due to {block_reason}")
        raise ServiceError("Malformed response from generation service: no candidates")

    candidate = candidates[0]
    if not isinstance(candidate, dict):
        raise ServiceError("Malformed response from generation service")

    parts = (candidate.get("content") or {}).get("parts") or []
    texts = [p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str)]

    if not texts:
        finish_reason = candidate.get("finishReason")
        if finish_reason and finish_reason not in ("STOP", "MAX_TOKENS"):
            raise ServiceError(f"Text not available. Response was blocked due to {finish_reason}")
        raise ServiceError("Malformed response from generation service: no text")

    return "".join(texts)


def _error_detail(response: httpx.Response) -> str | None:
    """Pull the service's own error message out of an error body."""
    try:
        body = response.json()
    except (json.JSONDecodeError, ValueError):
        return None
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return body["error"].get("message")
    return None


async def send_request(request: dict, transport: httpx.AsyncBaseTransport | None = None) -> str:
    """Send one generation request and return the response text.

    Args:
        request: Provider-agnostic request produced by `service.build_request`.
        transport: Optional `httpx` transport override.

    Returns:
        Generated text.

    Raises:
        ServiceError: On any failure.
    """
    api_key = load_key(GEMINI_KEY_FILE)
    if not api_key:
        raise ServiceError("GEMINI API KEY NOT FOUND")

    url = GEMINI_URL_TEMPLATE.format(model=request.get("model") or MODEL_NAME)

    headers = {
        "x-goog-api-key": api_key,
        "Content-Type": "application/json",
    }

    gemini_payload = to_gemini_payload(request)

    try:
        async with httpx.AsyncClient(
            timeout=GENERATION_TIMEOUT_SECONDS,
            transport=transport,
        ) as client:
            response = await client.post(url, headers=headers, json=gemini_payload)
    except httpx.HTTPError as exc:
        logger.error("Generation request failed: %s", exc)
        raise ServiceError(f"Generation request failed: {exc}") from exc

    if not response.is_success:
        detail = _error_detail(response)
        message = f"[{response.status_code} {response.reason_phrase}]"
        if detail:
            message = f"{message} {detail}"
        raise ServiceError(f"Generation request failed: {message}")

    try:
        data = response.json()
    except (json.JSONDecodeError, ValueError) as exc:
        raise ServiceError("Malformed response from generation service") from exc

    return extract_text(data)
