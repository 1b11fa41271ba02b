"""Payload adapter for image-grounded generation.

Architectural role:
    Provides the canonical request-construction entrypoint used by the
    orchestrator. This module bridges the encoded image and the user's
    instruction to transport (`recipe_vision.llm.client`).

Model call flow:
    payload + instruction -> `build_request(...)` -> `client.send_request(...)`.

Payload shape:
    `{"model": str, "content": [{"binaryData": {...}}, {"text": str}]}`
    Part order is significant: the image always precedes the instruction.

Determinism:
    Request construction is deterministic for fixed inputs and configuration.
    Generated output remains non-deterministic because inference runs remotely.
"""

from recipe_vision.image.encoder import EncodedPayload
from recipe_vision.llm.provider_config import MODEL_NAME
from recipe_vision.llm.client import send_request


def build_request(payload: EncodedPayload, instruction: str, model: str | None = None) -> dict:
    """Build the two-part multimodal request.

    Args:
        payload: Encoded image (prefix-free base64 plus media type).
        instruction: Free-form user instruction, forwarded verbatim.
        model: Model identifier; defaults to `MODEL_NAME`.

    Returns:
        Provider-agnostic request dict consumed by `client.send_request`.
    """
    return {
        "model": model or MODEL_NAME,
        "content": [
            {
                "binaryData": {
                    "mediaType": payload.media_type,
                    "data": payload.data,
                }
            },
            {"text": instruction},
        ],
    }


async def generate_from_image(
    payload: EncodedPayload,
    instruction: str,
    model: str | None = None,
    transport=None,
) -> str:
    """Invoke the configured model on one image and one instruction.

    Returns:
        Generated text.

    Failure scenarios:
        Transport/provider failures surface as `ServiceError` raised by
        `client.send_request`.
    """
    request = build_request(payload, instruction, model=model)
    return await send_request(request, transport=transport)
