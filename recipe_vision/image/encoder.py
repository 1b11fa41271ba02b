"""Resource encoder: catalog reference -> base64 payload.

Processing flow:
    1. Resolve the reference (`http(s)://` URL, `file://` URL, or local path).
    2. Fetch raw bytes (streamed HTTP GET, or a file read off the event loop).
    3. Transcode to a data URL (`data:<mime>;base64,<data>`).
    4. Strip the data-URL prefix and return data and media type separately.

Base64 and temporary files:
    - Encoding is done in memory; no temporary files are written.
    - The returned `data` never carries the `data:...;base64,` prefix.

Path validation:
    - Relative paths are resolved against `RESOURCE_BASE_DIR`.
    - Local paths outside `RESOURCE_BASE_DIR` are refused.

Error handling strategy:
    - Missing resources, refused paths, transport failures, and non-success
      statuses raise `FetchError("Failed to fetch image: <status> <reason>")`.
    - Read failures on the byte stream and malformed transcoding output raise
      `EncodingError`.
    - No retries: a single failed fetch is terminal for the call.

Performance characteristics:
    - Whole resource is buffered in memory; catalog images are small.
"""

import asyncio
import base64
import logging
import mimetypes
import os
from dataclasses import dataclass
from urllib.parse import urlparse, unquote

import httpx

from recipe_vision.core.errors import EncodingError, FetchError
from recipe_vision.llm.provider_config import FETCH_TIMEOUT_SECONDS, RESOURCE_BASE_DIR


logger = logging.getLogger(__name__)

DEFAULT_MEDIA_TYPE = "image/jpeg"
DATA_URL_SCHEME = "data:"
BASE64_MARKER = ";base64"


@dataclass(frozen=True)
class EncodedPayload:
    """Transport-ready binary content.

    Attributes:
        data: Base64 text without any data-URL prefix.
        media_type: MIME type of the decoded bytes.
    """

    data: str
    media_type: str


@dataclass(frozen=True)
class Blob:
    content: bytes
    media_type: str


async def encode_resource(
    reference: str,
    transport: httpx.AsyncBaseTransport | None = None,
    base_dir: str | None = None,
) -> EncodedPayload:
    """Fetch `reference` and return its base64 payload.

    Args:
        reference: Catalog reference.
        transport: Optional `httpx` transport, used for remote references.
        base_dir: Override for `RESOURCE_BASE_DIR`.

    Raises:
        FetchError: Resource could not be retrieved.
        EncodingError: Bytes could not be read or transcoded.
    """
    blob = await fetch_resource(reference, transport=transport, base_dir=base_dir)
    data_url = await read_as_data_url(blob)
    payload = payload_from_data_url(data_url)
    logger.debug(
        "Encoded %s (%s, %d base64 chars)", reference, payload.media_type, len(payload.data)
    )
    return payload


async def fetch_resource(
    reference: str,
    transport: httpx.AsyncBaseTransport | None = None,
    base_dir: str | None = None,
) -> Blob:
    """Retrieve raw bytes and media type for `reference`."""
    if not reference:
        raise FetchError("Failed to fetch image: empty reference")

    scheme = urlparse(reference).scheme.lower()
    if scheme in ("http", "https"):
        return await _fetch_remote(reference, transport)

    return await _fetch_local(reference, base_dir or RESOURCE_BASE_DIR)


async def read_as_data_url(blob: Blob) -> str:
    """Transcode `blob` into a self-describing data URL."""
    try:
        encoded = await asyncio.to_thread(base64.b64encode, blob.content)
        return f"{DATA_URL_SCHEME}{blob.media_type}{BASE64_MARKER},{encoded.decode('ascii')}"
    except (TypeError, ValueError) as exc:
        raise EncodingError(f"Failed to encode image: {exc}") from exc


def payload_from_data_url(data_url: str) -> EncodedPayload:
    """Split a data URL into prefix-free base64 data and its media type."""
    if not data_url.startswith(DATA_URL_SCHEME) or "," not in data_url:
        raise EncodingError("Failed to encode image: malformed data URL")

    header, data = data_url.split(",", 1)
    if not header.endswith(BASE64_MARKER):
        raise EncodingError("Failed to encode image: data URL is not base64")

    media_type = header[len(DATA_URL_SCHEME):-len(BASE64_MARKER)] or DEFAULT_MEDIA_TYPE
    return EncodedPayload(data=data, media_type=media_type)


# ============================================================
# REMOTE
# ============================================================

async def _fetch_remote(url: str, transport: httpx.AsyncBaseTransport | None) -> Blob:
    try:
        async with httpx.AsyncClient(
            timeout=FETCH_TIMEOUT_SECONDS,
            follow_redirects=True,
            transport=transport,
        ) as client:
            async with client.stream("GET", url) as response:
                if not response.is_success:
                    raise FetchError(
                        f"Failed to fetch image: {response.status_code} {response.reason_phrase}"
                    )
                try:
                    content = await response.aread()
                except httpx.HTTPError as exc:
                    raise EncodingError(f"Failed to read image data: {exc}") from exc

    except httpx.HTTPError as exc:
        raise FetchError(f"Failed to fetch image: {exc}") from exc

    media_type = _media_type_from_header(response.headers.get("content-type"))
    return Blob(content, media_type or _guess_media_type(urlparse(url).path))


def _media_type_from_header(content_type: str | None) -> str | None:
    if not content_type:
        return None
    media_type = content_type.split(";", 1)[0].strip().lower()
    # Generic binary types say nothing useful about the image.
    if not media_type or media_type == "application/octet-stream":
        return None
    return media_type


# ============================================================
# LOCAL
# ============================================================

async def _fetch_local(reference: str, base_dir: str) -> Blob:
    path = _resolve_local_path(reference, base_dir)

    if not _is_allowed_path(path, base_dir):
        raise FetchError("Failed to fetch image: 403 Forbidden")

    if not os.path.isfile(path):
        raise FetchError("Failed to fetch image: 404 Not Found")

    try:
        content = await asyncio.to_thread(_read_bytes, path)
    except PermissionError as exc:
        raise FetchError("Failed to fetch image: 403 Forbidden") from exc
    except OSError as exc:
        raise EncodingError(f"Failed to read image data: {exc}") from exc

    return Blob(content, _guess_media_type(path))


def _resolve_local_path(reference: str, base_dir: str) -> str:
    if reference.startswith("file://"):
        parsed = urlparse(reference)
        if parsed.netloc not in ("", "localhost"):
            raise FetchError(f"Failed to fetch image: remote file host {parsed.netloc}")
        reference = unquote(parsed.path or "")

    expanded = os.path.expanduser(reference)
    if not os.path.isabs(expanded):
        expanded = os.path.join(base_dir, expanded)
    return os.path.realpath(expanded)


def _is_allowed_path(path: str, base_dir: str) -> bool:
    try:
        root = os.path.realpath(base_dir)
        return os.path.commonpath([path, root]) == root
    except ValueError:
        return False


def _read_bytes(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def _guess_media_type(path: str) -> str:
    media_type, _ = mimetypes.guess_type(path)
    return media_type or DEFAULT_MEDIA_TYPE
