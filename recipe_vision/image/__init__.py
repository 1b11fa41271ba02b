"""Image resource package.

Scope:
    Resolves catalog references to raw bytes and encodes them as base64
    payloads for multimodal requests.

Non-goals:
    - No image decoding, resizing, or validation of pixel content.
    - No caching of fetched resources.
"""
