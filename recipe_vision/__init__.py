"""Recipe Vision: image-grounded recipe generation.

Package layout:
    - `core`: selection state, submission state machine, orchestration, and
      output formatting.
    - `image`: resource fetching and base64 payload encoding.
    - `llm`: generation-service configuration, request construction, and
      transport.
    - `api`: HTTP and CLI adapters over the core session.
"""
