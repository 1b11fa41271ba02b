"""Generation-service access package.

Architectural role:
    Provides configuration, request-payload construction, and the transport
    adapter the orchestrator uses to invoke the multimodal model.

Module split:
    - `provider_config`: environment-driven model, endpoint, and key configuration.
    - `service`: canonical image + instruction -> request adapter.
    - `client`: Gemini HTTP transport and response parsing.
"""
