"""Provider/runtime configuration for the generation layer.

Architectural role:
    Centralizes model selection, endpoint, timeouts, and credential lookup for
    `recipe_vision.llm.service`, `recipe_vision.llm.client`, and the resource
    encoder.

Determinism:
    Deterministic for a fixed process environment and key files. Values are
    resolved at import time (plus runtime key-file reads in `load_key`).

Failure behavior:
    Missing key material is represented as `None` and turned into a
    `ServiceError` by `client`.
"""

import os
from dotenv import load_dotenv

load_dotenv()

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def _optional_float(name):
    """Read a float env var; unset or empty means `None`."""
    value = os.getenv(name, "").strip()
    return float(value) if value else None


# Primary model routing controls.
MODEL_NAME = os.getenv("MODEL_NAME", "gemini-1.5-flash")

GEMINI_URL_TEMPLATE = os.getenv(
    "GEMINI_URL_TEMPLATE",
    "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent",
)

GEMINI_KEY_FILE = os.getenv("GEMINI_KEY_FILE", "config/gemini.key")

# No timeout unless configured: a hung call stays in flight.
GENERATION_TIMEOUT_SECONDS = _optional_float("GENERATION_TIMEOUT_SECONDS")
FETCH_TIMEOUT_SECONDS = _optional_float("FETCH_TIMEOUT_SECONDS")

# Instruction shown in the prompt field before the user edits it.
DEFAULT_PROMPT = os.getenv(
    "DEFAULT_PROMPT",
    "Provide an example recipe for the baked goods in the image",
)

# Reject selections that are not catalog references.
STRICT_SELECTION = os.getenv("STRICT_SELECTION", "false").strip().lower() == "true"

# Relative image references are resolved against this directory.
RESOURCE_BASE_DIR = os.path.realpath(os.getenv("RESOURCE_BASE_DIR", PROJECT_ROOT))


def load_key(path):
    """Load API key from environment override or key file.

    Resolution order:
        1. Environment variable inferred from file stem (for example
           `config/gemini.key` -> `GEMINI_API_KEY`).
        2. Raw file contents at `path`.

    Args:
        path: Configured key file path or `None`.

    Returns:
        Key string or `None` when not available.

    Edge cases:
        - `None` path returns `None`.
        - Missing or empty file returns `None`.
    """
    if not path:
        return None
    key_name = os.path.splitext(os.path.basename(path))[0].upper() + "_API_KEY"
    env_value = os.getenv(key_name)
    if env_value:
        return env_value
    if not os.path.exists(path):
        return None
    with open(path, "r") as f:
        return f.read().strip() or None
